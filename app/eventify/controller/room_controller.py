import logging
from sqlalchemy.orm import Session
from eventify.models.room_model import Room
from eventify.models.event_model import Event
from eventify.exceptions import NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)


def _ensure_unique_name(db: Session, name: str, exclude_room_id: int = None):
    query = db.query(Room).filter(Room.name == name)
    if exclude_room_id is not None:
        query = query.filter(Room.id != exclude_room_id)
    if query.first():
        raise ValidationFailedError(f"A room named {name} already exists")


async def retrieve_rooms(db: Session, available_only: bool = False):
    query = db.query(Room)
    if available_only:
        query = query.filter(Room.available.is_(True))
    return query.order_by(Room.name.asc()).all()


async def retrieve_room(db: Session, room_id: int):
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFoundError(f"Room {room_id} not found")
    return room


async def add_room(db: Session, room_data: dict):
    name = (room_data.get("name") or "").strip()
    if not name:
        raise ValidationFailedError("Room name is required")
    _ensure_unique_name(db, name)

    room = Room(**{**room_data, "name": name})
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


async def update_room(db: Session, room_id: int, update_data: dict):
    room = await retrieve_room(db, room_id)
    if "name" in update_data:
        update_data["name"] = (update_data["name"] or "").strip()
        if not update_data["name"]:
            raise ValidationFailedError("Room name is required")
        _ensure_unique_name(db, update_data["name"], exclude_room_id=room.id)

    for key, val in update_data.items():
        setattr(room, key, val)
    db.commit()
    db.refresh(room)
    return room


async def delete_room(db: Session, room_id: int):
    room = await retrieve_room(db, room_id)
    deleted = {"id": room.id, "name": room.name}

    # Events keep their own location text once the room is gone
    db.query(Event).filter(Event.room_id == room.id).update({Event.room_id: None}, synchronize_session=False)
    db.delete(room)
    db.commit()
    logger.info("Room %s deleted", room_id)
    return deleted
