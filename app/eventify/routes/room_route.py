from fastapi import APIRouter, Response, status, Depends, Body
from sqlalchemy.orm import Session
from eventify.database import get_db
from eventify.deps import get_current_user, require_admin
from eventify.models.user_model import User
from eventify.schema.room_schema import RoomCreate, RoomUpdate
from eventify.exceptions import EventifyError
from eventify.response_model import ResponseModel, DomainErrorResponse, ServerErrorResponse
from eventify.controller.room_controller import (retrieve_rooms,
                                                 retrieve_room,
                                                 add_room,
                                                 update_room,
                                                 delete_room)

router = APIRouter()


@router.get("/all", response_description="Retrieve rooms")
async def get_rooms(available_only: bool = False, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rooms = await retrieve_rooms(db, available_only)
    return ResponseModel(rooms, "Rooms retrieved successfully")


@router.get("/{room_id}", response_description="Retrieve a room")
async def get_room(response: Response, room_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        room = await retrieve_room(db, room_id)
        return ResponseModel(room, "Room retrieved successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)


@router.post("/add", response_description="Add a room")
async def add_room_data(response: Response, room: RoomCreate = Body(...),
                        admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        new_room = await add_room(db, room.model_dump())
        response.status_code = status.HTTP_201_CREATED
        return ResponseModel(new_room, "Room added successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to add room")


@router.put("/update/{room_id}", response_description="Update a room")
async def update_room_data(response: Response, room_id: int, update_data: RoomUpdate = Body(...),
                           admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        updated_room = await update_room(db, room_id, update_data.model_dump(exclude_unset=True))
        return ResponseModel(updated_room, "Room updated successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update room")


@router.delete("/{room_id}", response_description="Delete a room")
async def delete_room_data(response: Response, room_id: int,
                           admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        deleted_room = await delete_room(db, room_id)
        return ResponseModel(deleted_room, "Room deleted successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)


__all__ = ["router"]
