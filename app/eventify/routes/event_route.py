from fastapi import (
    APIRouter, Response, status, WebSocket, WebSocketDisconnect,
    Form, File, UploadFile, Depends, Body, Query
)
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
from eventify.database import get_db
from eventify.deps import get_current_user, require_admin, require_student
from eventify.models.user_model import User
from eventify.schema.event_schema import (EventUpdate,
                                          EventStatusUpdate,
                                          BulkEventIds,
                                          BulkStatusUpdate,
                                          AttendanceUpdate)
from eventify.exceptions import EventifyError, ValidationFailedError
from eventify.response_model import ResponseModel, DomainErrorResponse, ServerErrorResponse
from eventify.constant_file import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from eventify.controller.ws_manager import event_manager
from eventify.controller.upload_handler import save_upload, discard_upload
from eventify.controller.event_controller import (add_event_controller,
                                                  retrieve_event_controller,
                                                  list_events_controller,
                                                  retrieve_upcoming_events_controller,
                                                  retrieve_admin_events_controller,
                                                  update_event_controller,
                                                  update_event_status_controller,
                                                  duplicate_event_controller,
                                                  delete_event_controller,
                                                  bulk_delete_events_controller,
                                                  bulk_update_status_controller,
                                                  find_scheduling_conflicts,
                                                  retrieve_event_seat_availability,
                                                  to_naive_utc)
from eventify.controller.registration_controller import (register_for_event,
                                                         unregister_from_event,
                                                         is_user_registered,
                                                         get_event_attendees,
                                                         set_attendance)
from eventify.controller.dashboard_controller import admin_dashboard_stats

router = APIRouter()


# ----------------------- BROWSE -----------------------
@router.get("/all", response_description="Browse public events")
async def get_events(
    response: Response,
    category: Optional[str] = None,
    location: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    date_filter: Optional[str] = None,
    cursor: Optional[int] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    try:
        page = await list_events_controller(db, category, location, start_date, end_date,
                                            search, date_filter, cursor, limit)
        return ResponseModel(page, "Events retrieved successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)


@router.get("/upcoming", response_description="Upcoming public events")
async def get_upcoming_events(limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                              db: Session = Depends(get_db)):
    events = await retrieve_upcoming_events_controller(db, limit)
    return ResponseModel(events, "Upcoming events retrieved successfully")


# ----------------------- ADMIN VIEWS -----------------------
@router.get("/admin/mine", response_description="Events created by the admin")
async def get_my_events(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    events = await retrieve_admin_events_controller(db, admin.id)
    return ResponseModel(events, "Events retrieved successfully")


@router.get("/admin/stats", response_description="Admin dashboard statistics")
async def get_admin_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    stats = await admin_dashboard_stats(db, admin.id)
    return ResponseModel(stats, "Dashboard statistics retrieved successfully")


@router.get("/conflicts", response_description="Room scheduling conflicts")
async def get_conflicts(
    response: Response,
    room_id: int,
    start_at: datetime,
    end_at: datetime,
    exclude_event_id: Optional[int] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start_at, end_at = to_naive_utc(start_at), to_naive_utc(end_at)
    if end_at <= start_at:
        return DomainErrorResponse(response, ValidationFailedError("Event end time must be after its start time"))
    conflicts = find_scheduling_conflicts(db, room_id, start_at, end_at, exclude_event_id)
    return ResponseModel({"has_conflict": bool(conflicts), "conflicts": conflicts}, "Conflict check completed")


# ----------------------- BULK -----------------------
@router.post("/bulk/delete", response_description="Delete several events")
async def bulk_delete(response: Response, payload: BulkEventIds = Body(...),
                      admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        result = await bulk_delete_events_controller(db, payload.event_ids)
        return ResponseModel(result, f"Deleted {result['success_count']} event(s)")
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to delete events")


@router.put("/bulk/status", response_description="Update the status of several events")
async def bulk_status(response: Response, payload: BulkStatusUpdate = Body(...),
                      admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        result = await bulk_update_status_controller(db, payload.event_ids, payload.status)
        return ResponseModel(result, f"Updated {result['success_count']} event(s)")
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update events")


# ----------------------- ADD Event -----------------------
@router.post("/add", response_description="Create a new event")
async def add_event_data(
    response: Response,
    title: str = Form(...),
    start_at: datetime = Form(...),
    end_at: datetime = Form(...),
    description: str = Form(None),
    location: str = Form(None),
    room_id: int = Form(None),
    category: str = Form(None),
    visibility: str = Form("public"),
    capacity: int = Form(None),
    status_value: str = Form("upcoming", alias="status"),
    registration_deadline: datetime = Form(None),
    image: UploadFile = File(None, description="Optional banner image for the event."),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    image_url = None
    try:
        image_url = save_upload(image, "events")
        event_data = {
            "title": title,
            "description": description,
            "start_at": start_at,
            "end_at": end_at,
            "location": location,
            "room_id": room_id,
            "category": category,
            "visibility": visibility,
            "capacity": capacity,
            "status": status_value,
            "registration_deadline": registration_deadline,
            "image_url": image_url,
        }
        new_event = await add_event_controller(db, event_data, admin.id)
        response.status_code = status.HTTP_201_CREATED
        return ResponseModel(new_event, "Event created successfully")
    except EventifyError as e:
        discard_upload(image_url)
        return DomainErrorResponse(response, e)
    except Exception as e:
        discard_upload(image_url)
        return ServerErrorResponse(response, db, e, "An unexpected error occurred during event creation")


# ----------------------- SINGLE EVENT -----------------------
@router.get("/{event_id}", response_description="Retrieve an event")
async def get_event(response: Response, event_id: int, db: Session = Depends(get_db)):
    try:
        event = await retrieve_event_controller(db, event_id)
        return ResponseModel(event, "Event retrieved successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)


@router.put("/update/{event_id}", response_description="Update an event")
async def update_event(response: Response, event_id: int, update_data: EventUpdate = Body(...),
                       admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        updated_event = await update_event_controller(db, event_id, update_data.model_dump(exclude_unset=True))
        return ResponseModel(updated_event, "Event updated successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update event")


@router.put("/status/{event_id}", response_description="Change an event's status")
async def update_event_status(response: Response, event_id: int, payload: EventStatusUpdate = Body(...),
                              admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        updated_event = await update_event_status_controller(db, event_id, payload.status)
        return ResponseModel(updated_event, f"Event marked {payload.status}")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update event status")


@router.post("/duplicate/{event_id}", response_description="Duplicate an event")
async def duplicate_event(response: Response, event_id: int,
                          admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        new_event = await duplicate_event_controller(db, event_id, admin.id)
        response.status_code = status.HTTP_201_CREATED
        return ResponseModel(new_event, "Event duplicated successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to duplicate event")


@router.delete("/{event_id}", response_description="Delete an event")
async def delete_event(response: Response, event_id: int,
                       admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        deleted_event = await delete_event_controller(db, event_id)
        return ResponseModel(deleted_event, "Event deleted successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to delete event")


@router.get("/seats/{event_id}", response_description="Seat availability")
async def get_event_seats(response: Response, event_id: int, db: Session = Depends(get_db)):
    try:
        seats = await retrieve_event_seat_availability(db, event_id)
        return ResponseModel(seats, "Retrieved event seats")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to retrieve event seats")


# ----------------------- REGISTRATION -----------------------
@router.post("/{event_id}/register", response_description="Register for an event")
async def register(response: Response, event_id: int,
                   user: User = Depends(require_student), db: Session = Depends(get_db)):
    try:
        result = await register_for_event(db, user, event_id)
        response.status_code = status.HTTP_201_CREATED
        return ResponseModel(result, "Registered successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to register for event")


@router.delete("/{event_id}/register", response_description="Cancel a registration")
async def unregister(response: Response, event_id: int,
                     user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        result = await unregister_from_event(db, user, event_id)
        return ResponseModel(result, "Unregistered successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to unregister from event")


@router.get("/{event_id}/registered", response_description="Whether the user is registered")
async def registration_status(event_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    registered = await is_user_registered(db, user.id, event_id)
    return ResponseModel({"event_id": event_id, "registered": registered}, "Registration status retrieved")


@router.get("/{event_id}/attendees", response_description="Attendee list")
async def get_attendees(response: Response, event_id: int,
                        admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        attendees = await get_event_attendees(db, event_id)
        return ResponseModel(attendees, "Attendees retrieved successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to retrieve attendees")


@router.put("/{event_id}/attendance/{user_id}", response_description="Mark attendance")
async def mark_attendance(response: Response, event_id: int, user_id: int, payload: AttendanceUpdate = Body(...),
                          admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        attendee = await set_attendance(db, event_id, user_id, payload.attended)
        return ResponseModel(attendee, "Attendance updated")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update attendance")


# ----------------------- WEBSOCKET -----------------------
@router.websocket("/ws")
async def websocket_events(websocket: WebSocket):
    await event_manager.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        event_manager.disconnect(websocket)


__all__ = ["router"]
