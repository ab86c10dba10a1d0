from fastapi import APIRouter, Response, status, Depends
from sqlalchemy.orm import Session
from eventify.database import get_db
from eventify.deps import get_current_user, require_admin
from eventify.models.user_model import User
from eventify.exceptions import EventifyError
from eventify.response_model import ResponseModel, ErrorResponseModel, DomainErrorResponse, ServerErrorResponse
from eventify.controller.qrcode_event_controller import check_in_controller, retrieve_ticket_code, make_qr_png

router = APIRouter()


@router.get("/verify/{qr_text}", response_description="Verification completed successfully")
async def verification_of_qr_code(response: Response, qr_text: str,
                                  admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        verification = await check_in_controller(db, qr_text)
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to verify ticket")
    if verification["status"] == "valid":
        return ResponseModel(verification, "Verified")
    response.status_code = status.HTTP_409_CONFLICT
    return ErrorResponseModel(verification["status"], 409, verification["message"])


@router.get("/ticket/{event_id}", response_description="QR code of the user's ticket")
async def get_ticket_qr(response: Response, event_id: int,
                        user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        ticket_code = await retrieve_ticket_code(db, user.id, event_id)
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    return Response(content=make_qr_png(ticket_code), media_type="image/png")


__all__ = ["router"]
