from fastapi import (
    APIRouter, Response, status,
    Form, File, UploadFile, Depends, Body
)
from sqlalchemy.orm import Session
from eventify.database import get_db
from eventify.deps import get_current_user, require_student
from eventify.models.user_model import User
from eventify.schema.user_schema import ProfileUpdate
from eventify.exceptions import EventifyError
from eventify.response_model import ResponseModel, DomainErrorResponse, ServerErrorResponse
from eventify.controller.upload_handler import save_upload, discard_upload
from eventify.controller.user_controller import (sign_up,
                                                 sign_in,
                                                 user_public_dict,
                                                 update_profile,
                                                 change_password,
                                                 delete_account,
                                                 initiate_password_reset_otp,
                                                 verify_reset_otp_controller,
                                                 password_reset_controller)
from eventify.controller.registration_controller import get_user_registrations
from eventify.controller.dashboard_controller import student_dashboard_stats
from eventify.controller.certificate_controller import retrieve_certificates, generate_certificate

router = APIRouter()


# ----------------------- SIGN UP -----------------------
@router.post("/signup", response_description="Create a student account")
async def signup(
    response: Response,
    display_name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    student_id: str = Form(...),
    session: str = Form(...),
    phone: str = Form(None),
    department: str = Form(None),
    avatar: UploadFile = File(None),
    db: Session = Depends(get_db)
):
    avatar_url = None
    try:
        avatar_url = save_upload(avatar, "users")
        new_user = await sign_up(db, display_name, email, password, student_id, session,
                                 phone=phone or None, department=department or None, avatar_url=avatar_url)
        response.status_code = status.HTTP_201_CREATED
        return ResponseModel(user_public_dict(new_user), "Account created successfully")
    except EventifyError as e:
        discard_upload(avatar_url)
        return DomainErrorResponse(response, e)
    except Exception as e:
        discard_upload(avatar_url)
        return ServerErrorResponse(response, db, e, "Failed to create account")


# ----------------------- LOGIN / LOGOUT -----------------------
@router.post("/login", response_description="User login")
async def login(response: Response, email: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    try:
        result = await sign_in(db, email, password)
        return ResponseModel(result, "Successfully logged in")
    except EventifyError as e:
        return DomainErrorResponse(response, e)


@router.post("/logout", response_description="User logout")
async def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy
    return ResponseModel({"id": user.id}, "Successfully logged out")


# ----------------------- PROFILE -----------------------
@router.get("/me", response_description="Current user")
async def get_me(user: User = Depends(get_current_user)):
    return ResponseModel(user_public_dict(user), "User retrieved successfully")


@router.put("/profile", response_description="Update profile")
async def update_my_profile(
    response: Response,
    update_data: ProfileUpdate = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        updated_user = await update_profile(db, user, update_data.model_dump(exclude_unset=True))
        return ResponseModel(user_public_dict(updated_user), "Profile updated successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update profile")


@router.put("/password", response_description="Change password")
async def update_password(
    response: Response,
    current_password: str = Form(...),
    new_password: str = Form(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        await change_password(db, user, current_password, new_password)
        return ResponseModel(None, "Password updated successfully")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to update password")


@router.delete("/me", response_description="Delete account")
async def delete_my_account(response: Response, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = await delete_account(db, user)
        return ResponseModel(deleted, "Account deleted successfully")
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to delete account")


# ----------------------- PASSWORD RESET -----------------------
@router.post("/password/forgot", response_description="Send OTP for password reset")
async def forgot_password(response: Response, email: str = Form(...), db: Session = Depends(get_db)):
    try:
        await initiate_password_reset_otp(db, email, "user")
        return ResponseModel(
            {"email": email},
            "If this email is registered, an OTP has been sent for password reset."
        )
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to send password reset OTP")


@router.post("/password/verify", response_description="Verify OTP for password reset")
async def verify_reset_otp(response: Response, email: str = Form(...), otp: str = Form(...), db: Session = Depends(get_db)):
    try:
        result = await verify_reset_otp_controller(db, email, otp, "user")
        return ResponseModel(result, "OTP verified successfully. Proceed to reset password.")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to verify OTP")


@router.post("/password/reset", response_description="Reset password with OTP")
async def handle_password_reset(
    response: Response,
    email: str = Form(...),
    otp: str = Form(...),
    new_password: str = Form(...),
    db: Session = Depends(get_db)
):
    try:
        result = await password_reset_controller(db, email, otp, new_password, "user")
        return ResponseModel(result, "Password reset successfully. You can now log in.")
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    except Exception as e:
        return ServerErrorResponse(response, db, e, "Failed to reset password")


# ----------------------- STUDENT DASHBOARD -----------------------
@router.get("/registrations", response_description="Events the user registered for")
async def my_registrations(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    registrations = await get_user_registrations(db, user.id)
    return ResponseModel(registrations, "Registrations retrieved successfully")


@router.get("/dashboard", response_description="Student dashboard statistics")
async def my_dashboard(user: User = Depends(require_student), db: Session = Depends(get_db)):
    stats = await student_dashboard_stats(db, user.id)
    return ResponseModel(stats, "Dashboard statistics retrieved successfully")


# ----------------------- CERTIFICATES -----------------------
@router.get("/certificates", response_description="Events with a certificate")
async def my_certificates(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    certificates = await retrieve_certificates(db, user.id)
    return ResponseModel(certificates, "Certificates retrieved successfully")


@router.get("/certificates/{event_id}", response_description="Download a certificate")
async def download_certificate(response: Response, event_id: int,
                               user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        filename, pdf_bytes = await generate_certificate(db, user, event_id)
    except EventifyError as e:
        return DomainErrorResponse(response, e)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["router"]
