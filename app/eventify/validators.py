import re
from eventify.exceptions import ValidationFailedError

EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d@$!%*#?&]{8,}$")
# Local mobile numbers, optionally with the country prefix
PHONE_PATTERN = re.compile(r"^(?:\+?88)?01[1-9]\d{8}$")


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def is_valid_phone(phone: str) -> bool:
    return bool(phone) and bool(PHONE_PATTERN.match(phone))


def validate_signup(display_name: str, email: str, password: str, student_id: str, session: str, phone: str = None):
    if not display_name or len(display_name.strip()) < 2:
        raise ValidationFailedError("Full name must be at least 2 characters")
    if re.match(r"[^@]+@[^@]+\.[^@]+", display_name):
        raise ValidationFailedError("Full name should not be an email")
    if not is_valid_email(email):
        raise ValidationFailedError(f"Invalid email: {email}")
    if not student_id or len(student_id.strip()) < 3:
        raise ValidationFailedError("Student ID must be at least 3 characters")
    if not session or not session.strip():
        raise ValidationFailedError("Academic session is required")
    if not password or not PASSWORD_PATTERN.match(password):
        raise ValidationFailedError("Password must be at least 8 characters and contain at least 1 letter and 1 number")
    if phone and not is_valid_phone(phone):
        raise ValidationFailedError("Invalid phone number format")


def validate_profile(profile: dict, role: str):
    """Checks the merged profile a user would end up with after an edit."""
    if not (profile.get("display_name") or "").strip():
        raise ValidationFailedError("Full name is required")
    if role == "student":
        if not (profile.get("student_id") or "").strip():
            raise ValidationFailedError("Student ID is required")
        if not (profile.get("session") or "").strip():
            raise ValidationFailedError("Academic session is required")
    phone = profile.get("phone")
    if phone and not is_valid_phone(phone):
        raise ValidationFailedError("Invalid phone number format")


def is_profile_complete(profile: dict) -> bool:
    required = ("display_name", "student_id", "session", "phone", "department")
    return all((profile.get(field) or "").strip() for field in required)
