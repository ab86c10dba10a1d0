import pytest

from eventify.exceptions import ValidationFailedError
from eventify.validators import (validate_signup,
                                 validate_profile,
                                 is_profile_complete,
                                 is_valid_email,
                                 is_valid_phone)


@pytest.mark.parametrize("password", ["Password1", "abc12345", "Secure#99x"])
def test_accepts_strong_passwords(password):
    validate_signup("Ada Lovelace", "ada@uni.edu", password, "CSE-042", "2024-2025")


@pytest.mark.parametrize("password", ["short1", "allletters", "12345678", "has space1"])
def test_rejects_weak_passwords(password):
    with pytest.raises(ValidationFailedError):
        validate_signup("Ada Lovelace", "ada@uni.edu", password, "CSE-042", "2024-2025")


@pytest.mark.parametrize("fields", [
    {"display_name": "A"},
    {"display_name": "ada@uni.edu"},
    {"email": "not-an-email"},
    {"student_id": "42"},
    {"session": " "},
    {"phone": "12345"},
])
def test_signup_field_rules(fields):
    values = {
        "display_name": "Ada Lovelace",
        "email": "ada@uni.edu",
        "password": "Password1",
        "student_id": "CSE-042",
        "session": "2024-2025",
    }
    values.update(fields)
    with pytest.raises(ValidationFailedError):
        validate_signup(**values)


def test_phone_and_email_formats():
    assert is_valid_phone("01712345678")
    assert is_valid_phone("+8801712345678")
    assert not is_valid_phone("01012345678")
    assert not is_valid_phone("0171234567")
    assert is_valid_email("first.last+events@uni.edu")
    assert not is_valid_email("first@")


def test_profile_rules_depend_on_role():
    with pytest.raises(ValidationFailedError):
        validate_profile({"display_name": "Ada", "student_id": "", "session": "2024"}, "student")
    validate_profile({"display_name": "Admin", "student_id": None, "session": None}, "admin")


def test_profile_completeness():
    profile = {
        "display_name": "Ada",
        "student_id": "CSE-042",
        "session": "2024-2025",
        "phone": "01712345678",
        "department": "CSE",
    }
    assert is_profile_complete(profile)
    assert not is_profile_complete({**profile, "department": " "})


@pytest.mark.parametrize("role", ["student", "admin"])
def test_every_role_needs_a_display_name(role):
    with pytest.raises(ValidationFailedError):
        validate_profile({"display_name": None, "student_id": "CSE-042", "session": "2024-2025"}, role)
