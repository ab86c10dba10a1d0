from datetime import datetime, timedelta
from unittest.mock import AsyncMock

from eventify.models.user_model import User
from eventify.models.otp_records_model import OTPRecord
from eventify.models.attendee_model import Attendee
from eventify.models.registration_model import Registration
from eventify.cryptography import verify_password

SIGNUP = {
    "display_name": "Ada Lovelace",
    "email": "ada@uni.edu",
    "password": "Analytical1",
    "student_id": "CSE-042",
    "session": "2024-2025",
}


def test_signup_creates_student(client, db):
    response = client.post("/user/signup", data=SIGNUP)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "ada@uni.edu"
    assert data["role"] == "student"
    assert data["profile_complete"] is False
    assert "password" not in data

    user = db.query(User).filter_by(email="ada@uni.edu").one()
    assert user.password != SIGNUP["password"]
    assert verify_password(SIGNUP["password"], user.password)


def test_signup_with_used_email_fails_without_partial_profile(client, db):
    assert client.post("/user/signup", data=SIGNUP).status_code == 201

    response = client.post("/user/signup", data={**SIGNUP, "email": "ADA@uni.edu", "display_name": "Someone Else"})

    assert response.status_code == 409
    assert response.json()["error"] == "Account already exists"
    assert db.query(User).count() == 1
    assert db.query(User).one().display_name == "Ada Lovelace"


def test_signup_validation(client, db):
    weak = client.post("/user/signup", data={**SIGNUP, "password": "password"})
    short_id = client.post("/user/signup", data={**SIGNUP, "student_id": "42"})
    bad_phone = client.post("/user/signup", data={**SIGNUP, "phone": "12345"})

    for response in (weak, short_id, bad_phone):
        assert response.status_code == 400
    assert db.query(User).count() == 0


def test_login_and_me(client):
    client.post("/user/signup", data=SIGNUP)

    login = client.post("/user/login", data={"email": "ada@uni.edu", "password": "Analytical1"})

    assert login.status_code == 200
    token = login.json()["data"]["access_token"]
    me = client.get("/user/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["display_name"] == "Ada Lovelace"

    logout = client.post("/user/logout", headers={"Authorization": f"Bearer {token}"})
    assert logout.status_code == 200


def test_login_with_wrong_password(client):
    client.post("/user/signup", data=SIGNUP)

    response = client.post("/user/login", data={"email": "ada@uni.edu", "password": "Wrong1234"})

    assert response.status_code == 401
    assert response.json()["error"] == "Authentication failed"


def test_me_rejects_bad_token(client):
    response = client.get("/user/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_profile_update_recomputes_completeness(client, db, student, auth_headers):
    response = client.put(
        "/user/profile",
        headers=auth_headers(student),
        json={"phone": "01712345678", "department": "CSE", "email": "hacker@uni.edu", "role": "admin"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["profile_complete"] is True
    assert data["email"] == "student@uni.edu"
    assert data["role"] == "student"


def test_profile_update_rejects_invalid_values(client, student, auth_headers):
    headers = auth_headers(student)

    assert client.put("/user/profile", headers=headers, json={"phone": "555-0100"}).status_code == 400
    assert client.put("/user/profile", headers=headers, json={"student_id": "  "}).status_code == 400
    assert client.put("/user/profile", headers=headers, json={}).status_code == 400


def test_admin_profile_requires_a_name(client, db, admin, auth_headers):
    headers = auth_headers(admin)

    cleared = client.put("/user/profile", headers=headers, json={"display_name": None})
    blank = client.put("/user/profile", headers=headers, json={"display_name": "   "})

    assert cleared.status_code == 400
    assert cleared.json()["message"] == "Full name is required"
    assert blank.status_code == 400
    db.refresh(admin)
    assert admin.display_name


def test_change_password(client, db, student, auth_headers):
    headers = auth_headers(student)

    wrong = client.put("/user/password", headers=headers, data={"current_password": "nope", "new_password": "Newpass123"})
    right = client.put("/user/password", headers=headers, data={"current_password": "Password1", "new_password": "Newpass123"})

    assert wrong.status_code == 401
    assert right.status_code == 200
    db.refresh(student)
    assert verify_password("Newpass123", student.password)


def test_delete_account_releases_seats(client, db, student, make_user, make_event, auth_headers):
    first, second = make_event(title="One"), make_event(title="Two")
    other = make_user()
    for event in (first, second):
        client.post(f"/event/{event.id}/register", headers=auth_headers(student))
    client.post(f"/event/{first.id}/register", headers=auth_headers(other))
    student_id = student.id

    response = client.delete("/user/me", headers=auth_headers(student))

    assert response.status_code == 200
    assert sorted(response.json()["data"]["released_events"]) == sorted([first.id, second.id])
    db.refresh(first)
    db.refresh(second)
    assert first.attendee_count == 1
    assert second.attendee_count == 0
    assert db.query(User).filter_by(id=student_id).first() is None
    assert db.query(Registration).filter_by(user_id=student_id).count() == 0
    assert db.query(Attendee).filter_by(user_id=student_id).count() == 0


def test_password_reset_flow(client, db, student, smtp):
    forgot = client.post("/user/password/forgot", data={"email": student.email})
    assert forgot.status_code == 200
    smtp.return_value.sendmail.assert_called_once()

    otp = db.query(OTPRecord).filter_by(owner_id=student.id).one().otp

    verify = client.post("/user/password/verify", data={"email": student.email, "otp": otp})
    assert verify.status_code == 200

    wrong = client.post("/user/password/reset",
                        data={"email": student.email, "otp": "000000" if otp != "000000" else "111111",
                              "new_password": "Brandnew123"})
    assert wrong.status_code == 400

    reset = client.post("/user/password/reset", data={"email": student.email, "otp": otp, "new_password": "Brandnew123"})
    assert reset.status_code == 200

    login = client.post("/user/login", data={"email": student.email, "password": "Brandnew123"})
    assert login.status_code == 200

    # The code is single-use
    again = client.post("/user/password/reset", data={"email": student.email, "otp": otp, "new_password": "Another123"})
    assert again.status_code == 404


def test_forgot_password_reuses_unexpired_otp(client, db, student):
    client.post("/user/password/forgot", data={"email": student.email})
    first = db.query(OTPRecord).filter_by(owner_id=student.id).one().otp

    client.post("/user/password/forgot", data={"email": student.email})

    records = db.query(OTPRecord).filter_by(owner_id=student.id).all()
    assert len(records) == 1
    assert records[0].otp == first


def test_expired_otp_is_rejected(client, db, student):
    db.add(OTPRecord(owner_id=student.id, owner_type="user", otp="123456",
                     expires_at=datetime.utcnow() - timedelta(minutes=1)))
    db.commit()

    response = client.post("/user/password/verify", data={"email": student.email, "otp": "123456"})

    assert response.status_code == 400
    assert db.query(OTPRecord).filter_by(owner_id=student.id).count() == 0


def test_forgot_password_for_unknown_email_does_not_leak(client, smtp):
    response = client.post("/user/password/forgot", data={"email": "nobody@uni.edu"})

    assert response.status_code == 200
    smtp.return_value.sendmail.assert_not_called()


def test_password_change_unexpected_error_returns_server_error(client, student, auth_headers, monkeypatch):
    monkeypatch.setattr("eventify.routes.user_route.change_password", AsyncMock(side_effect=RuntimeError("db down")))

    response = client.put("/user/password", headers=auth_headers(student),
                          data={"current_password": "Password1", "new_password": "Newpass123"})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to update password"
