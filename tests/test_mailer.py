import asyncio
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from eventify.controller import mailer
from eventify.controller.otp_handler import generate_otp, send_otp_email
from eventify.controller.qr_code_sender import render_confirmation_email, safe_format


def test_build_message_with_inline_image():
    message = mailer.build_message("ada@uni.edu", "Hello", "<b>hi</b>", "hi", inline_images={"ticketqr": b"\x89PNG"})

    assert message["To"] == "ada@uni.edu"
    assert message["Message-ID"]
    parts = message.get_payload()
    assert parts[0].get_content_type() == "multipart/alternative"
    assert [part.get_content_type() for part in parts[0].get_payload()] == ["text/plain", "text/html"]
    assert parts[1]["Content-ID"] == "<ticketqr>"


def test_deliver_uses_starttls_and_quits(smtp):
    message = mailer.build_message("ada@uni.edu", "Hello", "<b>hi</b>")

    message_id = mailer.deliver(message, "ada@uni.edu")

    server = smtp.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once()
    server.sendmail.assert_called_once()
    server.quit.assert_called_once()
    assert message_id == message["Message-ID"]


def test_deliver_quits_after_failed_send(smtp):
    smtp.return_value.sendmail.side_effect = OSError("rejected")
    message = mailer.build_message("ada@uni.edu", "Hello", "<b>hi</b>")

    with pytest.raises(OSError):
        mailer.deliver(message, "ada@uni.edu")
    smtp.return_value.quit.assert_called_once()


def test_async_send_email_returns_message_id(smtp):
    message_id = asyncio.run(mailer.send_email("ada@uni.edu", "Hello", "<b>hi</b>"))

    assert message_id.startswith("<")
    smtp.return_value.sendmail.assert_called_once()


def test_send_otp_email_reports_failure(monkeypatch):
    monkeypatch.setattr("eventify.controller.mailer.smtplib.SMTP", MagicMock(side_effect=OSError("down")))
    assert asyncio.run(send_otp_email("ada@uni.edu", "123456")) is False


def test_generate_otp():
    otp = generate_otp()
    assert len(otp) == 6 and otp.isdigit()


def test_confirmation_email_content():
    event = SimpleNamespace(
        title="Robotics Expo",
        start_at=datetime(2030, 4, 2, 9, 30),
        end_at=datetime(2030, 4, 2, 11, 0),
        location=None,
        category=None,
        description="Robots everywhere",
    )

    subject, html_body, text_body = render_confirmation_email("Ada", event, "abc123")

    assert subject == "Event Registration Confirmation - Robotics Expo"
    assert "April 02, 2030" in html_body
    assert "09:30 AM - 11:00 AM" in text_body
    assert "Location: TBD" in text_body
    assert "Category: General" in text_body
    assert "cid:ticketqr" in html_body
    assert "abc123" in text_body


def test_safe_format():
    assert safe_format(datetime(2030, 1, 2), "%Y") == "2030"
    assert safe_format("2030-01-02T10:00:00", "%d") == "02"
    assert safe_format(None, "%Y") == "TBD"


def test_otp_uses_secrets_module(monkeypatch):
    picks = iter("918273")
    monkeypatch.setattr("eventify.controller.otp_handler.secrets.choice", lambda digits: next(picks))

    assert generate_otp() == "918273"
