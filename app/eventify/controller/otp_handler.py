import logging
import secrets
from eventify.controller import mailer
from eventify.constant_file import password_reset_subject, OTP_EXPIRE_MINUTES

logger = logging.getLogger(__name__)


def generate_otp():
    return ''.join(secrets.choice('0123456789') for _ in range(6))

async def send_otp_email(email: str, otp: str):
    email_message = f"Your OTP is <b>{otp}</b>. This OTP will expire in {OTP_EXPIRE_MINUTES} minutes."
    text_message = f"Your OTP is {otp}. This OTP will expire in {OTP_EXPIRE_MINUTES} minutes."
    try:
        await mailer.send_email(email, password_reset_subject, email_message, text_message)
        return True
    except Exception as e:
        logger.error("Failed to send OTP email to %s: %s", email, e)
        return False
