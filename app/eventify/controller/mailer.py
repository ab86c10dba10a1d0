import asyncio
import logging
import smtplib
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from eventify.constant_file import (eventify_email,
                                    eventify_email_password,
                                    email_from_name,
                                    smtp_host,
                                    smtp_port)

logger = logging.getLogger(__name__)


def build_message(to_email: str, subject: str, html_body: str, text_body: str = None, inline_images: dict = None):
    """inline_images maps a Content-ID to PNG bytes referenced as cid:<id> in the HTML."""
    message = MIMEMultipart("related")
    message['From'] = formataddr((email_from_name, eventify_email))
    message['To'] = to_email
    message['Subject'] = subject
    message['Message-ID'] = make_msgid(domain=(eventify_email.split("@")[-1] or None))

    alt = MIMEMultipart("alternative")
    if text_body:
        alt.attach(MIMEText(text_body, 'plain'))
    alt.attach(MIMEText(html_body, 'html'))
    message.attach(alt)

    for content_id, png_bytes in (inline_images or {}).items():
        img = MIMEImage(png_bytes, _subtype="png", name=f"{content_id}.png")
        img.add_header('Content-ID', f'<{content_id}>')
        img.add_header('Content-Disposition', 'inline', filename=f"{content_id}.png")
        message.attach(img)

    return message


def deliver(message, to_email: str):
    """Blocking SMTP send. Returns the Message-ID, raises on failure."""
    server = smtplib.SMTP(smtp_host, smtp_port, timeout=30)
    try:
        server.starttls()
        server.login(eventify_email, eventify_email_password)
        server.sendmail(eventify_email, to_email, message.as_string())
    finally:
        server.quit()
    return message['Message-ID']


def send_email_sync(to_email: str, subject: str, html_body: str, text_body: str = None, inline_images: dict = None):
    message = build_message(to_email, subject, html_body, text_body, inline_images)
    message_id = deliver(message, to_email)
    logger.info("Email %r sent to %s", subject, to_email)
    return message_id


async def send_email(to_email: str, subject: str, html_body: str, text_body: str = None, inline_images: dict = None):
    # Run the blocking SMTP exchange in a worker thread, freeing the event loop.
    return await asyncio.to_thread(send_email_sync, to_email, subject, html_body, text_body, inline_images)
