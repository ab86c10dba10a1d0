from datetime import datetime
from eventify.controller import mailer
from eventify.controller.qrcode_event_controller import make_qr_png
from eventify.constant_file import app_url, email_from_name


def safe_format(value, fmt):
    if isinstance(value, datetime):
        return value.strftime(fmt)
    try:
        return datetime.fromisoformat(str(value)).strftime(fmt)
    except (TypeError, ValueError):
        return "TBD"


def render_confirmation_email(user_name: str, event, ticket_code: str):
    start_date = safe_format(event.start_at, '%B %d, %Y')
    start_time = safe_format(event.start_at, '%I:%M %p')
    end_time = safe_format(event.end_at, '%I:%M %p')
    location = event.location or 'TBD'
    category = event.category or 'General'
    description = event.description or 'No description available'
    registered_on = datetime.utcnow().strftime('%B %d, %Y')

    subject = f"Event Registration Confirmation - {event.title}"

    html_body = f"""
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
            .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
            .event-details {{ background: white; padding: 20px; margin: 20px 0; border-radius: 8px; border-left: 4px solid #667eea; }}
            .qr-code {{ text-align: center; margin: 20px 0; }}
            .footer {{ text-align: center; margin-top: 30px; color: #666; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Event Registration Confirmed!</h1>
                <p>Thank you for registering with {email_from_name}</p>
            </div>
            <div class="content">
                <h2>Hello {user_name},</h2>
                <p>Your registration for <strong>{event.title}</strong> has been confirmed!</p>
                <div class="event-details">
                    <h3>Event Details</h3>
                    <p><strong>Date:</strong> {start_date}</p>
                    <p><strong>Time:</strong> {start_time} - {end_time}</p>
                    <p><strong>Location:</strong> {location}</p>
                    <p><strong>Category:</strong> {category}</p>
                    <p><strong>Description:</strong> {description}</p>
                </div>
                <div class="qr-code">
                    <img src="cid:ticketqr" alt="Check-in code {ticket_code}" width="200" height="200"/>
                    <p>Check-in code: <b>{ticket_code}</b></p>
                </div>
                <p><strong>Registration Date:</strong> {registered_on}</p>
                <p>Please show this code at the event entrance.</p>
                <a href="{app_url}">Visit {email_from_name}</a>
            </div>
            <div class="footer">
                <p>This is an automated message from {email_from_name}</p>
            </div>
        </div>
    </body>
    </html>
    """

    text_body = f"""Event Registration Confirmation - {event.title}

Hello {user_name},

Your registration for {event.title} has been confirmed!

Event Details:
- Date: {start_date}
- Time: {start_time} - {end_time}
- Location: {location}
- Category: {category}
- Description: {description}

Check-in code: {ticket_code}
Registration Date: {registered_on}

We look forward to seeing you at the event!

Best regards,
The {email_from_name} Team
{app_url}
"""
    return subject, html_body, text_body


async def send_registration_confirmation(email: str, user_name: str, event, ticket_code: str):
    """Sends the confirmation with the ticket QR inline. Returns the Message-ID."""
    subject, html_body, text_body = render_confirmation_email(user_name, event, ticket_code)
    return await mailer.send_email(
        email,
        subject,
        html_body,
        text_body,
        inline_images={"ticketqr": make_qr_png(ticket_code)},
    )
