from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

import aiosmtplib

from ..logger import get_logger
from ..settings import settings


logger = get_logger(__name__)


class Message:
    def __init__(self, title: str, body: str) -> None:
        self.title = title
        self.body = body

    async def send(self, recipient: str, *, attachments: list[MIMEBase] | None = None, **kwargs: Any) -> None:
        await send_email(
            recipient, self.title.format(**kwargs), self.body.format(**kwargs), attachments=attachments
        )


async def send_email(
    recipient: str,
    title: str,
    body: str,
    *,
    content_type: str = "plain",
    reply_to: str | None = None,
    attachments: list[MIMEBase] | None = None,
) -> None:
    """
    Send an email over the configured SMTP server.

    Raises ValueError if SMTP is not configured and aiosmtplib.SMTPException if delivery fails.
    """

    if not settings.smtp_host:
        raise ValueError("SMTP is not configured")

    message = MIMEMultipart()
    message["From"] = settings.smtp_from
    message["To"] = recipient
    message["Subject"] = title
    if reply_to:
        message["Reply-To"] = reply_to
    message.attach(MIMEText(body, content_type))
    for attachment in attachments or []:
        message.attach(attachment)

    await aiosmtplib.send(
        message,
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user or None,
        password=settings.smtp_password or None,
        use_tls=settings.smtp_tls,
        start_tls=settings.smtp_starttls,
    )
    logger.debug(f"sent email '{title}' to {recipient}")


SESSION_BOOKED_STUDENT = Message(
    "Session confirmed with {tutor} - {date} {time}",
    "Hello {student},\n\n"
    "your tutoring session with {tutor} is confirmed for {date} at {time} ({duration} h).\n\n"
    "Meeting link: {link}\n\n"
    "See you there!",
)

SESSION_BOOKED_TUTOR = Message(
    "New session booked - {date} {time}",
    "Hello {tutor},\n\n"
    "{student} booked a tutoring session with you for {date} at {time} ({duration} h).\n\n"
    "Meeting link: {link}",
)

TUTOR_APPROVED = Message(
    "Your tutor profile has been approved",
    "Hello {name},\n\nyour application has been approved. Students can now find and book you.",
)

TUTOR_REJECTED = Message(
    "Your tutor application",
    "Hello {name},\n\nunfortunately we could not approve your application at this time.",
)
