import random
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from aiosmtplib import SMTPException

from ..exceptions.booking import NotificationDeliveryError
from ..logger import get_logger
from ..utils.email import SESSION_BOOKED_STUDENT, SESSION_BOOKED_TUTOR
from ..utils.utc import platform_zone
from .google import GoogleCalendar
from .ics import create_session_ics, ics_attachment


logger = get_logger(__name__)


@dataclass
class MeetingResult:
    event_id: str | None
    meeting_link: str | None
    notified: bool
    error: str | None = None


def generate_meeting_link() -> str:
    return "https://meet.jit.si/" + "-".join(
        "".join(random.choice(string.ascii_uppercase + string.digits) for _ in range(4)) for _ in range(4)  # noqa: S311
    )


class MeetingProvider:
    """
    Creates the calendar event and meeting link for a booked session and notifies both parties.

    Without a Google calendar a Jitsi link is generated instead. Delivery failures never raise, they are reported
    through :class:`MeetingResult`.
    """

    def __init__(self, calendar: GoogleCalendar | None) -> None:
        self.calendar = calendar

    async def create_meeting(
        self,
        tutor_name: str,
        tutor_email: str,
        student_name: str,
        student_email: str,
        start_time: datetime,
        duration_hours: Decimal,
    ) -> MeetingResult:
        end_time = start_time + timedelta(hours=float(duration_hours))
        summary = f"Tutoring session with {tutor_name}"
        description = f"Tutoring session with {tutor_name}\n\nStudent: {student_name}"

        event_id: str | None = None
        link: str | None = None
        if self.calendar:
            try:
                event_id, link = await self.calendar.create_event(
                    summary, description, start_time, end_time, [tutor_email, student_email]
                )
            except NotificationDeliveryError as e:
                logger.error(f"calendar event for {tutor_email} and {student_email} failed: {e}")
                return MeetingResult(None, None, False, str(e))
        link = link or generate_meeting_link()

        try:
            await self._send_invitations(
                tutor_name, tutor_email, student_name, student_email, start_time, end_time, duration_hours, link
            )
        except NotificationDeliveryError as e:
            logger.error(f"invitation emails for event {event_id} failed: {e}")
            return MeetingResult(event_id, link, False, str(e))

        return MeetingResult(event_id, link, True)

    async def cancel_meeting(self, event_id: str) -> bool:
        """Remove the calendar event of a cancelled session. Returns whether the event is gone."""

        if not self.calendar:
            return False

        try:
            await self.calendar.delete_event(event_id)
        except NotificationDeliveryError as e:
            logger.error(f"calendar event {event_id} could not be deleted: {e}")
            return False

        logger.info(f"deleted calendar event {event_id}")
        return True

    async def _send_invitations(
        self,
        tutor_name: str,
        tutor_email: str,
        student_name: str,
        student_email: str,
        start_time: datetime,
        end_time: datetime,
        duration_hours: Decimal,
        link: str,
    ) -> None:
        local = start_time.astimezone(platform_zone())
        ics = create_session_ics(
            str(uuid4()),
            f"Tutoring session with {tutor_name}",
            f"Tutor: {tutor_name}\nStudent: {student_name}",
            start_time,
            end_time,
            link,
        )
        params = {
            "tutor": tutor_name,
            "student": student_name,
            "date": local.strftime("%d.%m.%Y"),
            "time": local.strftime("%H:%M"),
            "duration": f"{float(duration_hours):g}",
            "link": link,
        }

        try:
            await SESSION_BOOKED_TUTOR.send(tutor_email, attachments=[ics_attachment(ics)], **params)
            await SESSION_BOOKED_STUDENT.send(student_email, attachments=[ics_attachment(ics)], **params)
        except (ValueError, SMTPException, OSError) as e:
            raise NotificationDeliveryError(f"could not send invitation emails: {e}") from e

        logger.info(f"sent session invitations to {tutor_email} and {student_email}")
