"""
Turning a succeeded payment into a booked session.

The same payment may be confirmed any number of times (client retries, duplicate submissions, webhook redelivery),
every call returns the one session stored for the payment reference. Checks that fail before the session is stored
abort without side effects. Notifying the participants is best effort and never prevents the session from being
stored.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from ..database import db
from ..exceptions.booking import (
    AuthorizationMismatchError,
    InvalidTokenError,
    NotificationDeliveryError,
    StorageConflictError,
    TutorNotEligibleError,
)
from ..exceptions.entities import StudentNotFoundError, TutorNotFoundError
from ..exceptions.payments import PaymentNotCompletedError
from ..logger import get_logger
from ..models import Session, Student, Tutor
from ..schemas.payments import PaymentMetadata
from ..utils.utc import utcfromtimestamp
from .booking_token import BookingTokenService
from .meetings import MeetingProvider, MeetingResult
from .payments import PaymentGateway
from .pricing import price


logger = get_logger(__name__)


@dataclass
class Confirmation:
    session: Session
    emails_sent: bool
    notification_error: str | None
    created: bool


class SessionConfirmation:
    def __init__(
        self,
        gateway: PaymentGateway,
        tokens: BookingTokenService,
        meetings: MeetingProvider,
        notification_timeout: float,
    ) -> None:
        self.gateway = gateway
        self.tokens = tokens
        self.meetings = meetings
        self.notification_timeout = notification_timeout

    async def confirm(self, payment_reference_id: str, token: str, student_id: str, tutor_id: str) -> Confirmation:
        intent = await self.gateway.retrieve_intent(payment_reference_id)
        if not intent.succeeded:
            logger.info(f"payment {payment_reference_id} is {intent.status}, not confirming")
            raise PaymentNotCompletedError

        try:
            booking = PaymentMetadata.model_validate(intent.metadata)
        except ValidationError:
            logger.warning(f"payment {payment_reference_id} carries no valid booking metadata")
            raise AuthorizationMismatchError

        if (booking.tutor_id, booking.student_id) != (tutor_id, student_id):
            logger.warning(
                f"payment {payment_reference_id} was authorized for tutor {booking.tutor_id} and student "
                f"{booking.student_id}, not for tutor {tutor_id} and student {student_id}"
            )
            raise AuthorizationMismatchError

        if rejection := self.tokens.check(token, payment_reference_id, student_id, tutor_id):
            logger.warning(f"booking token for payment {payment_reference_id} rejected: {rejection.value}")
            raise InvalidTokenError

        if session := await Session.find_by_payment_reference(payment_reference_id):
            logger.info(f"payment {payment_reference_id} already confirmed as session {session.id}")
            return Confirmation(session, session.notifications_sent, None, created=False)

        tutor = await Tutor.fetch_fresh(tutor_id)
        if not tutor:
            raise TutorNotFoundError
        student = await Student.fetch_fresh(student_id)
        if not student:
            raise StudentNotFoundError
        if not tutor.is_approved:
            logger.warning(f"tutor {tutor_id} is {tutor.status.value}, refusing session for {payment_reference_id}")
            raise TutorNotEligibleError

        amounts = price(tutor.hourly_rate, booking.hours)

        start = utcfromtimestamp(booking.start_time) if booking.start_time is not None else None
        end = utcfromtimestamp(booking.end_time) if booking.end_time is not None else None
        meeting = await self._notify(tutor, student, start, booking.hours)

        try:
            session = await Session.create(
                tutor_id=tutor_id,
                student_id=student_id,
                scheduled_start=start,
                scheduled_end=end,
                duration_hours=booking.hours,
                subtotal=amounts.subtotal,
                platform_fee=amounts.fee,
                payment_reference_id=payment_reference_id,
                meeting_link=meeting.meeting_link,
                calendar_event_id=meeting.event_id,
                notifications_sent=meeting.notified,
            )
        except StorageConflictError:
            await db.rollback()
            if not (session := await Session.find_by_payment_reference(payment_reference_id)):
                raise
            logger.info(f"payment {payment_reference_id} was confirmed concurrently as session {session.id}")
            return Confirmation(session, session.notifications_sent, None, created=False)

        logger.info(f"confirmed payment {payment_reference_id} as session {session.id} ({amounts.total})")
        if not meeting.notified:
            logger.error(
                f"participants of session {session.id} (tutor {tutor_id}, student {student_id}) "
                f"were not notified: {meeting.error}"
            )
        return Confirmation(session, meeting.notified, meeting.error, created=True)

    async def _notify(self, tutor: Tutor, student: Student, start: datetime | None, hours: Decimal) -> MeetingResult:
        if start is None:
            return MeetingResult(None, None, False, "session has no scheduled start")

        try:
            return await asyncio.wait_for(
                self.meetings.create_meeting(tutor.name, tutor.email, student.name, student.email, start, hours),
                self.notification_timeout,
            )
        except asyncio.TimeoutError:
            return MeetingResult(None, None, False, f"notification timed out after {self.notification_timeout}s")
        except NotificationDeliveryError as e:
            return MeetingResult(None, None, False, str(e))
        except Exception as e:
            logger.exception(f"unexpected error while notifying {tutor.id} and {student.id}")
            return MeetingResult(None, None, False, f"notification failed: {e!r}")
