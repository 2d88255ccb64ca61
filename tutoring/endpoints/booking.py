"""Booking sessions from weekly availability"""

from typing import Any

from fastapi import APIRouter, Depends

from ..auth import user_auth
from ..dependencies import get_confirmation
from ..exceptions.api_exception import responses
from ..exceptions.auth import PermissionDeniedError, admin_responses
from ..exceptions.booking import AuthorizationMismatchError, InvalidRangeError, InvalidTokenError, TutorNotEligibleError
from ..exceptions.entities import SlotNotFoundError, StudentNotFoundError, TutorNotFoundError
from ..exceptions.payments import PaymentGatewayError, PaymentNotCompletedError, PaymentNotFoundError
from ..models import AvailabilitySlot, Tutor
from ..models.availability_slots import resolve_occurrence
from ..schemas.booking import ConfirmBooking, ConfirmedSession, Occurrence, ResolveBooking
from ..schemas.user import User
from ..services.confirmation import SessionConfirmation
from ..utils.utc import utcnow


router = APIRouter()


@router.post(
    "/booking/resolve",
    responses=responses(Occurrence, InvalidRangeError, SlotNotFoundError, TutorNotFoundError, TutorNotEligibleError),
)
async def resolve_booking(data: ResolveBooking) -> Any:
    """
    Compute the next concrete date and time for a range inside a tutor's weekly availability slot.

    The requested range is given in minutes since midnight and must lie inside the slot. If the slot is today but
    has already started, the occurrence of the following week is returned.
    """

    tutor = await Tutor.get(data.tutor_id)
    if not tutor:
        raise TutorNotFoundError
    if not tutor.is_approved:
        raise TutorNotEligibleError

    slot = await AvailabilitySlot.get(data.slot_id, tutor_id=data.tutor_id)
    if not slot or not slot.active:
        raise SlotNotFoundError

    occurrence = resolve_occurrence(slot, data.start_time_minutes, data.end_time_minutes, utcnow())
    return Occurrence(
        start_time=int(occurrence.start_time.timestamp()), end_time=int(occurrence.end_time.timestamp())
    )


@router.post(
    "/booking/confirm",
    responses=admin_responses(
        ConfirmedSession,
        PaymentNotCompletedError,
        PaymentNotFoundError,
        PaymentGatewayError,
        AuthorizationMismatchError,
        InvalidTokenError,
        TutorNotFoundError,
        StudentNotFoundError,
        TutorNotEligibleError,
    ),
)
async def confirm_booking(
    data: ConfirmBooking,
    user: User = user_auth,
    confirmation: SessionConfirmation = Depends(get_confirmation),
) -> Any:
    """
    Turn a succeeded payment into a booked session.

    Can be called any number of times for the same payment, every call returns the same session. The calendar event
    and the notification emails are best effort: if they fail, the session is still booked and `emails_sent` is
    false.

    *Requirements:* **SELF** (the student) or **ADMIN**
    """

    if user.id != data.student_id and not user.admin:
        raise PermissionDeniedError

    result = await confirmation.confirm(
        data.payment_reference_id, data.booking_token, data.student_id, data.tutor_id
    )
    return ConfirmedSession(
        **result.session.serialize, emails_sent=result.emails_sent, notification_error=result.notification_error
    )
