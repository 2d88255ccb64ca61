"""Paying for sessions"""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query

from ..auth import user_auth
from ..dependencies import get_payment_gateway, get_token_service
from ..exceptions.api_exception import responses
from ..exceptions.auth import PermissionDeniedError, admin_responses
from ..exceptions.booking import TutorNotEligibleError
from ..exceptions.entities import StudentNotFoundError, TutorNotFoundError
from ..exceptions.payments import PaymentGatewayError
from ..logger import get_logger
from ..models import Student, Tutor
from ..schemas.payments import MAX_HOURS, CreatePaymentIntent, PaymentIntentCreated, PaymentMetadata, Quote
from ..schemas.user import User
from ..services.booking_token import BookingTokenService
from ..services.payments import PaymentGateway
from ..services.pricing import price, to_minor_units
from ..settings import settings


router = APIRouter()

logger = get_logger(__name__)


@router.get("/payments/quote", responses=responses(Quote, TutorNotFoundError))
async def get_quote(
    tutor_id: str = Query(description="ID of the tutor"),
    hours: Decimal = Query(gt=0, le=MAX_HOURS, decimal_places=2, description="Duration of the session in hours"),
) -> Any:
    """Return what a session with the tutor would cost, including the platform fee."""

    tutor = await Tutor.get(tutor_id)
    if not tutor:
        raise TutorNotFoundError

    amounts = price(tutor.hourly_rate, hours)
    return Quote(tutor_id=tutor_id, hours=float(hours), subtotal=amounts.subtotal, fee=amounts.fee, total=amounts.total)


@router.post(
    "/payments/intent",
    responses=admin_responses(
        PaymentIntentCreated, TutorNotFoundError, StudentNotFoundError, TutorNotEligibleError, PaymentGatewayError
    ),
)
async def create_payment_intent(
    data: CreatePaymentIntent,
    user: User = user_auth,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    tokens: BookingTokenService = Depends(get_token_service),
) -> Any:
    """
    Start paying for a session.

    Returns the client secret to complete the payment with the payment provider and the booking token which has to
    be presented when confirming the booking after the payment succeeded. The token is valid for 24 hours.

    *Requirements:* **SELF** (the student) or **ADMIN**
    """

    if user.id != data.student_id and not user.admin:
        raise PermissionDeniedError

    tutor = await Tutor.get(data.tutor_id)
    if not tutor:
        raise TutorNotFoundError
    if not tutor.is_approved:
        raise TutorNotEligibleError
    if not await Student.get(data.student_id):
        raise StudentNotFoundError

    amounts = price(tutor.hourly_rate, data.hours)
    metadata = PaymentMetadata(
        tutor_id=data.tutor_id,
        student_id=data.student_id,
        hours=data.hours,
        start_time=data.start_time,
        end_time=data.end_time,
    )
    intent = await gateway.create_intent(to_minor_units(amounts.total), settings.currency, metadata.to_metadata())
    logger.info(f"student {data.student_id} started payment {intent.id} for tutor {data.tutor_id}")

    return PaymentIntentCreated(
        payment_reference_id=intent.id,
        client_secret=intent.client_secret,
        booking_token=tokens.issue(intent.id, data.student_id, data.tutor_id),
        amount=amounts.total,
        subtotal=amounts.subtotal,
        fee=amounts.fee,
    )
