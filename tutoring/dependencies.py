"""Outbound services shared by all requests. Endpoints receive them through FastAPI dependencies."""

from datetime import timedelta
from functools import cache

from fastapi import Depends

from .services.booking_token import BookingTokenService
from .services.confirmation import SessionConfirmation
from .services.google import GoogleCalendar, GoogleCredentials
from .services.meetings import MeetingProvider
from .services.payments import PaymentGateway, StripeGateway
from .settings import settings


@cache
def get_payment_gateway() -> PaymentGateway:
    return StripeGateway(settings.stripe_secret_key)


@cache
def get_token_service() -> BookingTokenService:
    return BookingTokenService(settings.booking_token_secret, timedelta(seconds=settings.booking_token_ttl))


@cache
def get_meeting_provider() -> MeetingProvider:
    if not settings.google_refresh_token:
        return MeetingProvider(None)

    credentials = GoogleCredentials(
        settings.google_client_id, settings.google_client_secret, settings.google_refresh_token
    )
    return MeetingProvider(GoogleCalendar(credentials, settings.google_calendar_id, settings.timezone))


def get_confirmation(
    gateway: PaymentGateway = Depends(get_payment_gateway),
    tokens: BookingTokenService = Depends(get_token_service),
    meetings: MeetingProvider = Depends(get_meeting_provider),
) -> SessionConfirmation:
    return SessionConfirmation(gateway, tokens, meetings, settings.notification_timeout)
