from datetime import timedelta
from decimal import Decimal
from typing import Any

import httpx
import pytest

from tutoring.database import db, db_context, filter_by
from tutoring.exceptions.booking import AuthorizationMismatchError, InvalidTokenError, TutorNotEligibleError
from tutoring.exceptions.entities import EntityNotFoundError, StudentNotFoundError
from tutoring.exceptions.payments import PaymentNotCompletedError, PaymentNotFoundError
from tutoring.models import Session, SessionStatus, Tutor, TutorStatus
from tutoring.services import google
from tutoring.services.booking_token import BookingTokenService
from tutoring.services.confirmation import Confirmation, SessionConfirmation
from tutoring.services.google import GoogleCalendar, GoogleCredentials
from tutoring.services.meetings import MeetingProvider, MeetingResult
from tutoring.utils.utc import utcfromtimestamp, utcnow


START = 1792591200  # 2026-10-21 08:00 in Mexico City


@pytest.fixture
def confirmation(gateway: Any, tokens: BookingTokenService, meetings: Any) -> SessionConfirmation:
    return SessionConfirmation(gateway, tokens, meetings, notification_timeout=1)


async def confirm(
    confirmation: SessionConfirmation, payment: str, token: str, student_id: str, tutor_id: str
) -> Confirmation:
    async with db_context():
        return await confirmation.confirm(payment, token, student_id, tutor_id)


async def count_sessions(payment: str) -> int:
    async with db_context():
        return await db.count(filter_by(Session, payment_reference_id=payment))


def add_payment(gateway: Any, tutor: str, student: str, payment: str = "pi_1", **kwargs: Any) -> None:
    kwargs.setdefault("start_time", START)
    kwargs.setdefault("end_time", START + 2 * 3600)
    gateway.add(payment, tutor_id=tutor, student_id=student, hours="2", **kwargs)


async def test__confirm(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    add_payment(gateway, tutor, student)

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert result.created
    assert result.emails_sent
    assert result.notification_error is None

    session = result.session
    assert session.tutor_id == tutor
    assert session.student_id == student
    assert session.payment_reference_id == "pi_1"
    assert (session.subtotal, session.platform_fee, session.total) == (600, 48, 648)
    assert session.duration_hours == Decimal("2")
    assert session.scheduled_start == utcfromtimestamp(START)
    assert session.scheduled_end == utcfromtimestamp(START + 2 * 3600)
    assert session.meeting_link == "https://meet.google.com/abc-defg-hij"
    assert session.calendar_event_id == "evt_1"
    assert session.notifications_sent
    assert session.status == SessionStatus.PENDING

    assert meetings.calls == [
        (
            "Ana Torres",
            "tutor-1@example.com",
            "Luis Ramirez",
            "student-1@example.com",
            utcfromtimestamp(START),
            Decimal("2"),
        )
    ]
    assert await count_sessions("pi_1") == 1


async def test__confirm__idempotent(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    add_payment(gateway, tutor, student)
    token = tokens.issue("pi_1", student, tutor)

    results = [await confirm(confirmation, "pi_1", token, student, tutor) for _ in range(3)]

    assert [r.created for r in results] == [True, False, False]
    assert len({r.session.id for r in results}) == 1
    assert all(r.emails_sent for r in results)
    assert len(meetings.calls) == 1
    assert await count_sessions("pi_1") == 1


async def test__confirm__concurrent_insert(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    tutor: str,
    student: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    add_payment(gateway, tutor, student)
    token = tokens.issue("pi_1", student, tutor)
    first = await confirm(confirmation, "pi_1", token, student, tutor)

    # the second call does not see the first session yet and runs into the unique constraint
    find = Session.find_by_payment_reference
    calls: list[str] = []

    async def find_after_insert(payment_reference_id: str) -> Session | None:
        calls.append(payment_reference_id)
        if len(calls) == 1:
            return None
        return await find(payment_reference_id)

    monkeypatch.setattr(Session, "find_by_payment_reference", find_after_insert)

    second = await confirm(confirmation, "pi_1", token, student, tutor)

    assert not second.created
    assert second.session.id == first.session.id
    assert len(calls) == 2
    assert await count_sessions("pi_1") == 1


@pytest.mark.parametrize("status", ["requires_payment_method", "processing", "canceled"])
async def test__confirm__payment_not_completed(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
    status: str,
) -> None:
    add_payment(gateway, tutor, student, status=status)

    with pytest.raises(PaymentNotCompletedError):
        await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert meetings.calls == []
    assert await count_sessions("pi_1") == 0


async def test__confirm__unknown_payment(
    confirmation: SessionConfirmation, tokens: BookingTokenService, tutor: str, student: str
) -> None:
    with pytest.raises(PaymentNotFoundError):
        await confirm(confirmation, "pi_404", tokens.issue("pi_404", student, tutor), student, tutor)


async def test__confirm__authorization_mismatch(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
    make_student: Any,
) -> None:
    other = await make_student("student-2")
    add_payment(gateway, tutor, student)

    with pytest.raises(AuthorizationMismatchError):
        await confirm(confirmation, "pi_1", tokens.issue("pi_1", other, tutor), other, tutor)

    assert meetings.calls == []
    assert await count_sessions("pi_1") == 0


async def test__confirm__missing_metadata(
    confirmation: SessionConfirmation, gateway: Any, tokens: BookingTokenService, tutor: str, student: str
) -> None:
    gateway.add("pi_1")

    with pytest.raises(AuthorizationMismatchError):
        await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)


async def test__confirm__invalid_token(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    add_payment(gateway, tutor, student)
    expired = tokens.issue("pi_1", student, tutor, utcnow() - timedelta(hours=25))
    foreign = BookingTokenService("other secret").issue("pi_1", student, tutor)

    for token in [expired, foreign, "garbage", tokens.issue("pi_2", student, tutor)]:
        with pytest.raises(InvalidTokenError):
            await confirm(confirmation, "pi_1", token, student, tutor)

    assert meetings.calls == []
    assert await count_sessions("pi_1") == 0


@pytest.mark.parametrize("status", [TutorStatus.PENDING, TutorStatus.REJECTED])
async def test__confirm__tutor_not_approved(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    student: str,
    make_tutor: Any,
    status: TutorStatus,
) -> None:
    tutor = await make_tutor("tutor-2", status=status)
    add_payment(gateway, tutor, student)

    with pytest.raises(TutorNotEligibleError):
        await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert meetings.calls == []
    assert await count_sessions("pi_1") == 0


async def test__confirm__unknown_student(
    confirmation: SessionConfirmation, gateway: Any, tokens: BookingTokenService, tutor: str
) -> None:
    add_payment(gateway, tutor, "ghost")

    with pytest.raises(StudentNotFoundError) as exc_info:
        await confirm(confirmation, "pi_1", tokens.issue("pi_1", "ghost", tutor), "ghost", tutor)

    assert isinstance(exc_info.value, EntityNotFoundError)


async def test__confirm__uses_current_rate(
    confirmation: SessionConfirmation, gateway: Any, tokens: BookingTokenService, tutor: str, student: str
) -> None:
    add_payment(gateway, tutor, student)
    async with db_context():
        loaded = await Tutor.get(tutor)
        assert loaded is not None
        loaded.hourly_rate = 400

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert (result.session.subtotal, result.session.platform_fee, result.session.total) == (800, 64, 864)


async def test__confirm__notification_failure(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    meetings.result = MeetingResult(None, None, False, "could not send invitation emails")
    add_payment(gateway, tutor, student)
    token = tokens.issue("pi_1", student, tutor)

    result = await confirm(confirmation, "pi_1", token, student, tutor)
    again = await confirm(confirmation, "pi_1", token, student, tutor)

    assert result.created
    assert not result.emails_sent
    assert result.notification_error == "could not send invitation emails"
    assert result.session.meeting_link is None
    assert not result.session.notifications_sent
    assert again.session.id == result.session.id
    assert not again.emails_sent
    assert await count_sessions("pi_1") == 1


async def test__confirm__notification_timeout(
    gateway: Any, tokens: BookingTokenService, meetings: Any, tutor: str, student: str
) -> None:
    meetings.delay = 1
    confirmation = SessionConfirmation(gateway, tokens, meetings, notification_timeout=0.05)
    add_payment(gateway, tutor, student)

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert result.created
    assert not result.emails_sent
    assert result.notification_error is not None
    assert "timed out" in result.notification_error
    assert await count_sessions("pi_1") == 1


async def test__confirm__without_start_time(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    add_payment(gateway, tutor, student, start_time=None, end_time=None)

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert result.created
    assert result.session.scheduled_start is None
    assert result.session.total == 648
    assert not result.emails_sent
    assert meetings.calls == []


async def test__confirm__unexpected_notification_error(
    confirmation: SessionConfirmation,
    gateway: Any,
    tokens: BookingTokenService,
    meetings: Any,
    tutor: str,
    student: str,
) -> None:
    meetings.error = KeyError("id")
    add_payment(gateway, tutor, student)

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert result.created
    assert not result.emails_sent
    assert result.notification_error is not None
    assert "KeyError" in result.notification_error
    assert not result.session.notifications_sent
    assert await count_sessions("pi_1") == 1


async def test__confirm__invalid_calendar_response(
    monkeypatch: pytest.MonkeyPatch, gateway: Any, tokens: BookingTokenService, tutor: str, student: str
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url == google.GOOGLE_TOKEN_URL:
            return httpx.Response(200, json={"access_token": "access", "expires_in": 3600})
        return httpx.Response(200, text="<html>proxy error</html>")

    monkeypatch.setattr(
        google, "AsyncClient", lambda **kwargs: httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)
    )
    calendar = GoogleCalendar(GoogleCredentials("client", "secret", "refresh"), "primary", "America/Mexico_City")
    confirmation = SessionConfirmation(gateway, tokens, MeetingProvider(calendar), notification_timeout=1)
    add_payment(gateway, tutor, student)

    result = await confirm(confirmation, "pi_1", tokens.issue("pi_1", student, tutor), student, tutor)

    assert result.created
    assert not result.emails_sent
    assert result.notification_error is not None
    assert "not valid json" in result.notification_error
    assert result.session.calendar_event_id is None
    assert await count_sessions("pi_1") == 1
