from datetime import datetime, timedelta, timezone

import pytest

from tutoring.services.booking_token import BookingTokenService, TokenRejection


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service() -> BookingTokenService:
    return BookingTokenService("secret")


def test__issue(service: BookingTokenService) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    payment, student, tutor, issued_at, signature = token.split(":")
    assert (payment, student, tutor) == ("pi_123", "student-1", "tutor-1")
    assert int(issued_at) == int(NOW.timestamp() * 1000)
    assert len(signature) == 64


def test__verify(service: BookingTokenService) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    assert service.verify(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(hours=1))
    assert service.check(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(hours=1)) is None


@pytest.mark.parametrize(
    "payment,student,tutor",
    [("pi_456", "student-1", "tutor-1"), ("pi_123", "student-2", "tutor-1"), ("pi_123", "student-1", "tutor-2")],
)
def test__verify__bound_to_ids(service: BookingTokenService, payment: str, student: str, tutor: str) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    assert not service.verify(token, payment, student, tutor, NOW)
    assert service.check(token, payment, student, tutor, NOW) == TokenRejection.MISMATCH


def test__verify__expiry(service: BookingTokenService) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    assert service.verify(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(hours=24))
    assert not service.verify(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(hours=24, milliseconds=1))
    assert (
        service.check(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(days=2)) == TokenRejection.EXPIRED
    )


def test__verify__custom_ttl() -> None:
    service = BookingTokenService("secret", timedelta(minutes=5))
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    assert service.check(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(minutes=6)) == TokenRejection.EXPIRED


@pytest.mark.parametrize(
    "token",
    [
        "",
        "garbage",
        "pi_123:student-1:tutor-1:123",
        "pi_123:student-1:tutor-1:1:2:3",
        "pi_123:student-1:tutor-1:abc:ff",
        "pi_123:student-1:tutor-1:\u00b2:ff",
        "pi_123:student-1:tutor-1:\u0663\u0663:ff",
    ],
)
def test__verify__malformed(service: BookingTokenService, token: str) -> None:
    assert service.check(token, "pi_123", "student-1", "tutor-1", NOW) == TokenRejection.MALFORMED


def test__verify__tampered(service: BookingTokenService) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)
    payload, signature = token.rsplit(":", 1)
    later = str(int((NOW + timedelta(hours=20)).timestamp() * 1000))

    forged_signature = f"{payload}:{'0' * 64}"
    renewed = ":".join([*payload.split(":")[:3], later, signature])

    assert service.check(forged_signature, "pi_123", "student-1", "tutor-1", NOW) == TokenRejection.SIGNATURE
    assert service.check(renewed, "pi_123", "student-1", "tutor-1", NOW) == TokenRejection.SIGNATURE


def test__verify__other_secret(service: BookingTokenService) -> None:
    token = BookingTokenService("other secret").issue("pi_123", "student-1", "tutor-1", NOW)

    assert service.check(token, "pi_123", "student-1", "tutor-1", NOW) == TokenRejection.SIGNATURE


def test__verify__replay_within_ttl(service: BookingTokenService) -> None:
    token = service.issue("pi_123", "student-1", "tutor-1", NOW)

    assert all(
        service.verify(token, "pi_123", "student-1", "tutor-1", NOW + timedelta(hours=h)) for h in range(0, 24, 6)
    )


@pytest.mark.parametrize("bad", ["", "pi:123", "pi\n123"])
def test__issue__invalid_id(service: BookingTokenService, bad: str) -> None:
    with pytest.raises(ValueError):
        service.issue(bad, "student-1", "tutor-1", NOW)


def test__verify__non_ascii_digits(service: BookingTokenService) -> None:
    assert not service.verify("pi_123:student-1:tutor-1:²:abc", "pi_123", "student-1", "tutor-1", NOW)
