import asyncio
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncIterator, Iterator

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp()) / 'tutoring.db'}"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["BOOKING_TOKEN_SECRET"] = "test-booking-secret"
os.environ["SMTP_HOST"] = ""

import pytest  # noqa: E402

from tutoring.database import DB, db, db_context  # noqa: E402
from tutoring.exceptions.payments import PaymentNotFoundError  # noqa: E402
from tutoring.models import Student, Tutor, TutorStatus  # noqa: E402
from tutoring.services.booking_token import BookingTokenService  # noqa: E402
from tutoring.services.meetings import MeetingResult  # noqa: E402
from tutoring.services.payments import PaymentIntent  # noqa: E402


class FakeGateway:
    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}
        self.created: list[tuple[int, str]] = []

    async def create_intent(self, amount_minor_units: int, currency: str, metadata: dict[str, str]) -> PaymentIntent:
        intent = PaymentIntent(
            id=f"pi_{len(self.intents) + 1}",
            status="requires_payment_method",
            client_secret=f"pi_{len(self.intents) + 1}_secret",
            metadata=dict(metadata),
        )
        self.intents[intent.id] = intent
        self.created.append((amount_minor_units, currency))
        return intent

    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntent:
        if payment_intent_id not in self.intents:
            raise PaymentNotFoundError
        return self.intents[payment_intent_id]

    def add(self, intent_id: str, status: str = "succeeded", **metadata: Any) -> PaymentIntent:
        intent = PaymentIntent(
            id=intent_id, status=status, metadata={k: str(v) for k, v in metadata.items() if v is not None}
        )
        self.intents[intent_id] = intent
        return intent


class FakeMeetings:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.result = MeetingResult("evt_1", "https://meet.google.com/abc-defg-hij", True)
        self.delay: float = 0
        self.error: Exception | None = None
        self.cancelled: list[str] = []

    async def create_meeting(
        self,
        tutor_name: str,
        tutor_email: str,
        student_name: str,
        student_email: str,
        start_time: Any,
        duration_hours: Decimal,
    ) -> MeetingResult:
        self.calls.append((tutor_name, tutor_email, student_name, student_email, start_time, duration_hours))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result

    async def cancel_meeting(self, event_id: str) -> bool:
        self.cancelled.append(event_id)
        return True


class FakeRedis:
    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: Any) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def scan_iter(self, pattern: str) -> AsyncIterator[str]:
        prefix = pattern.rstrip("*")
        for key in [*self.data]:
            if key.startswith(prefix):
                yield key


@pytest.fixture
async def database() -> AsyncIterator[DB]:
    await db.create_tables()
    yield db
    await db.close()
    await db.drop_tables()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> Iterator[FakeRedis]:
    redis = FakeRedis()
    monkeypatch.setattr("tutoring.utils.cache.redis", redis)
    yield redis


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def meetings() -> FakeMeetings:
    return FakeMeetings()


@pytest.fixture
def tokens() -> BookingTokenService:
    return BookingTokenService("test-booking-secret")


async def create_tutor(
    tutor_id: str = "tutor-1", *, hourly_rate: int = 300, status: TutorStatus = TutorStatus.APPROVED
) -> str:
    async with db_context():
        tutor = await Tutor.create(
            tutor_id,
            "Ana Torres",
            f"{tutor_id}@example.com",
            "+52 55 1234 5678",
            "Mathematics, Physics",
            "online",
            None,
            hourly_rate,
            None,
        )
        tutor.status = status
    return tutor_id


async def create_student(student_id: str = "student-1") -> str:
    async with db_context():
        await Student.create(student_id, "Luis Ramirez", f"{student_id}@example.com")
    return student_id


@pytest.fixture
async def tutor(database: DB) -> str:
    return await create_tutor()


@pytest.fixture
async def student(database: DB) -> str:
    return await create_student()


@pytest.fixture
def make_tutor(database: DB) -> Any:
    return create_tutor


@pytest.fixture
def make_student(database: DB) -> Any:
    return create_student
