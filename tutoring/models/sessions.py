from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import BigInteger, Boolean, Enum, ForeignKey, Numeric, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, UTCDateTime, db, filter_by
from ..exceptions.booking import StorageConflictError
from ..exceptions.sessions import InvalidStatusTransitionError
from ..utils.utc import utcnow


class SessionStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.PENDING: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.CANCELLED: set(),
}


class Session(Base):
    __tablename__ = "tutoring_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    tutor_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_tutors.id"))
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_students.id"))
    scheduled_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    scheduled_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    duration_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    subtotal: Mapped[int] = mapped_column(BigInteger)
    platform_fee: Mapped[int] = mapped_column(BigInteger)
    total: Mapped[int] = mapped_column(BigInteger)
    payment_reference_id: Mapped[str] = mapped_column(String(255), unique=True)
    meeting_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    calendar_event_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    notifications_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[SessionStatus] = mapped_column(Enum(SessionStatus))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tutor_id": self.tutor_id,
            "student_id": self.student_id,
            "scheduled_start": int(self.scheduled_start.timestamp()) if self.scheduled_start else None,
            "scheduled_end": int(self.scheduled_end.timestamp()) if self.scheduled_end else None,
            "duration_hours": float(self.duration_hours),
            "subtotal": self.subtotal,
            "platform_fee": self.platform_fee,
            "total": self.total,
            "payment_reference_id": self.payment_reference_id,
            "meeting_link": self.meeting_link,
            "calendar_event_id": self.calendar_event_id,
            "status": self.status.value,
        }

    @classmethod
    async def create(
        cls,
        tutor_id: str,
        student_id: str,
        scheduled_start: datetime | None,
        scheduled_end: datetime | None,
        duration_hours: Decimal,
        subtotal: int,
        platform_fee: int,
        payment_reference_id: str,
        meeting_link: str | None,
        calendar_event_id: str | None,
        notifications_sent: bool,
    ) -> Session:
        """
        Insert a new pending session.

        The unique constraint on the payment reference is checked immediately, a concurrent insert for the same
        payment raises :class:`StorageConflictError`. The caller has to roll back the database session then.
        """

        session = await db.add(
            cls(
                id=str(uuid4()),
                tutor_id=tutor_id,
                student_id=student_id,
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
                duration_hours=duration_hours,
                subtotal=subtotal,
                platform_fee=platform_fee,
                total=subtotal + platform_fee,
                payment_reference_id=payment_reference_id,
                meeting_link=meeting_link,
                calendar_event_id=calendar_event_id,
                notifications_sent=notifications_sent,
                status=SessionStatus.PENDING,
                created_at=utcnow(),
            )
        )
        try:
            await db.flush()
        except IntegrityError as e:
            raise StorageConflictError(payment_reference_id) from e
        return session

    @classmethod
    async def get(cls, session_id: str) -> Session | None:
        return await db.get(cls, id=session_id)

    @classmethod
    async def find_by_payment_reference(cls, payment_reference_id: str) -> Session | None:
        return await db.first(
            filter_by(cls, payment_reference_id=payment_reference_id).execution_options(populate_existing=True)
        )

    @classmethod
    async def list_for_tutor(cls, tutor_id: str) -> list[Session]:
        return await db.all(filter_by(cls, tutor_id=tutor_id).order_by(cls.created_at.desc()))

    @classmethod
    async def list_for_student(cls, student_id: str) -> list[Session]:
        return await db.all(filter_by(cls, student_id=student_id).order_by(cls.created_at.desc()))

    def transition(self, status: SessionStatus) -> None:
        if status not in TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError
        self.status = status
