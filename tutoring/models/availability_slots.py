from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo
from typing import Any, NamedTuple
from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, db, filter_by
from ..exceptions.booking import InvalidRangeError
from ..utils.utc import day_of_week, platform_zone


class AvailabilitySlot(Base):
    __tablename__ = "tutoring_availability_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    tutor_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_tutors.id"))
    day_of_week: Mapped[int] = mapped_column(SmallInteger)
    start_time: Mapped[int] = mapped_column(SmallInteger)
    end_time: Mapped[int] = mapped_column(SmallInteger)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tutor_id": self.tutor_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "active": self.active,
        }

    @classmethod
    async def create(cls, tutor_id: str, day: int, start_time: int, end_time: int) -> AvailabilitySlot:
        if not 0 <= start_time < end_time < 24 * 60:
            raise ValueError("invalid availability window")

        return await db.add(
            cls(
                id=str(uuid4()),
                tutor_id=tutor_id,
                day_of_week=day,
                start_time=start_time,
                end_time=end_time,
                active=True,
            )
        )

    @classmethod
    async def get(cls, slot_id: str, tutor_id: str | None = None) -> AvailabilitySlot | None:
        if tutor_id is None:
            return await db.get(cls, id=slot_id)
        return await db.get(cls, id=slot_id, tutor_id=tutor_id)

    @classmethod
    async def list_active(cls, tutor_id: str) -> list[AvailabilitySlot]:
        return await db.all(
            filter_by(cls, tutor_id=tutor_id, active=True).order_by(cls.day_of_week, cls.start_time)
        )

    def deactivate(self) -> None:
        # rows stay around, sessions may still point at them
        self.active = False


class Occurrence(NamedTuple):
    start_time: datetime
    end_time: datetime


def resolve_occurrence(
    slot: AvailabilitySlot, requested_start: int, requested_end: int, now: datetime, zone: tzinfo | None = None
) -> Occurrence:
    """
    Compute the next concrete occurrence of a weekly availability slot.

    `requested_start` and `requested_end` are minutes since midnight and have to lie inside the slot.
    If the slot is today but its start has already been reached, the occurrence is the one next week.
    The returned datetimes are timezone aware and expressed in the platform's reference timezone.
    """

    if requested_start < slot.start_time:
        raise InvalidRangeError("start")
    if requested_end > slot.end_time:
        raise InvalidRangeError("end")
    if requested_end <= requested_start:
        raise InvalidRangeError("order")

    zone = zone or platform_zone()
    now = now.astimezone(zone)

    days_until = (slot.day_of_week - day_of_week(now) + 7) % 7
    if days_until == 0 and now.hour * 60 + now.minute >= slot.start_time:
        days_until = 7

    anchor = now.date() + timedelta(days=days_until)
    return Occurrence(
        datetime.combine(anchor, time(*divmod(requested_start, 60)), tzinfo=zone),
        datetime.combine(anchor, time(*divmod(requested_end, 60)), tzinfo=zone),
    )
