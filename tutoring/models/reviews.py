from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import ForeignKey, SmallInteger, String, Text, func, select
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, UTCDateTime, db, filter_by
from ..utils.cache import redis_cached
from ..utils.utc import utcnow


class Review(Base):
    __tablename__ = "tutoring_reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    session_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_sessions.id"), unique=True)
    tutor_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_tutors.id"))
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("tutoring_students.id"))
    rating: Mapped[int] = mapped_column(SmallInteger)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "tutor_id": self.tutor_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": int(self.created_at.timestamp()),
        }

    @classmethod
    async def create(cls, session_id: str, tutor_id: str, student_id: str, rating: int, comment: str | None) -> Review:
        return await db.add(
            cls(
                id=str(uuid4()),
                session_id=session_id,
                tutor_id=tutor_id,
                student_id=student_id,
                rating=rating,
                comment=comment,
                created_at=utcnow(),
            )
        )

    @classmethod
    async def exists_for_session(cls, session_id: str) -> bool:
        return await db.exists(filter_by(cls, session_id=session_id))

    @classmethod
    @redis_cached("tutor_rating", "tutor_id")
    async def get_rating(cls, tutor_id: str) -> float | None:
        rating = await db.first(select(func.avg(cls.rating)).where(cls.tutor_id == tutor_id))
        return float(rating) if rating is not None else None
