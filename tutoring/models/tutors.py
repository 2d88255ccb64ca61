from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, UTCDateTime, db, filter_by
from ..utils.utc import utcnow


class TutorStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Tutor(Base):
    __tablename__ = "tutoring_tutors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    name: Mapped[str] = mapped_column(String(256))
    email: Mapped[str] = mapped_column(String(256), unique=True)
    phone: Mapped[str] = mapped_column(String(32))
    subjects: Mapped[str] = mapped_column(String(1024))
    modality: Mapped[str] = mapped_column(String(32))
    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    hourly_rate: Mapped[int] = mapped_column(BigInteger)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TutorStatus] = mapped_column(Enum(TutorStatus))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subjects": self.subjects,
            "modality": self.modality,
            "location": self.location,
            "hourly_rate": self.hourly_rate,
            "bio": self.bio,
            "status": self.status.value,
        }

    @property
    def is_approved(self) -> bool:
        return self.status == TutorStatus.APPROVED

    @classmethod
    async def create(
        cls,
        tutor_id: str,
        name: str,
        email: str,
        phone: str,
        subjects: str,
        modality: str,
        location: str | None,
        hourly_rate: int,
        bio: str | None,
    ) -> Tutor:
        return await db.add(
            cls(
                id=tutor_id,
                name=name,
                email=email,
                phone=phone,
                subjects=subjects,
                modality=modality,
                location=location,
                hourly_rate=hourly_rate,
                bio=bio,
                status=TutorStatus.PENDING,
                created_at=utcnow(),
            )
        )

    @classmethod
    async def get(cls, tutor_id: str) -> Tutor | None:
        return await db.get(cls, id=tutor_id)

    @classmethod
    async def fetch_fresh(cls, tutor_id: str) -> Tutor | None:
        """Load a tutor from the database, overwriting anything the session has cached"""

        return await db.first(filter_by(cls, id=tutor_id).execution_options(populate_existing=True))

    @classmethod
    async def email_exists(cls, email: str) -> bool:
        return await db.exists(filter_by(cls, email=email))

    @classmethod
    async def list_by_status(cls, status: TutorStatus) -> list[Tutor]:
        return await db.all(filter_by(cls, status=status).order_by(cls.created_at))
