from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, UTCDateTime, db, filter_by
from ..utils.utc import utcnow


class Student(Base):
    __tablename__ = "tutoring_students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    name: Mapped[str] = mapped_column(String(256))
    email: Mapped[str] = mapped_column(String(256), unique=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def serialize(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    async def create(cls, student_id: str, name: str, email: str) -> Student:
        return await db.add(cls(id=student_id, name=name, email=email, created_at=utcnow()))

    @classmethod
    async def get(cls, student_id: str) -> Student | None:
        return await db.get(cls, id=student_id)

    @classmethod
    async def fetch_fresh(cls, student_id: str) -> Student | None:
        return await db.first(filter_by(cls, id=student_id).execution_options(populate_existing=True))

    @classmethod
    async def email_exists(cls, email: str) -> bool:
        return await db.exists(filter_by(cls, email=email))
