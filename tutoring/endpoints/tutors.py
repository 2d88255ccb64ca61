"""Tutor applications and the tutor directory"""

from typing import Any

from aiosmtplib import SMTPException
from fastapi import APIRouter, Query

from ..auth import require_admin, user_auth
from ..database import db
from ..exceptions.api_exception import responses
from ..exceptions.auth import admin_responses, user_responses
from ..exceptions.entities import TutorNotFoundError
from ..exceptions.tutors import AlreadyRegisteredError, EmailAlreadyRegisteredError
from ..logger import get_logger
from ..models import Tutor, TutorStatus
from ..schemas.tutors import CreateTutor
from ..schemas.tutors import Tutor as TutorSchema
from ..schemas.user import User
from ..utils.cache import clear_cache, redis_cached
from ..utils.email import TUTOR_APPROVED, TUTOR_REJECTED, Message


router = APIRouter()

logger = get_logger(__name__)


@redis_cached("tutors")
async def get_approved_tutors() -> list[TutorSchema]:
    return [TutorSchema(**tutor.serialize) for tutor in await Tutor.list_by_status(TutorStatus.APPROVED)]


@router.get("/tutors", responses=responses(list[TutorSchema]))
async def list_tutors() -> Any:
    """Return all approved tutors."""

    return await get_approved_tutors()


@router.post("/tutors", responses=user_responses(TutorSchema, AlreadyRegisteredError, EmailAlreadyRegisteredError))
async def apply_as_tutor(data: CreateTutor, user: User = user_auth) -> Any:
    """
    Apply as a tutor.

    The application has to be approved by an administrator before students can book the tutor.

    *Requirements:* **USER**
    """

    if await Tutor.get(user.id):
        raise AlreadyRegisteredError
    if await Tutor.email_exists(data.email):
        raise EmailAlreadyRegisteredError

    tutor = await Tutor.create(
        user.id,
        data.name,
        data.email,
        data.phone,
        data.subjects,
        data.modality,
        data.location,
        data.hourly_rate,
        data.bio,
    )
    logger.info(f"new tutor application from {user.id}")
    return tutor.serialize


@router.get("/tutors/{tutor_id}", responses=responses(TutorSchema, TutorNotFoundError))
async def get_tutor(tutor_id: str) -> Any:
    """Return a tutor."""

    if not (tutor := await Tutor.get(tutor_id)):
        raise TutorNotFoundError

    return tutor.serialize


@router.get("/admin/tutors", dependencies=[require_admin], responses=admin_responses(list[TutorSchema]))
async def list_applications(status: TutorStatus = Query(TutorStatus.PENDING, description="Review status")) -> Any:
    """
    Return all tutors with the given review status.

    *Requirements:* **ADMIN**
    """

    return [tutor.serialize for tutor in await Tutor.list_by_status(status)]


async def _review(tutor_id: str, status: TutorStatus, message: Message) -> Any:
    if not (tutor := await Tutor.get(tutor_id)):
        raise TutorNotFoundError

    tutor.status = status
    await db.commit()
    await clear_cache("tutors")
    logger.info(f"tutor {tutor_id} is now {status.value}")

    try:
        await message.send(tutor.email, name=tutor.name)
    except (ValueError, SMTPException, OSError) as e:
        logger.warning(f"could not notify tutor {tutor_id} about their review: {e}")

    return tutor.serialize


@router.patch(
    "/tutors/{tutor_id}/approve",
    dependencies=[require_admin],
    responses=admin_responses(TutorSchema, TutorNotFoundError),
)
async def approve_tutor(tutor_id: str) -> Any:
    """
    Approve a tutor application. The tutor is notified by email.

    *Requirements:* **ADMIN**
    """

    return await _review(tutor_id, TutorStatus.APPROVED, TUTOR_APPROVED)


@router.patch(
    "/tutors/{tutor_id}/reject",
    dependencies=[require_admin],
    responses=admin_responses(TutorSchema, TutorNotFoundError),
)
async def reject_tutor(tutor_id: str) -> Any:
    """
    Reject a tutor application. The tutor is notified by email.

    *Requirements:* **ADMIN**
    """

    return await _review(tutor_id, TutorStatus.REJECTED, TUTOR_REJECTED)
