"""Booked sessions"""

from typing import Any

from fastapi import APIRouter, Depends

from ..auth import get_user, user_auth
from ..database import db
from ..dependencies import get_meeting_provider
from ..exceptions.auth import PermissionDeniedError, admin_responses
from ..exceptions.entities import SessionNotFoundError
from ..exceptions.sessions import InvalidStatusTransitionError
from ..logger import get_logger
from ..models import Session, SessionStatus
from ..schemas.sessions import Session as SessionSchema
from ..schemas.sessions import UpdateSessionStatus
from ..schemas.user import User
from ..services.meetings import MeetingProvider


router = APIRouter()

logger = get_logger(__name__)


async def _get_session(session_id: str, user: User, *, tutor_only: bool = False) -> Session:
    session = await Session.get(session_id)
    if not session:
        raise SessionNotFoundError

    participants = {session.tutor_id} if tutor_only else {session.tutor_id, session.student_id}
    if user.id not in participants and not user.admin:
        raise PermissionDeniedError

    return session


@router.get("/sessions/{session_id}", responses=admin_responses(SessionSchema, SessionNotFoundError))
async def get_session(session_id: str, user: User = user_auth) -> Any:
    """
    Return a session.

    *Requirements:* **PARTICIPANT** or **ADMIN**
    """

    return (await _get_session(session_id, user)).serialize


@router.get("/tutors/{user_id}/sessions", responses=admin_responses(list[SessionSchema]))
async def list_tutor_sessions(user_id: str = get_user(require_self_or_admin=True)) -> Any:
    """
    Return the sessions booked with the tutor, newest first.

    *Requirements:* **SELF** or **ADMIN**
    """

    return [session.serialize for session in await Session.list_for_tutor(user_id)]


@router.get("/students/{user_id}/sessions", responses=admin_responses(list[SessionSchema]))
async def list_student_sessions(user_id: str = get_user(require_self_or_admin=True)) -> Any:
    """
    Return the sessions booked by the student, newest first.

    *Requirements:* **SELF** or **ADMIN**
    """

    return [session.serialize for session in await Session.list_for_student(user_id)]


@router.patch(
    "/sessions/{session_id}/status",
    responses=admin_responses(SessionSchema, SessionNotFoundError, InvalidStatusTransitionError),
)
async def update_session_status(
    session_id: str,
    data: UpdateSessionStatus,
    user: User = user_auth,
    meetings: MeetingProvider = Depends(get_meeting_provider),
) -> Any:
    """
    Mark a pending session as completed or cancelled.

    Cancelling a session also deletes its calendar event, which notifies both participants.

    *Requirements:* **TUTOR** of the session or **ADMIN**
    """

    session = await _get_session(session_id, user, tutor_only=True)
    session.transition(data.status)
    logger.info(f"session {session_id} is now {data.status.value}")

    if session.status == SessionStatus.CANCELLED and session.calendar_event_id:
        await db.commit()
        await meetings.cancel_meeting(session.calendar_event_id)

    return session.serialize
