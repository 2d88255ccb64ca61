"""Reviews and ratings of tutors"""

from typing import Any

from fastapi import APIRouter

from ..auth import user_auth
from ..database import db
from ..exceptions.api_exception import responses
from ..exceptions.auth import PermissionDeniedError, user_responses
from ..exceptions.entities import SessionNotFoundError, TutorNotFoundError
from ..exceptions.sessions import AlreadyReviewedError, SessionNotCompletedError
from ..models import Review, Session, SessionStatus, Tutor
from ..schemas.reviews import CreateReview
from ..schemas.reviews import Review as ReviewSchema
from ..schemas.tutors import Rating
from ..schemas.user import User
from ..utils.cache import clear_cache


router = APIRouter()


@router.post(
    "/sessions/{session_id}/review",
    responses=user_responses(
        ReviewSchema, SessionNotFoundError, PermissionDeniedError, SessionNotCompletedError, AlreadyReviewedError
    ),
)
async def review_session(session_id: str, data: CreateReview, user: User = user_auth) -> Any:
    """
    Rate the tutor of a completed session. Every session can be reviewed once.

    *Requirements:* **STUDENT** of the session
    """

    session = await Session.get(session_id)
    if not session:
        raise SessionNotFoundError
    if session.student_id != user.id:
        raise PermissionDeniedError
    if session.status != SessionStatus.COMPLETED:
        raise SessionNotCompletedError
    if await Review.exists_for_session(session_id):
        raise AlreadyReviewedError

    review = await Review.create(session_id, session.tutor_id, session.student_id, data.rating, data.comment)
    await db.commit()
    await clear_cache("tutor_rating")
    return review.serialize


@router.get("/tutors/{tutor_id}/rating", responses=responses(Rating, TutorNotFoundError))
async def get_rating(tutor_id: str) -> Any:
    """Return the average rating of a tutor."""

    if not await Tutor.get(tutor_id):
        raise TutorNotFoundError

    return Rating(tutor_id=tutor_id, rating=await Review.get_rating(tutor_id))
