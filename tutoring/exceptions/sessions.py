from starlette import status

from .api_exception import APIException


class InvalidStatusTransitionError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Invalid status transition"
    description = "Sessions can only move from pending to completed or cancelled."


class SessionNotCompletedError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Session not completed"
    description = "Only completed sessions can be reviewed."


class AlreadyReviewedError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already reviewed"
    description = "This session has already been reviewed."
