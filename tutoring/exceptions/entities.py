from starlette import status

from .api_exception import APIException


class EntityNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"
    description = "The requested entity does not exist."


class TutorNotFoundError(EntityNotFoundError):
    detail = "Tutor not found"
    description = "The requested tutor does not exist."


class StudentNotFoundError(EntityNotFoundError):
    detail = "Student not found"
    description = "The requested student does not exist."


class SlotNotFoundError(EntityNotFoundError):
    detail = "Slot not found"
    description = "The requested availability slot does not exist."


class SessionNotFoundError(EntityNotFoundError):
    detail = "Session not found"
    description = "The requested session does not exist."
