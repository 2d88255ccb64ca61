from starlette import status

from .api_exception import APIException


class InvalidRangeError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid range"
    description = "The requested time range does not fit inside the availability slot."

    def __init__(self, bound: str):
        super().__init__()

        self.bound = bound
        self.detail = {"msg": type(self).detail, "bound": bound}


class AuthorizationMismatchError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Authorization mismatch"
    description = "The tutor or student does not match the ones the payment was authorized for."


class InvalidTokenError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid booking token"
    description = "The booking token is malformed, expired or was not issued for this booking."


class TutorNotEligibleError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Tutor not eligible"
    description = "The tutor is not approved and cannot be booked."


class StorageConflictError(Exception):
    """A session for this payment reference was stored concurrently."""


class NotificationDeliveryError(Exception):
    """The calendar event or the notification emails could not be delivered."""
