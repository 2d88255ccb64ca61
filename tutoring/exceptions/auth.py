from typing import Any

from starlette import status

from .api_exception import APIException, responses


class InvalidAccessTokenError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid token"
    description = "This access token is invalid or the session has expired."


class PermissionDeniedError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Permission denied"
    description = "The user is not allowed to use this endpoint."


def user_responses(default: Any, *args: type[APIException]) -> dict[int | str, dict[str, Any]]:
    return responses(default, *args, InvalidAccessTokenError)


def admin_responses(default: Any, *args: type[APIException]) -> dict[int | str, dict[str, Any]]:
    return user_responses(default, *args, PermissionDeniedError)
