from starlette import status

from .api_exception import APIException


class EmailAlreadyRegisteredError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Email already registered"
    description = "There already is an account with this email address."


class AlreadyRegisteredError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already registered"
    description = "This user already has a profile."
