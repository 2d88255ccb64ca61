from starlette import status

from .api_exception import APIException
from .entities import EntityNotFoundError


class PaymentNotCompletedError(APIException):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    detail = "Payment not completed"
    description = "The payment has not succeeded (yet)."


class PaymentNotFoundError(EntityNotFoundError):
    detail = "Payment not found"
    description = "The payment reference is unknown to the payment provider."


class PaymentGatewayError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Payment gateway error"
    description = "The payment provider could not be reached."
