"""
Signed booking tokens.

A token binds a payment reference to the student and tutor it was created for:

    <payment_reference_id>:<student_id>:<tutor_id>:<issued_at_millis>:<hmac_sha256_hex>

The signature covers the first four fields exactly as they appear in the token. Verification is stateless,
a token can be presented again until it expires.
"""

import enum
import hmac
from datetime import datetime, timedelta

from ..logger import get_logger
from ..utils.utc import utcnow


logger = get_logger(__name__)

SEPARATOR = ":"


class TokenRejection(enum.Enum):
    MALFORMED = "malformed"
    MISMATCH = "mismatch"
    EXPIRED = "expired"
    SIGNATURE = "signature"


def _millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


class BookingTokenService:
    def __init__(self, secret: str, ttl: timedelta = timedelta(hours=24)) -> None:
        self._secret = secret.encode()
        self.ttl = ttl

    def _sign(self, payload: str) -> str:
        return hmac.digest(self._secret, payload.encode(), "sha256").hex()

    def issue(
        self, payment_reference_id: str, student_id: str, tutor_id: str, now: datetime | None = None
    ) -> str:
        for value in (payment_reference_id, student_id, tutor_id):
            if not value or SEPARATOR in value or "\n" in value:
                raise ValueError(f"invalid id for booking token: {value!r}")

        issued_at = _millis(now or utcnow())
        payload = SEPARATOR.join([payment_reference_id, student_id, tutor_id, str(issued_at)])
        return f"{payload}{SEPARATOR}{self._sign(payload)}"

    def check(
        self,
        token: str,
        payment_reference_id: str,
        student_id: str,
        tutor_id: str,
        now: datetime | None = None,
    ) -> TokenRejection | None:
        """Return why a token is not valid for this booking, or None if it is."""

        fields = token.split(SEPARATOR)
        if len(fields) != 5:
            return TokenRejection.MALFORMED

        *ids, issued_at, signature = fields
        if ids != [payment_reference_id, student_id, tutor_id]:
            return TokenRejection.MISMATCH

        if not (issued_at.isascii() and issued_at.isdigit()):
            return TokenRejection.MALFORMED
        if _millis(now or utcnow()) - int(issued_at) > self.ttl.total_seconds() * 1000:
            return TokenRejection.EXPIRED

        expected = self._sign(SEPARATOR.join(fields[:4]))
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            return TokenRejection.SIGNATURE

        return None

    def verify(
        self,
        token: str,
        payment_reference_id: str,
        student_id: str,
        tutor_id: str,
        now: datetime | None = None,
    ) -> bool:
        if rejection := self.check(token, payment_reference_id, student_id, tutor_id, now):
            logger.info(f"rejected booking token for payment {payment_reference_id}: {rejection.value}")
            return False
        return True
