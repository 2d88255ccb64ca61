from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from ..settings import settings


class Price(NamedTuple):
    subtotal: int
    fee: int
    total: int


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def price(hourly_rate: int, hours: Decimal | float | str, fee_rate: Decimal | None = None) -> Price:
    """
    Compute what a student pays for a session.

    Amounts are whole currency units. The subtotal is rounded first and the platform fee is computed from the
    rounded subtotal, so `price(400, 1.5)` at 8% is 600 + 48 = 648.
    """

    fee_rate = settings.platform_fee_rate if fee_rate is None else fee_rate
    subtotal = round_half_up(Decimal(hourly_rate) * Decimal(str(hours)))
    fee = round_half_up(Decimal(subtotal) * fee_rate)
    return Price(subtotal, fee, subtotal + fee)


def to_minor_units(amount: int) -> int:
    return amount * 100
