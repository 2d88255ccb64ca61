from dataclasses import dataclass, field
from typing import Any, Protocol

import stripe
from starlette.concurrency import run_in_threadpool

from ..exceptions.payments import PaymentGatewayError, PaymentNotFoundError
from ..logger import get_logger


logger = get_logger(__name__)


@dataclass
class PaymentIntent:
    id: str
    status: str
    client_secret: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGateway(Protocol):
    async def create_intent(self, amount_minor_units: int, currency: str, metadata: dict[str, str]) -> PaymentIntent:
        ...

    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntent:
        ...


def _from_stripe(intent: Any) -> PaymentIntent:
    return PaymentIntent(
        id=intent.id,
        status=intent.status,
        client_secret=getattr(intent, "client_secret", None),
        metadata={str(k): str(v) for k, v in dict(intent.metadata or {}).items()},
    )


class StripeGateway:
    """Payment intents on Stripe. The stripe client blocks, so calls run in the thread pool."""

    def __init__(self, api_key: str) -> None:
        self._client = stripe.StripeClient(api_key)

    async def create_intent(self, amount_minor_units: int, currency: str, metadata: dict[str, str]) -> PaymentIntent:
        try:
            intent = await run_in_threadpool(
                self._client.payment_intents.create,
                params={
                    "amount": amount_minor_units,
                    "currency": currency,
                    "metadata": metadata,
                    "automatic_payment_methods": {"enabled": True},
                },
            )
        except stripe.StripeError as e:
            logger.error(f"could not create payment intent: {e}")
            raise PaymentGatewayError from e

        logger.info(f"created payment intent {intent.id} for {amount_minor_units} {currency}")
        return _from_stripe(intent)

    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            intent = await run_in_threadpool(self._client.payment_intents.retrieve, payment_intent_id)
        except stripe.InvalidRequestError as e:
            raise PaymentNotFoundError from e
        except stripe.StripeError as e:
            logger.error(f"could not retrieve payment intent {payment_intent_id}: {e}")
            raise PaymentGatewayError from e

        return _from_stripe(intent)
