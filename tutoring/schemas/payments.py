from decimal import Decimal
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


MAX_HOURS = 12


class CreatePaymentIntent(BaseModel):
    tutor_id: str = Field(description="ID of the tutor")
    student_id: str = Field(description="ID of the student")
    hours: Decimal = Field(gt=0, le=MAX_HOURS, decimal_places=2, description="Duration of the session in hours")
    start_time: int | None = Field(None, description="Start of the session (unix timestamp)")
    end_time: int | None = Field(None, description="End of the session (unix timestamp)")

    @model_validator(mode="after")
    def check_times(self) -> Self:
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        if self.start_time is not None and self.end_time is not None:
            if self.end_time - self.start_time != int(self.hours * 3600):
                raise ValueError("start_time and end_time do not match hours")
        return self


class PaymentIntentCreated(BaseModel):
    payment_reference_id: str = Field(description="ID of the payment intent")
    client_secret: str | None = Field(description="Client secret to complete the payment")
    booking_token: str = Field(description="Token to present when confirming the booking")
    amount: int = Field(description="Total amount to pay in whole currency units")
    subtotal: int = Field(description="Tutor rate times duration")
    fee: int = Field(description="Fee charged by the platform")


class Quote(BaseModel):
    tutor_id: str = Field(description="ID of the tutor")
    hours: float = Field(description="Duration of the session in hours")
    subtotal: int = Field(description="Tutor rate times duration")
    fee: int = Field(description="Fee charged by the platform")
    total: int = Field(description="Amount the student pays")


class PaymentMetadata(BaseModel):
    """Booking details stored on the payment intent, read back when the booking is confirmed"""

    model_config = ConfigDict(extra="ignore")

    tutor_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    hours: Decimal = Field(gt=0, le=MAX_HOURS)
    start_time: int | None = None
    end_time: int | None = None

    def to_metadata(self) -> dict[str, str]:
        return {k: str(v) for k, v in self.model_dump().items() if v is not None}
