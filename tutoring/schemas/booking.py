from pydantic import BaseModel, Field

from .sessions import Session


class ResolveBooking(BaseModel):
    slot_id: str = Field(description="ID of the tutor's availability slot")
    student_id: str = Field(description="ID of the student who wants to book")
    tutor_id: str = Field(description="ID of the tutor")
    start_time_minutes: int = Field(description="Requested start (in minutes since midnight)")
    end_time_minutes: int = Field(description="Requested end (in minutes since midnight)")


class Occurrence(BaseModel):
    start_time: int = Field(description="Start of the next occurrence (unix timestamp)")
    end_time: int = Field(description="End of the next occurrence (unix timestamp)")


class ConfirmBooking(BaseModel):
    payment_reference_id: str = Field(min_length=1, description="ID of the succeeded payment intent")
    booking_token: str = Field(min_length=1, description="Booking token returned when the payment was created")
    student_id: str = Field(description="ID of the student")
    tutor_id: str = Field(description="ID of the tutor")


class ConfirmedSession(Session):
    emails_sent: bool = Field(description="Whether the calendar invitation and emails were delivered")
    notification_error: str | None = Field(None, description="Why notifying the participants failed")
