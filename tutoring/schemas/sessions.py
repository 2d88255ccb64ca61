from pydantic import BaseModel, Field

from ..models.sessions import SessionStatus


class Session(BaseModel):
    id: str = Field(description="Session ID")
    tutor_id: str = Field(description="ID of the tutor")
    student_id: str = Field(description="ID of the student")
    scheduled_start: int | None = Field(description="Start of the session (unix timestamp)")
    scheduled_end: int | None = Field(description="End of the session (unix timestamp)")
    duration_hours: float = Field(description="Duration of the session in hours")
    subtotal: int = Field(description="Tutor rate times duration")
    platform_fee: int = Field(description="Fee charged by the platform")
    total: int = Field(description="Amount paid by the student")
    payment_reference_id: str = Field(description="ID of the payment intent")
    meeting_link: str | None = Field(description="Link to the online meeting")
    calendar_event_id: str | None = Field(description="ID of the calendar event")
    status: SessionStatus = Field(description="Status of the session")


class UpdateSessionStatus(BaseModel):
    status: SessionStatus = Field(description="New status of the session")
