from typing import Self

from pydantic import BaseModel, Field, model_validator


class AvailabilitySlot(BaseModel):
    id: str = Field(description="Availability slot ID")
    tutor_id: str = Field(description="ID of the tutor offering the slot")
    day_of_week: int = Field(ge=0, le=6, description="Weekday of the slot (0=Sunday, 1=Monday, ...)")
    start_time: int = Field(description="Start time of the slot (in minutes since midnight)")
    end_time: int = Field(description="End time of the slot (in minutes since midnight)")
    active: bool = Field(description="Whether the slot can still be booked")


class CreateAvailabilitySlot(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="Weekday of the slot (0=Sunday, 1=Monday, ...)")
    start_time: int = Field(ge=0, lt=24 * 60, description="Start time of the slot (in minutes since midnight)")
    end_time: int = Field(gt=0, lt=24 * 60, description="End time of the slot (in minutes since midnight)")

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self
