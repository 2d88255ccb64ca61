from pydantic import BaseModel, EmailStr, Field

from ..models.tutors import TutorStatus


class Tutor(BaseModel):
    id: str = Field(description="Tutor ID")
    name: str = Field(description="Full name of the tutor")
    subjects: str = Field(description="Subjects the tutor teaches")
    modality: str = Field(description="Online, in person or both")
    location: str | None = Field(description="Where in person sessions take place")
    hourly_rate: int = Field(description="Price per hour in whole currency units")
    bio: str | None = Field(description="Short biography")
    status: TutorStatus = Field(description="Review status of the tutor's application")


class CreateTutor(BaseModel):
    name: str = Field(min_length=1, max_length=256, description="Full name of the tutor")
    email: EmailStr = Field(description="Email address")
    phone: str = Field(min_length=1, max_length=32, description="Phone number")
    subjects: str = Field(min_length=1, max_length=1024, description="Subjects the tutor teaches")
    modality: str = Field(min_length=1, max_length=32, description="Online, in person or both")
    location: str | None = Field(None, max_length=256, description="Where in person sessions take place")
    hourly_rate: int = Field(gt=0, description="Price per hour in whole currency units")
    bio: str | None = Field(None, max_length=4096, description="Short biography")


class Rating(BaseModel):
    tutor_id: str = Field(description="Tutor ID")
    rating: float | None = Field(description="Average rating of the tutor (1-5), null if there are no reviews")
