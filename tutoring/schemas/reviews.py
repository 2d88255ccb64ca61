from pydantic import BaseModel, Field


class Review(BaseModel):
    id: str = Field(description="Review ID")
    session_id: str = Field(description="ID of the reviewed session")
    tutor_id: str = Field(description="ID of the reviewed tutor")
    rating: int = Field(ge=1, le=5, description="Rating from 1 to 5")
    comment: str | None = Field(description="Optional comment")
    created_at: int = Field(description="Creation date")


class CreateReview(BaseModel):
    rating: int = Field(ge=1, le=5, description="Rating from 1 to 5")
    comment: str | None = Field(None, max_length=4096, description="Optional comment")
