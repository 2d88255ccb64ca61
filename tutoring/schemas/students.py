from pydantic import BaseModel, EmailStr, Field


class Student(BaseModel):
    id: str = Field(description="Student ID")
    name: str = Field(description="Full name of the student")
    email: str = Field(description="Email address")


class CreateStudent(BaseModel):
    name: str = Field(min_length=1, max_length=256, description="Full name of the student")
    email: EmailStr = Field(description="Email address")
