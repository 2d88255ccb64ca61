"""Student profiles"""

from typing import Any

from fastapi import APIRouter

from ..auth import get_user, user_auth
from ..exceptions.auth import admin_responses, user_responses
from ..exceptions.entities import StudentNotFoundError
from ..exceptions.tutors import AlreadyRegisteredError, EmailAlreadyRegisteredError
from ..models import Student
from ..schemas.students import CreateStudent
from ..schemas.students import Student as StudentSchema
from ..schemas.user import User


router = APIRouter()


@router.post("/students", responses=user_responses(StudentSchema, AlreadyRegisteredError, EmailAlreadyRegisteredError))
async def register_student(data: CreateStudent, user: User = user_auth) -> Any:
    """
    Create the student profile of the user.

    *Requirements:* **USER**
    """

    if await Student.get(user.id):
        raise AlreadyRegisteredError
    if await Student.email_exists(data.email):
        raise EmailAlreadyRegisteredError

    return (await Student.create(user.id, data.name, data.email)).serialize


@router.get("/students/{user_id}", responses=admin_responses(StudentSchema, StudentNotFoundError))
async def get_student(user_id: str = get_user(require_self_or_admin=True)) -> Any:
    """
    Return the student profile of the user.

    *Requirements:* **SELF** or **ADMIN**
    """

    if not (student := await Student.get(user_id)):
        raise StudentNotFoundError

    return student.serialize
