from types import ModuleType
from typing import Any

from fastapi import APIRouter

from . import availability, booking, payments, reviews, sessions, students, tutors


MODULES: list[ModuleType] = [tutors, students, availability, booking, payments, sessions, reviews]

ROUTER = APIRouter()
TAGS: list[dict[str, Any]] = []

for module in MODULES:
    name = module.__name__.split(".")[-1]
    router = APIRouter(tags=[name])
    router.include_router(module.router)
    ROUTER.include_router(router)

    TAGS.append({"name": name, "description": module.__doc__ or ""})
