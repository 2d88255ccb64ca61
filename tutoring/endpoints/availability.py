"""Weekly availability of tutors"""

from typing import Any

from fastapi import APIRouter

from ..auth import get_user
from ..exceptions.api_exception import responses
from ..exceptions.auth import admin_responses
from ..exceptions.entities import SlotNotFoundError, TutorNotFoundError
from ..models import AvailabilitySlot, Tutor
from ..schemas.availability import AvailabilitySlot as AvailabilitySlotSchema
from ..schemas.availability import CreateAvailabilitySlot


router = APIRouter()


@router.get(
    "/tutors/{user_id}/availability",
    responses=responses(list[AvailabilitySlotSchema], TutorNotFoundError),
)
async def list_availability(user_id: str = get_user()) -> Any:
    """Return the active weekly availability slots of a tutor."""

    if not await Tutor.get(user_id):
        raise TutorNotFoundError

    return [slot.serialize for slot in await AvailabilitySlot.list_active(user_id)]


@router.post(
    "/tutors/{user_id}/availability",
    responses=admin_responses(AvailabilitySlotSchema, TutorNotFoundError),
)
async def add_availability(data: CreateAvailabilitySlot, user_id: str = get_user(require_self_or_admin=True)) -> Any:
    """
    Add a weekly availability slot for the tutor.

    *Requirements:* **SELF** or **ADMIN**
    """

    if not await Tutor.get(user_id):
        raise TutorNotFoundError

    return (await AvailabilitySlot.create(user_id, data.day_of_week, data.start_time, data.end_time)).serialize


@router.delete(
    "/tutors/{user_id}/availability/{slot_id}",
    responses=admin_responses(bool, SlotNotFoundError),
)
async def delete_availability(slot_id: str, user_id: str = get_user(require_self_or_admin=True)) -> Any:
    """
    Deactivate a weekly availability slot of the tutor.

    Sessions that were booked from this slot are kept.

    *Requirements:* **SELF** or **ADMIN**
    """

    slot = await AvailabilitySlot.get(slot_id, tutor_id=user_id)
    if not slot or not slot.active:
        raise SlotNotFoundError

    slot.deactivate()
    return True
