from .availability_slots import AvailabilitySlot
from .reviews import Review
from .sessions import Session, SessionStatus
from .students import Student
from .tutors import Tutor, TutorStatus


__all__ = ["AvailabilitySlot", "Review", "Session", "SessionStatus", "Student", "Tutor", "TutorStatus"]
