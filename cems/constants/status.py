# cems/constants/status.py
"""
Closed value sets for roles and lifecycle states.

Models store these as plain strings; schemas and services use the enums.
"""

from enum import Enum


class UserRole(str, Enum):
    student = "student"
    organizer = "organizer"
    admin = "admin"


class EventStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"
    completed = "completed"

    @classmethod
    def open_for_registration(cls) -> set[str]:
        """Statuses in which students may register (and which hold a venue slot)."""
        return {cls.approved.value, cls.pending.value}


# Allowed admin-driven transitions. Organizer content edits reset to pending
# separately and are not listed here.
EVENT_STATUS_TRANSITIONS: dict[str, set[str]] = {
    EventStatus.pending.value: {EventStatus.approved.value, EventStatus.rejected.value},
    EventStatus.approved.value: {EventStatus.cancelled.value, EventStatus.completed.value},
    EventStatus.rejected.value: set(),
    EventStatus.cancelled.value: set(),
    EventStatus.completed.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in EVENT_STATUS_TRANSITIONS.get(current, set())


class RegistrationStatus(str, Enum):
    registered = "registered"
    attended = "attended"
    absent = "absent"
    cancelled = "cancelled"


class AttendanceStatus(str, Enum):
    """The two values an organizer may record."""
    attended = "attended"
    absent = "absent"


class NotificationType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"
