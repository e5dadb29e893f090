# cems/core/permissions.py
"""
Authorization predicates.

Each takes the authenticated caller (TokenPayload) and answers one question,
so endpoints and services never compare roles inline.
"""

from cems.constants.status import EventStatus, UserRole
from cems.schemas.token import TokenPayload


def is_admin(user: TokenPayload) -> bool:
    return user is not None and user.role == UserRole.admin


def can_manage_event(user: TokenPayload, event) -> bool:
    """Admins manage every event; organizers only the ones they own."""
    if user is None:
        return False
    if is_admin(user):
        return True
    return user.role == UserRole.organizer and event.organizer_id == user.sub


def can_view_event(user: TokenPayload, event) -> bool:
    """Approved events are public. Anything else is visible to its owner and admins."""
    if event.status == EventStatus.approved.value:
        return True
    return can_manage_event(user, event)


def can_access_user(user: TokenPayload, user_id: str) -> bool:
    return is_admin(user) or user.sub == user_id
