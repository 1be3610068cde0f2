"""Caller authorization for reminder operations."""

from src.core.entities.employee import Requester
from src.core.exceptions import ForbiddenError, UnauthorizedError


def ensure_manager(requester: Requester | None) -> Requester:
    """
    Only active managers may send reminders, view the overview or manage
    rules and settings.

    Raises:
        UnauthorizedError: No authenticated caller.
        ForbiddenError: Caller is suspended or not a manager.
    """
    if requester is None:
        raise UnauthorizedError()
    if requester.suspended:
        raise ForbiddenError("Suspended accounts cannot manage reminders", requester.user_id)
    if not requester.is_manager:
        raise ForbiddenError("Only managers can manage reminders", requester.user_id)
    return requester
