"""
core.domain.access — Explicit authorization guards for service layers.

Authorization is decided inside the services, from the acting user passed
explicitly to each operation (``requesting_user_id``, ``acting_staff_id``,
``requestor_id``).  Views only authenticate.  Every rejection goes through
``core.domain.exceptions.PermissionDenied``.

Usage in an app's service layer::

    from core.domain.access import require_user_type

    reviewer = UserDirectoryService.get_by_id(requesting_user_id)
    require_user_type(
        reviewer,
        UserType.PUBLIC_RELATIONS_OFFICER,
        UserType.ADMINISTRATOR,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User


def require_user_type(user: User, *allowed_types: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` unless the user is active and
    its ``user_type`` is one of ``allowed_types``.

    Example::

        require_user_type(user, UserType.CITIZEN)
    """
    if user.is_active and user.user_type in allowed_types:
        return
    raise PermissionDenied(
        message
        or (
            f"User type '{user.user_type}' is not permitted for this operation. "
            f"Required: {', '.join(str(t) for t in allowed_types)}."
        )
    )


def require_same_user(actual_id: int | None, expected_id: int | None, message: str) -> None:
    """Raise ``PermissionDenied`` unless both ids are set and equal."""
    if actual_id is None or expected_id is None or actual_id != expected_id:
        raise PermissionDenied(message)
