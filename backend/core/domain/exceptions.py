"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler
(``core.domain.exception_handler``) maps them to HTTP responses.

Every class carries a stable ``code`` so that API clients can tell
"fix the input" apart from "this cannot succeed" and "retry the side effect".

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────┬──────┐
│ Domain Exception    │ code                 │ HTTP │
├─────────────────────┼──────────────────────┼──────┤
│ DomainError         │ domain_error         │ 400  │
│ ValidationFailed    │ validation_failed    │ 400  │
│ PermissionDenied    │ forbidden            │ 403  │
│ NotFound            │ not_found            │ 404  │
│ Conflict            │ conflict             │ 409  │
│ InvalidTransition   │ invalid_transition   │ 409  │
│ RoutingUnavailable  │ routing_unavailable  │ 422  │
│ SideEffectFailure   │ side_effect_failure  │ 207  │
└─────────────────────┴──────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if (report.status, target) not in ALLOWED_TRANSITIONS:
        raise InvalidTransition(current=report.status, target=target)
"""

from __future__ import annotations

from typing import Any, Sequence


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    code = "domain_error"

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationFailed(DomainError):
    """
    A required field is missing or malformed (empty rejection reason,
    out-of-range coordinates, wrong number of images, wrong user type
    for a role slot...).

    Maps to HTTP 400.
    """

    code = "validation_failed"

    def __init__(
        self,
        message: str = "The request payload is invalid.",
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field


class PermissionDenied(DomainError):
    """
    The acting user is not allowed to perform this operation (wrong user
    type, not the assignee, not the creator).

    Maps to HTTP 403.
    """

    code = "forbidden"

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist.

    Maps to HTTP 404.
    """

    code = "not_found"

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Maps to HTTP 409.
    """

    code = "conflict"

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not allowed from the current status.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="Resolved",
            target="InProgress",
            reason="Resolved is a terminal status.",
        )
    """

    code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class RoutingUnavailable(DomainError):
    """
    The referenced entities exist but the report cannot be routed: the
    category has no owning office, or the office has no technical staff.

    Maps to HTTP 422.
    """

    code = "routing_unavailable"

    def __init__(self, message: str = "The report cannot be routed to a staff member.") -> None:
        super().__init__(message)


class SideEffectFailure(DomainError):
    """
    The report mutation was committed but one or more follow-up side
    effects (chat provisioning, notification creation) failed.

    This is a *partial success*: ``report`` holds the committed report and
    ``failed_effects`` names the side effects that did not complete.  The
    core never retries them.  Maps to HTTP 207.
    """

    code = "side_effect_failure"

    def __init__(
        self,
        *,
        report: Any,
        failed_effects: Sequence[str],
        message: str | None = None,
    ) -> None:
        self.report = report
        self.failed_effects = list(failed_effects)
        if message is None:
            message = (
                "The report was updated but the following side effects "
                f"failed: {', '.join(self.failed_effects)}."
            )
        super().__init__(message)
