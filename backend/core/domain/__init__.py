"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler turning domain exceptions into responses.
notifications      Synchronous notification creation helper.
transactions       Row locking and post-commit side-effect runner.
access             Explicit authorization guards.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.notifications import NotificationService
    from core.domain.transactions import lock_for_update, run_side_effects
    from core.domain.access import require_user_type
"""
