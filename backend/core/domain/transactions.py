"""
core.domain.transactions — Helpers for safe state transitions.

Every report mutation follows the same shape::

    with transaction.atomic():
        report = lock_for_update(Report, report_id)
        ...validate, mutate, save...

    failures = run_side_effects([
        ("chat", lambda: ...),
        ("notification", lambda: ...),
    ])

``lock_for_update`` re-reads the row under ``SELECT ... FOR UPDATE`` so the
transition is validated against the committed state.  ``run_side_effects``
runs the follow-up writes *after* the main transaction committed, each in
its own atomic block, and reports which ones failed instead of undoing the
committed change.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from django.db import models, transaction

from core.domain.exceptions import NotFound

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=models.Model)

#: A named follow-up write: ``(effect_name, callable)``.
SideEffect = tuple[str, Callable[[], Any]]


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.  Only the model's
    own row is locked (``of=("self",)``).

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update(of=("self",)).get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with id {pk} does not exist.")


def run_side_effects(effects: Iterable[SideEffect]) -> list[str]:
    """
    Execute each side effect in order, in its own ``transaction.atomic()``.

    A failing effect is logged and recorded; the remaining effects still
    run.  Nothing is retried.

    Returns:
        Names of the effects that failed (empty when all succeeded).
    """
    failed: list[str] = []
    for name, effect in effects:
        try:
            with transaction.atomic():
                effect()
        except Exception:
            logger.exception("Side effect '%s' failed after commit", name)
            failed.append(name)
    return failed
