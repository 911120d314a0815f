"""Per-entry dispatch: build the predicate's context, run it, record the result.

Context by condition kind:
- file: read-only binary handle at the stored cursor, or ``None`` when the
  file cannot be opened;
- app: the immutable ``AppData`` snapshot;
- user: the username;
- custom: no arguments.

Every invocation is isolated. A predicate that raises is logged and
counted on its entry, its ``completed`` flag keeps the previous value,
and the caller moves on to the next entry.
"""

from __future__ import annotations

import logging

from cypat.domain.engine.models import (
    AppCondition,
    Condition,
    ConditionEntry,
    CustomCondition,
    DispatchOutcome,
    FileCondition,
    UserCondition,
)

logger = logging.getLogger(__name__)


class Dispatcher:
    """Evaluate one condition entry at a time."""

    def dispatch(self, entry: ConditionEntry) -> DispatchOutcome:
        condition = entry.condition
        entry.evaluations += 1
        try:
            completed = bool(self._evaluate(condition))
        except Exception as exc:
            entry.failures += 1
            entry.last_error = f"{type(exc).__name__}: {exc}"
            logger.exception(
                "Check %s failed on evaluation %d",
                condition.describe(),
                entry.evaluations,
            )
            return DispatchOutcome.FAILED

        if completed != entry.completed:
            logger.info(
                "Check %s is now %s",
                condition.describe(),
                "complete" if completed else "incomplete",
            )
        entry.completed = completed
        return DispatchOutcome.COMPLETED if completed else DispatchOutcome.INCOMPLETE

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _evaluate(self, condition: Condition) -> object:
        if isinstance(condition, FileCondition):
            return self._evaluate_file(condition)
        if isinstance(condition, AppCondition):
            return condition.predicate(condition.app)
        if isinstance(condition, UserCondition):
            return condition.predicate(condition.username)
        if isinstance(condition, CustomCondition):
            return condition.predicate()
        raise TypeError(f"Unsupported condition type: {type(condition).__name__}")

    def _evaluate_file(self, condition: FileCondition) -> object:
        try:
            handle = open(condition.path, "rb")
        except OSError as exc:
            logger.debug("File %s unavailable: %s", condition.path, exc)
            return condition.predicate(None)

        with handle:
            handle.seek(condition.cursor)
            result = condition.predicate(handle)
            # The predicate may close the handle itself; keep the old cursor then.
            if not handle.closed:
                condition.cursor = handle.tell()
        return result
