"""
Condition registry for vulnerability checks.

Checks are appended in registration order, which is also evaluation
order. Entries are never removed. The registry lock is re-entrant so a
predicate running inside a tick may register further checks; those are
first evaluated on the next tick.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from cypat.domain.engine.models import (
    AppCondition,
    AppData,
    AppPredicate,
    Condition,
    ConditionEntry,
    ConditionKind,
    CustomCondition,
    CustomPredicate,
    FileCondition,
    FilePredicate,
    InstallMethod,
    UserCondition,
    UserPredicate,
)
from cypat.engine.guarded import Guarded

logger = logging.getLogger(__name__)


def _require_callable(predicate: object) -> None:
    if not callable(predicate):
        raise TypeError(f"Predicate must be callable, got {type(predicate).__name__}")


class ConditionRegistry:
    """
    Append-only, ordered collection of condition entries.

    Each entry pairs a condition with the result of its most recent
    evaluation. New entries always start incomplete.
    """

    def __init__(self, *, ignore_lock_failures: bool = False):
        """Initialize empty registry."""
        self._entries = Guarded(
            [],
            name="condition registry",
            ignore_failures=ignore_lock_failures,
            reentrant=True,
        )

    def register(self, condition: Condition) -> ConditionEntry:
        """
        Append a condition.

        Args:
            condition: Any condition variant

        Returns:
            The new entry (completed=False)
        """
        _require_callable(condition.predicate)
        entry = ConditionEntry(condition=condition)
        with self._entries.hold() as entries:
            entries.append(entry)
        logger.info("Registered %s check: %s", condition.kind.value, condition.describe())
        return entry

    def register_file(
        self,
        path: str | os.PathLike,
        predicate: FilePredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        return self.register(
            FileCondition(path=os.fspath(path), predicate=predicate, label=label)
        )

    def register_app(
        self,
        name: str,
        install_method: InstallMethod,
        predicate: AppPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        app = AppData(name=str(name), install_method=InstallMethod(install_method))
        return self.register(AppCondition(app=app, predicate=predicate, label=label))

    def register_user(
        self,
        username: str,
        predicate: UserPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        return self.register(
            UserCondition(username=str(username), predicate=predicate, label=label)
        )

    def register_custom(
        self,
        predicate: CustomPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        return self.register(CustomCondition(predicate=predicate, label=label))

    @contextmanager
    def acquire(self) -> Iterator[list[ConditionEntry]]:
        """
        Hold the registry lock for a full evaluation pass.

        Yields a copy of the entry list taken when the lock was acquired,
        so checks registered during the pass do not join it.
        """
        with self._entries.hold() as entries:
            yield list(entries)

    def snapshot(self) -> list[tuple[ConditionKind, bool]]:
        """(kind, completed) for every entry, in registration order."""
        with self._entries.hold() as entries:
            return [(entry.kind, entry.completed) for entry in entries]

    @property
    def lock_failed(self) -> bool:
        return self._entries.failed

    def reset_lock(self) -> None:
        self._entries.reset()

    def __len__(self) -> int:
        """Number of registered conditions."""
        with self._entries.hold() as entries:
            return len(entries)

    def __str__(self) -> str:
        return f"ConditionRegistry({len(self)} conditions)"
