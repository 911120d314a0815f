"""Ordered, lock-guarded score ledger.

Each public method takes the ledger lock once for a short critical
section. There is no compound "insert if absent": callers composing
``exists`` and ``upsert`` can race with another writer between the two
calls.
"""

from __future__ import annotations

import logging

from cypat.domain.common.errors import InvalidScoreError
from cypat.domain.common.types import SCORE_VALUE_MAX, SCORE_VALUE_MIN, ScoreId, ScoreValue
from cypat.domain.engine.models import ScoreEntry
from cypat.engine.guarded import Guarded

logger = logging.getLogger(__name__)


def _validate(score_id: ScoreId, value: ScoreValue | None = None) -> None:
    if isinstance(score_id, bool) or not isinstance(score_id, int) or score_id < 0:
        raise InvalidScoreError(f"Score id must be a non-negative int, got {score_id!r}")
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScoreError(f"Score value must be an int, got {value!r}")
    if not SCORE_VALUE_MIN <= value <= SCORE_VALUE_MAX:
        raise InvalidScoreError(f"Score value out of 32-bit range: {value}")


class ScoreLedger:
    """Insertion-ordered collection of score entries keyed by id."""

    def __init__(self, *, ignore_lock_failures: bool = False) -> None:
        self._entries = Guarded(
            [], name="score ledger", ignore_failures=ignore_lock_failures
        )

    def upsert(self, score_id: ScoreId, value: ScoreValue, reason: str) -> None:
        """Add an entry, or replace value and reason of an existing id in place."""
        _validate(score_id, value)
        reason = str(reason)
        with self._entries.hold() as entries:
            for idx, entry in enumerate(entries):
                if entry.id == score_id:
                    entries[idx] = ScoreEntry(score_id, value, reason)
                    break
            else:
                entries.append(ScoreEntry(score_id, value, reason))
        logger.debug("Score %d set to %d (%s)", score_id, value, reason)

    def remove(self, score_id: ScoreId) -> bool:
        """Remove the entry for ``score_id``.

        Returns:
            True if an entry was removed, False if the id was not present
        """
        _validate(score_id)
        with self._entries.hold() as entries:
            for idx, entry in enumerate(entries):
                if entry.id == score_id:
                    del entries[idx]
                    break
            else:
                return False
        logger.debug("Score %d removed", score_id)
        return True

    def get(self, score_id: ScoreId) -> ScoreEntry | None:
        with self._entries.hold() as entries:
            for entry in entries:
                if entry.id == score_id:
                    return entry
        return None

    def exists(self, score_id: ScoreId) -> bool:
        return self.get(score_id) is not None

    def total(self) -> int:
        with self._entries.hold() as entries:
            return sum(entry.value for entry in entries)

    def report(self) -> list[tuple[str, int]]:
        """(reason, value) pairs in insertion order."""
        with self._entries.hold() as entries:
            return [(entry.reason, entry.value) for entry in entries]

    def entries(self) -> list[ScoreEntry]:
        with self._entries.hold() as entries:
            return list(entries)

    def clear(self) -> None:
        with self._entries.hold() as entries:
            entries.clear()

    @property
    def lock_failed(self) -> bool:
        return self._entries.failed

    def reset_lock(self) -> None:
        self._entries.reset()

    def __len__(self) -> int:
        with self._entries.hold() as entries:
            return len(entries)

    def __contains__(self, score_id: object) -> bool:
        return isinstance(score_id, int) and self.exists(score_id)

    def __str__(self) -> str:
        return f"ScoreLedger({len(self)} entries, total={self.total()})"
