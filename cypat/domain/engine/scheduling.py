"""Review-cadence policy for the scheduler.

Pure policy functions deciding which condition entries a tick evaluates.
No I/O, no locking, no side effects.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Policy Functions
# ---------------------------------------------------------------------------


def is_review_tick(tick: int, review_interval: int) -> bool:
    """Whether completed conditions are re-evaluated on ``tick``.

    Tick 0 is always a review tick.
    """
    if review_interval < 1:
        raise ValueError(f"review_interval must be >= 1, got {review_interval}")
    return tick % review_interval == 0


def is_due(completed: bool, tick: int, review_interval: int) -> bool:
    """Decide whether an entry is dispatched on ``tick``.

    Unresolved entries are polled on every tick. Resolved entries are
    re-checked on review ticks only, where a regression flips them back.
    """
    if not completed:
        return True
    return is_review_tick(tick, review_interval)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "is_due",
    "is_review_tick",
]
