"""Engine: the public facade over registry, dispatcher, scheduler and ledger.

Each ``Engine`` owns its own state; nothing is module-level, so several
engines can live side by side (one per test, for instance).

Usage::

    engine = Engine(configure_logs=True)  # applies CYPAT_LOG_LEVEL

    def wrote_hello(handle):
        if handle is None:
            return False
        if handle.read().strip() == b"Hello World":
            engine.upsert_score(0, 50, "Wrote Hello World")
            return True
        return False

    engine.register_file_check("world.txt", wrote_hello)
    engine.add_hook(lambda e: e.stop() if e.score_exists(0) else None)
    engine.set_poll_frequency(2)
    engine.set_completed_review_interval(10)
    engine.start()
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable

from cypat.config.logging_config import configure_logging
from cypat.config.settings import EngineSettings, get_settings
from cypat.domain.common.errors import ScoreNotFoundError
from cypat.domain.common.types import ScoreId, ScoreValue
from cypat.domain.engine.models import (
    AppPredicate,
    ConditionEntry,
    ConditionKind,
    CustomPredicate,
    EngineStatus,
    FilePredicate,
    InstallMethod,
    ScoreEntry,
    TickReport,
    UserPredicate,
)
from cypat.engine.dispatcher import Dispatcher
from cypat.engine.ledger import ScoreLedger
from cypat.engine.registry import ConditionRegistry
from cypat.engine.scheduler import SchedulerLoop

logger = logging.getLogger(__name__)


class Engine:
    """A scoring engine instance.

    Predicates registered on the engine receive only their check's context
    (file handle, app descriptor, username, or nothing). To post scores they
    close over the engine they were registered on. Hooks are the exception:
    they are called with the engine.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        configure_logs: bool = False,
    ) -> None:
        self._settings = settings or get_settings()
        if configure_logs:
            configure_logging(self._settings.log_level)
        ignore = self._settings.ignore_lock_failures
        self._ledger = ScoreLedger(ignore_lock_failures=ignore)
        self._registry = ConditionRegistry(ignore_lock_failures=ignore)
        self._dispatcher = Dispatcher()
        self._scheduler = SchedulerLoop(
            self._registry,
            self._dispatcher,
            poll_interval=self._settings.poll_interval,
            completed_review_interval=self._settings.completed_review_interval,
            stop_wait_timeout=self._settings.stop_wait_timeout,
        )

    @classmethod
    def from_settings(cls, *, configure_logs: bool = False, **overrides: Any) -> "Engine":
        """Build an engine from a fresh read of the environment."""
        return cls(EngineSettings(**overrides), configure_logs=configure_logs)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def ledger(self) -> ScoreLedger:
        return self._ledger

    @property
    def registry(self) -> ConditionRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_file_check(
        self,
        path: str | os.PathLike,
        predicate: FilePredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        """Register a check on a file's contents.

        The predicate gets a read-only binary handle positioned where the
        previous evaluation left off, or ``None`` if the file is missing.
        A truthy return marks the check complete.
        """
        return self._registry.register_file(path, predicate, label)

    def register_app_check(
        self,
        name: str,
        install_method: InstallMethod,
        predicate: AppPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        """Register a check on an application; the predicate gets its ``AppData``."""
        return self._registry.register_app(name, install_method, predicate, label)

    def register_user_check(
        self,
        username: str,
        predicate: UserPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        """Register a check on a user account; the predicate gets the username."""
        return self._registry.register_user(username, predicate, label)

    def register_custom_check(
        self,
        predicate: CustomPredicate,
        label: str | None = None,
    ) -> ConditionEntry:
        """Register a check whose predicate takes no arguments."""
        return self._registry.register_custom(predicate, label)

    def add_hook(
        self,
        hook: Callable[["Engine"], object],
        label: str | None = None,
    ) -> ConditionEntry:
        """Run ``hook(engine)`` on every tick.

        A hook is a custom check whose return value is discarded. It always
        reports incomplete, so the review cadence never skips it.
        """
        if not callable(hook):
            raise TypeError(f"Hook must be callable, got {type(hook).__name__}")

        def run_hook() -> bool:
            hook(self)
            return False

        name = label or f"hook:{getattr(hook, '__name__', type(hook).__name__)}"
        return self._registry.register_custom(run_hook, name)

    def condition_count(self, kind: ConditionKind | None = None) -> int:
        snapshot = self._registry.snapshot()
        if kind is None:
            return len(snapshot)
        return sum(1 for k, _ in snapshot if k == kind)

    def completed_count(self) -> int:
        return sum(1 for _, completed in self._registry.snapshot() if completed)

    # ------------------------------------------------------------------
    # Tuning
    # ------------------------------------------------------------------

    def set_poll_interval(self, seconds: float) -> None:
        self._scheduler.set_poll_interval(seconds)

    def set_poll_frequency(self, per_second: float) -> None:
        self._scheduler.set_poll_frequency(per_second)

    def set_completed_review_interval(self, ticks: int) -> None:
        self._scheduler.set_completed_review_interval(ticks)

    @property
    def poll_interval(self) -> float:
        return self._scheduler.poll_interval

    @property
    def completed_review_interval(self) -> int:
        return self._scheduler.completed_review_interval

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Block the calling thread running ticks until stopped."""
        self._scheduler.start()

    def start_background(self, name: str = "cypat-scheduler") -> threading.Thread:
        return self._scheduler.start_background(name)

    def stop(self, blocking: bool = False) -> None:
        self._scheduler.stop(blocking)

    def tick(self) -> TickReport:
        """Evaluate due checks once, without the loop."""
        return self._scheduler.tick()

    @property
    def is_running(self) -> bool:
        return self._scheduler.is_running

    @property
    def status(self) -> EngineStatus:
        return self._scheduler.status

    @property
    def in_tick(self) -> bool:
        return self._scheduler.in_tick

    @property
    def tick_count(self) -> int:
        return self._scheduler.tick_count

    @property
    def last_tick(self) -> TickReport | None:
        return self._scheduler.last_report

    def clear_lock_failures(self) -> list[str]:
        """Re-arm the registry and ledger after a failure left them locked out.

        Only needed in strict mode. The structures keep whatever state the
        failed holder left behind.

        Returns:
            Names of the structures that were reset
        """
        cleared = []
        for name, part in (("registry", self._registry), ("ledger", self._ledger)):
            if part.lock_failed:
                part.reset_lock()
                cleared.append(name)
        if cleared:
            logger.warning("Cleared lock failures on %s", ", ".join(cleared))
        return cleared

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def upsert_score(self, score_id: ScoreId, value: ScoreValue, reason: str) -> None:
        """Set the score entry ``score_id``, keeping its report position if it exists."""
        self._ledger.upsert(score_id, value, reason)

    def remove_score(self, score_id: ScoreId) -> bool:
        """Remove an entry; False if it was not present."""
        return self._ledger.remove(score_id)

    def require_score(self, score_id: ScoreId) -> ScoreEntry:
        entry = self._ledger.get(score_id)
        if entry is None:
            raise ScoreNotFoundError(score_id)
        return entry

    def get_score(self, score_id: ScoreId) -> ScoreEntry | None:
        return self._ledger.get(score_id)

    def score_exists(self, score_id: ScoreId) -> bool:
        return self._ledger.exists(score_id)

    def total_score(self) -> int:
        return self._ledger.total()

    def score_report(self) -> list[tuple[str, int]]:
        return self._ledger.report()

    def __repr__(self) -> str:
        return (
            f"Engine(status={self.status.value}, conditions={len(self._registry)}, "
            f"ticks={self.tick_count}, total={self.total_score()})"
        )
