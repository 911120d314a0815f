"""SchedulerLoop: drives repeated evaluation passes over the registry.

Lifecycle:
  1. ``start()`` moves STOPPED -> RUNNING and blocks the calling thread
  2. Each tick holds the registry lock for the whole pass
  3. Unresolved entries are dispatched every tick, resolved entries only
     on review ticks (see ``cypat.domain.engine.scheduling``)
  4. Between ticks the loop sleeps ``poll_interval`` seconds; a stop
     request wakes it early
  5. ``stop()`` is cooperative and observed at tick boundaries only
  6. A restart waits for the previous run's loop to exit, so at most one
     loop thread ever drives ticks

The running flag is readable from any thread. The tick counter and the
entries' completion flags are written by the ticking thread only.
"""

from __future__ import annotations

import logging
import math
import threading
import time

from cypat.domain.common.errors import InvalidTransitionError
from cypat.domain.engine.models import DispatchOutcome, EngineStatus, TickReport
from cypat.domain.engine.scheduling import is_due
from cypat.engine.dispatcher import Dispatcher
from cypat.engine.registry import ConditionRegistry

logger = logging.getLogger(__name__)


def _check_poll_interval(seconds: float) -> float:
    seconds = float(seconds)
    if not seconds > 0 or math.isinf(seconds):
        raise ValueError(f"poll interval must be a positive number of seconds, got {seconds}")
    return seconds


def _check_review_interval(ticks: int) -> int:
    if isinstance(ticks, bool) or not isinstance(ticks, int) or ticks < 1:
        raise ValueError(f"review interval must be an int >= 1, got {ticks!r}")
    return ticks


class SchedulerLoop:
    """Tick driver with a cooperative stop signal."""

    def __init__(
        self,
        registry: ConditionRegistry,
        dispatcher: Dispatcher,
        *,
        poll_interval: float = 0.2,
        completed_review_interval: int = 10,
        stop_wait_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._dispatcher = dispatcher
        self._poll_interval = _check_poll_interval(poll_interval)
        self._review_interval = _check_review_interval(completed_review_interval)
        self._stop_wait_timeout = stop_wait_timeout

        self._running = threading.Event()
        self._wake = threading.Event()
        self._state = threading.Condition()
        self._in_tick = False
        self._tick_count = 0
        self._loop_thread: threading.Thread | None = None
        self._tick_thread: threading.Thread | None = None
        self._loop_active = False
        self._last_report: TickReport | None = None

    # ------------------------------------------------------------------
    # Tuning
    # ------------------------------------------------------------------

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def set_poll_interval(self, seconds: float) -> None:
        self._poll_interval = _check_poll_interval(seconds)

    def set_poll_frequency(self, per_second: float) -> None:
        """Express the cadence as ticks per second instead of an interval."""
        if not float(per_second) > 0:
            raise ValueError(f"poll frequency must be positive, got {per_second}")
        self.set_poll_interval(1.0 / float(per_second))

    @property
    def completed_review_interval(self) -> int:
        return self._review_interval

    def set_completed_review_interval(self, ticks: int) -> None:
        self._review_interval = _check_review_interval(ticks)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    @property
    def status(self) -> EngineStatus:
        return EngineStatus.RUNNING if self._running.is_set() else EngineStatus.STOPPED

    @property
    def in_tick(self) -> bool:
        return self._in_tick

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_report(self) -> TickReport | None:
        return self._last_report

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run ticks on the calling thread until ``stop()`` is observed.

        Raises:
            InvalidTransitionError: If already running, if called from inside
                a tick, or if a previous run's loop has not exited within
                ``stop_wait_timeout``
        """
        self._begin()
        self._loop()

    def start_background(self, name: str = "cypat-scheduler") -> threading.Thread:
        """Mark the loop running, then drive it from a new daemon thread."""
        self._begin()
        thread = threading.Thread(target=self._loop, name=name, daemon=True)
        try:
            thread.start()
        except RuntimeError:
            with self._state:
                self._running.clear()
                self._loop_active = False
                self._state.notify_all()
            raise
        return thread

    def stop(self, blocking: bool = False) -> None:
        """Request the loop to exit at the next tick boundary.

        Args:
            blocking: Wait until no tick is in flight before returning.
                Ignored when called from the thread running the current
                tick (a predicate or hook, in the loop or a manual tick).
        """
        with self._state:
            if self._running.is_set():
                logger.info("Stop requested (blocking=%s)", blocking)
            self._running.clear()
            self._wake.set()
            if not blocking:
                return
            if threading.current_thread() is self._tick_thread:
                logger.debug("Blocking stop from inside a tick; not waiting on own tick")
                return
            finished = self._state.wait_for(
                lambda: not self._in_tick, timeout=self._stop_wait_timeout
            )
        if not finished:
            logger.warning(
                "Tick still in flight after %.1fs; returning from stop()",
                self._stop_wait_timeout,
            )

    def tick(self) -> TickReport:
        """Run exactly one pass on the calling thread (loop must be stopped)."""
        with self._state:
            if self._running.is_set() or self._loop_active:
                raise InvalidTransitionError(EngineStatus.RUNNING, "manual tick")
            if self._in_tick:
                raise InvalidTransitionError("tick in flight", "manual tick")
            self._enter_tick()
        return self._run_tick()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enter_tick(self) -> None:
        """Mark a tick as owned by the calling thread. Caller holds ``_state``."""
        self._in_tick = True
        self._tick_thread = threading.current_thread()

    def _begin(self) -> None:
        with self._state:
            if self._running.is_set():
                raise InvalidTransitionError(EngineStatus.RUNNING, EngineStatus.RUNNING)
            if threading.current_thread() is self._tick_thread:
                raise InvalidTransitionError("tick in flight", EngineStatus.RUNNING)
            # A stopped run's loop may still be finishing its last tick
            idle = self._state.wait_for(
                lambda: not self._loop_active and not self._in_tick,
                timeout=self._stop_wait_timeout,
            )
            if not idle:
                raise InvalidTransitionError("stopping", EngineStatus.RUNNING)
            self._loop_active = True
            self._running.set()
            self._wake.clear()
        logger.info(
            "Scoring loop started (poll every %.3fs, review every %d ticks)",
            self._poll_interval,
            self._review_interval,
        )

    def _loop(self) -> None:
        with self._state:
            self._loop_thread = threading.current_thread()
        try:
            while True:
                with self._state:
                    if not self._running.is_set():
                        break
                    self._enter_tick()
                self._run_tick()
                self._wake.wait(self._poll_interval)
        except Exception:
            logger.exception("Scoring loop halted after %d ticks", self._tick_count)
            raise
        finally:
            with self._state:
                self._running.clear()
                self._loop_thread = None
                self._loop_active = False
                self._state.notify_all()
        logger.info("Scoring loop stopped after %d ticks", self._tick_count)

    def _run_tick(self) -> TickReport:
        """One pass. The caller has already entered the tick."""
        tick = self._tick_count
        review_interval = self._review_interval
        started = time.monotonic()
        outcomes: list[DispatchOutcome] = []
        skipped = 0
        try:
            with self._registry.acquire() as entries:
                for entry in entries:
                    if not is_due(entry.completed, tick, review_interval):
                        skipped += 1
                        continue
                    outcomes.append(self._dispatcher.dispatch(entry))
        finally:
            with self._state:
                self._in_tick = False
                self._tick_thread = None
                self._tick_count += 1
                self._state.notify_all()

        report = TickReport(
            tick=tick,
            dispatched=len(outcomes),
            skipped=skipped,
            failed=sum(1 for o in outcomes if o == DispatchOutcome.FAILED),
            elapsed_seconds=time.monotonic() - started,
            outcomes=tuple(outcomes),
        )
        self._last_report = report
        logger.debug(
            "Tick %d: dispatched=%d skipped=%d failed=%d (%.3fs)",
            report.tick,
            report.dispatched,
            report.skipped,
            report.failed,
            report.elapsed_seconds,
        )
        return report
