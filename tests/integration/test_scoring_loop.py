"""End-to-end tests driving a live scoring loop on a background thread.

Verifies:
- A file check scores once the file appears, and not before
- stop(blocking=True) from another thread waits for the in-flight tick
- stop(blocking=False) returns at once; the loop exits at the next boundary
- A restart after stop waits for the old loop thread to exit
- Scores can be read and written from outside while the loop runs
- Checks registered while running join a later tick
"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from cypat.domain.common.errors import InvalidTransitionError
from cypat.domain.engine.models import EngineStatus
from cypat.engine import Engine

pytestmark = pytest.mark.integration

WAIT = 5.0


def _wait_until(predicate, timeout: float = WAIT) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


# ── Scoring a fixed vulnerability ────────────────────────────────────


class TestFileScoring:
    def test_flag_file_scores_after_creation(self, engine: Engine, run_engine, tmp_path: Path):
        flag = tmp_path / "flag.txt"

        def flag_present(handle):
            if handle is None:
                return False
            engine.upsert_score(7, 10, "Created flag.txt")
            return True

        entry = engine.register_file_check(flag, flag_present)
        run_engine(engine)

        assert _wait_until(lambda: engine.tick_count >= 3)
        assert engine.total_score() == 0
        assert entry.completed is False

        flag.write_text("done")
        assert _wait_until(lambda: engine.score_exists(7))
        assert engine.score_report() == [("Created flag.txt", 10)]
        assert _wait_until(lambda: entry.completed)

    def test_hello_world_stops_engine(self, engine: Engine, run_engine, tmp_path: Path):
        world = tmp_path / "world.txt"

        def wrote_hello(handle):
            if handle is None:
                return False
            if handle.read().strip() == b"Hello World":
                engine.upsert_score(0, 50, "Wrote Hello World")
                return True
            return False

        engine.register_file_check(world, wrote_hello)
        engine.add_hook(lambda e: e.stop() if e.score_exists(0) else None)
        thread = run_engine(engine)

        world.write_bytes(b"Hello World\n")
        thread.join(timeout=WAIT)

        assert not thread.is_alive()
        assert engine.status == EngineStatus.STOPPED
        assert engine.total_score() == 50


# ── Stopping ─────────────────────────────────────────────────────────


class TestStop:
    def test_blocking_stop_waits_for_tick(self, engine: Engine, run_engine):
        entered = threading.Event()
        release = threading.Event()
        finished = []

        def slow_check():
            entered.set()
            release.wait(WAIT)
            finished.append(time.monotonic())
            return False

        engine.register_custom_check(slow_check)
        run_engine(engine)
        assert entered.wait(WAIT)

        returned = []
        stopper = threading.Thread(
            target=lambda: (engine.stop(blocking=True), returned.append(time.monotonic()))
        )
        stopper.start()
        time.sleep(0.05)
        assert returned == []
        assert engine.in_tick is True

        release.set()
        stopper.join(WAIT)

        assert len(returned) == 1
        assert returned[0] >= finished[0]
        assert engine.in_tick is False
        assert engine.is_running is False

    def test_non_blocking_stop_returns_immediately(self, engine: Engine, run_engine):
        entered = threading.Event()
        release = threading.Event()
        seen = []

        def slow_check():
            seen.append(engine.tick_count)
            entered.set()
            release.wait(WAIT)
            return False

        engine.register_custom_check(slow_check)
        thread = run_engine(engine)
        assert entered.wait(WAIT)

        engine.stop()
        assert engine.is_running is False
        assert engine.in_tick is True

        release.set()
        thread.join(WAIT)

        assert not thread.is_alive()
        assert seen == [0]

    def test_start_twice_rejected(self, engine: Engine, run_engine):
        engine.register_custom_check(lambda: False)
        run_engine(engine)
        with pytest.raises(InvalidTransitionError):
            engine.start()

    def test_restart_waits_for_stopped_loop(self, engine: Engine, run_engine):
        entered = threading.Event()
        release = threading.Event()

        def slow_check():
            entered.set()
            release.wait(WAIT)
            return False

        engine.register_custom_check(slow_check)
        first = run_engine(engine)
        assert entered.wait(WAIT)

        engine.stop()
        restarted = []
        restarter = threading.Thread(target=lambda: restarted.append(run_engine(engine)))
        restarter.start()
        time.sleep(0.05)
        assert restarted == []

        release.set()
        restarter.join(WAIT)
        first.join(WAIT)

        assert not first.is_alive()
        assert len(restarted) == 1
        assert restarted[0].is_alive()
        assert engine.is_running is True


# ── Concurrent access ────────────────────────────────────────────────


class TestConcurrentAccess:
    def test_external_score_updates_while_running(self, engine: Engine, run_engine):
        engine.register_custom_check(lambda: engine.upsert_score(1, 5, "from loop") or True)
        run_engine(engine)

        totals = set()
        for i in range(200):
            engine.upsert_score(2, i % 2, "from test")
            totals.add(engine.total_score())

        assert _wait_until(lambda: engine.score_exists(1))
        assert totals <= {0, 1, 5, 6}
        assert len(engine.ledger) == 2

    def test_register_while_running(self, engine: Engine, run_engine):
        run_engine(engine)
        assert _wait_until(lambda: engine.tick_count >= 1)

        ran = threading.Event()
        engine.register_custom_check(lambda: ran.set() or True)

        assert ran.wait(WAIT)
        assert _wait_until(lambda: engine.completed_count() == 1)
