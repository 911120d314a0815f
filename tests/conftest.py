"""
Shared pytest fixtures for engine tests.

Provides fast engine settings, fresh engines, and a helper for driving a
scoring loop on a background thread.
"""
import sys
import threading
from pathlib import Path

import pytest

# Add project root to path for imports
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from cypat.config.settings import EngineSettings
from cypat.engine import Engine


@pytest.fixture
def fast_settings():
    """Settings with a short poll interval and a small review interval."""
    return EngineSettings(
        poll_interval=0.01,
        completed_review_interval=3,
        stop_wait_timeout=5.0,
    )


@pytest.fixture
def engine(fast_settings):
    """A fresh engine, stopped again after the test."""
    eng = Engine(fast_settings)
    try:
        yield eng
    finally:
        eng.stop(blocking=True)


@pytest.fixture
def run_engine():
    """Start an engine on a daemon thread; joins it on teardown."""
    threads: list[tuple[Engine, threading.Thread]] = []

    def _run(eng: Engine) -> threading.Thread:
        thread = eng.start_background(name="test-scheduler")
        threads.append((eng, thread))
        return thread

    yield _run

    for eng, thread in threads:
        eng.stop(blocking=True)
        thread.join(timeout=5)
