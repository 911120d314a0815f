"""Lock wrapper with an explicit "failed while held" contract.

A ``Guarded`` owns one shared value and the lock protecting it. When an
exception escapes a critical section the value may be half-updated, so the
wrapper remembers the failure:

- strict mode (default): every later access raises ``LockFailureError``;
- ignore mode: the next access logs a warning, clears the failure and
  proceeds on whatever state the value was left in.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from cypat.domain.common.errors import LockFailureError

logger = logging.getLogger(__name__)


class Guarded:
    """A value reachable only while holding its lock."""

    def __init__(
        self,
        value: Any,
        *,
        name: str,
        ignore_failures: bool = False,
        reentrant: bool = False,
    ) -> None:
        self._value = value
        self._name = name
        self._ignore_failures = ignore_failures
        self._lock = threading.RLock() if reentrant else threading.Lock()
        self._failure: BaseException | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def failed(self) -> bool:
        return self._failure is not None

    @property
    def ignore_failures(self) -> bool:
        return self._ignore_failures

    @contextmanager
    def hold(self) -> Iterator[Any]:
        """Acquire the lock and yield the guarded value."""
        with self._lock:
            self._check_failure()
            try:
                yield self._value
            except LockFailureError:
                raise
            except BaseException as exc:
                if self._failure is None:
                    self._failure = exc
                    logger.error(
                        "%s lock released after failure: %r", self._name, exc
                    )
                raise

    def reset(self) -> None:
        """Forget a recorded failure; the value is kept as the failed holder left it."""
        with self._lock:
            self._failure = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_failure(self) -> None:
        if self._failure is None:
            return
        if not self._ignore_failures:
            raise LockFailureError(self._name, self._failure)
        logger.warning(
            "Recovering %s after earlier failure %r; state may be inconsistent",
            self._name,
            self._failure,
        )
        self._failure = None

    def __repr__(self) -> str:
        state = "failed" if self.failed else "ok"
        return f"Guarded({self._name!r}, {state})"
