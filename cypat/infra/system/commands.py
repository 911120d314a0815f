"""Subprocess implementation of the CommandRunner port.

A missing binary or a timeout means the queried source is unavailable on
this machine, so both map to ``None`` instead of raising. A command that
hangs still blocks the calling predicate for up to ``timeout`` seconds.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from cypat.config.settings import get_settings
from cypat.domain.system.ports import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run`` and a bounded wait."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout if timeout is not None else get_settings().command_timeout

    def run(self, argv: Sequence[str]) -> CommandResult | None:
        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            logger.debug("Command not found: %s", argv[0])
            return None
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %.1fs: %s", self._timeout, " ".join(argv))
            return None
        except OSError:
            logger.warning("Failed to run %s", argv[0], exc_info=True)
            return None

        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
