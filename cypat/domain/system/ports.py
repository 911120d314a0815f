"""Ports (abstract interfaces) for querying the host system.

These define WHAT the side services need from the operating system
without specifying HOW it's provided. The subprocess-backed
implementation lives in ``cypat.infra.system.commands``.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of an external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(abc.ABC):
    """Run an external command and capture its output."""

    @abc.abstractmethod
    def run(self, argv: Sequence[str]) -> CommandResult | None:
        """Return the result, or None when the command is not available."""
        ...
