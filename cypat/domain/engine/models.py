"""Domain models for the condition registry and score ledger.

Conditions form a tagged variant: one dataclass per check kind, each
carrying a ``kind`` tag and a predicate whose argument matches the
context the dispatcher supplies for that kind.

Conventions:
- Conditions are mutable. ``FileCondition.cursor`` is rewritten after
  every evaluation so a predicate can read a growing file incrementally.
- ``ScoreEntry`` and ``AppData`` are immutable value objects.
- ``ConditionEntry`` is written by the scheduler thread only.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, ClassVar, Union

from cypat.domain.common.types import ScoreId, ScoreValue


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ConditionKind(enum.Enum):
    """Tag shared by every condition variant."""

    FILE = "file"
    APP = "app"
    USER = "user"
    CUSTOM = "custom"


class InstallMethod(enum.Enum):
    """Where an application is expected to be installed from.

    ``DEFAULT`` means any install source the current platform knows about.
    """

    DEFAULT = "default"
    PACKAGE_MANAGER = "package_manager"
    FLATPAK = "flatpak"
    SNAP = "snap"
    WINGET = "winget"
    MANUAL = "manual"


class EngineStatus(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class DispatchOutcome(enum.Enum):
    """Result of dispatching a single condition entry."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppData:
    """Immutable application descriptor handed to app predicates."""

    name: str
    install_method: InstallMethod = InstallMethod.DEFAULT


@dataclass(frozen=True)
class ScoreEntry:
    """One line of the score report."""

    id: ScoreId
    value: ScoreValue
    reason: str


# ---------------------------------------------------------------------------
# Predicate signatures
# ---------------------------------------------------------------------------

FilePredicate = Callable[[BinaryIO | None], object]
AppPredicate = Callable[[AppData], object]
UserPredicate = Callable[[str], object]
CustomPredicate = Callable[[], object]


# ---------------------------------------------------------------------------
# Condition variants
# ---------------------------------------------------------------------------


@dataclass
class FileCondition:
    """Check driven by the contents of a file.

    The predicate receives a read-only binary handle positioned at
    ``cursor``, or ``None`` when the file cannot be opened.
    """

    kind: ClassVar[ConditionKind] = ConditionKind.FILE

    path: str
    predicate: FilePredicate
    cursor: int = 0
    label: str | None = None

    def describe(self) -> str:
        return self.label or f"file:{self.path}"


@dataclass
class AppCondition:
    """Check driven by an installed (or removed) application."""

    kind: ClassVar[ConditionKind] = ConditionKind.APP

    app: AppData
    predicate: AppPredicate
    label: str | None = None

    def describe(self) -> str:
        return self.label or f"app:{self.app.name}"


@dataclass
class UserCondition:
    """Check driven by the state of an OS user account."""

    kind: ClassVar[ConditionKind] = ConditionKind.USER

    username: str
    predicate: UserPredicate
    label: str | None = None

    def describe(self) -> str:
        return self.label or f"user:{self.username}"


@dataclass
class CustomCondition:
    """Free-form check; also the carrier for hooks."""

    kind: ClassVar[ConditionKind] = ConditionKind.CUSTOM

    predicate: CustomPredicate
    label: str | None = None

    def describe(self) -> str:
        if self.label:
            return self.label
        name = getattr(self.predicate, "__name__", type(self.predicate).__name__)
        return f"custom:{name}"


Condition = Union[FileCondition, AppCondition, UserCondition, CustomCondition]


# ---------------------------------------------------------------------------
# Registry / scheduler records
# ---------------------------------------------------------------------------


@dataclass
class ConditionEntry:
    """A registered condition together with its last evaluation result."""

    condition: Condition
    completed: bool = False
    evaluations: int = 0
    failures: int = 0
    last_error: str | None = None

    @property
    def kind(self) -> ConditionKind:
        return self.condition.kind


@dataclass(frozen=True)
class TickReport:
    """Summary of one scheduler pass."""

    tick: int
    dispatched: int = 0
    skipped: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    outcomes: tuple[DispatchOutcome, ...] = field(default=(), repr=False)

    @property
    def completed(self) -> int:
        return sum(1 for o in self.outcomes if o == DispatchOutcome.COMPLETED)


__all__ = [
    "AppCondition",
    "AppData",
    "AppPredicate",
    "Condition",
    "ConditionEntry",
    "ConditionKind",
    "CustomCondition",
    "CustomPredicate",
    "DispatchOutcome",
    "EngineStatus",
    "FileCondition",
    "FilePredicate",
    "InstallMethod",
    "ScoreEntry",
    "TickReport",
    "UserCondition",
    "UserPredicate",
]
