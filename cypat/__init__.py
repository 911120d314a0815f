"""cypat: a scoring engine library for CyberPatriot-style practice images.

Register vulnerability checks on an :class:`Engine`, start it, and read the
score report while it runs.
"""

from cypat.config.settings import EngineSettings
from cypat.domain.common.errors import (
    EngineError,
    InvalidScoreError,
    InvalidTransitionError,
    LockFailureError,
    ResourceUnavailableError,
    ScoreNotFoundError,
)
from cypat.domain.engine.models import (
    AppData,
    ConditionKind,
    EngineStatus,
    InstallMethod,
    ScoreEntry,
    TickReport,
)
from cypat.engine import Engine

__version__ = "0.2.0"

__all__ = [
    "AppData",
    "ConditionKind",
    "Engine",
    "EngineError",
    "EngineSettings",
    "EngineStatus",
    "InstallMethod",
    "InvalidScoreError",
    "InvalidTransitionError",
    "LockFailureError",
    "ResourceUnavailableError",
    "ScoreEntry",
    "ScoreNotFoundError",
    "TickReport",
]
