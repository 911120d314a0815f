"""Engine runtime: guarded state, registry, dispatcher, scheduler, facade."""

from .dispatcher import Dispatcher
from .engine import Engine
from .guarded import Guarded
from .ledger import ScoreLedger
from .registry import ConditionRegistry
from .scheduler import SchedulerLoop

__all__ = [
    "ConditionRegistry",
    "Dispatcher",
    "Engine",
    "Guarded",
    "SchedulerLoop",
    "ScoreLedger",
]
