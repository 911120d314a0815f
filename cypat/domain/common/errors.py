"""Domain-level error hierarchy.

All engine exceptions inherit from EngineError so that callers embedding
the engine can catch a single base class. Predicate failures are never
raised through this hierarchy: the dispatcher isolates them and records
them on the offending condition entry.
"""


class EngineError(Exception):
    """Base class for all scoring engine errors."""


class LockFailureError(EngineError):
    """A guarded structure was left in a failed state by an earlier holder.

    Raised on every later access unless the engine is configured with
    ``ignore_lock_failures``.
    """

    def __init__(self, resource: str, cause: BaseException | None = None) -> None:
        self.resource = resource
        self.cause = cause
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(f"Lock for {resource} failed while held{detail}")


class ResourceUnavailableError(EngineError):
    """A named file or system resource is missing or unreadable."""

    def __init__(self, resource: str, reason: str = "") -> None:
        self.resource = resource
        self.reason = reason
        suffix = f" ({reason})" if reason else ""
        super().__init__(f"Resource unavailable: {resource}{suffix}")


class ScoreNotFoundError(EngineError, LookupError):
    """A requested score id is not present in the ledger."""

    def __init__(self, score_id: int) -> None:
        self.score_id = score_id
        super().__init__(f"Score entry not found: {score_id}")


class InvalidScoreError(EngineError, ValueError):
    """A score id or value violates the ledger's input constraints."""


class InvalidTransitionError(EngineError):
    """An illegal scheduler state transition was attempted."""

    def __init__(self, current: object, target: object) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid transition: {current} -> {target}")


class UserNotFoundError(EngineError, LookupError):
    """An OS user account does not exist."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User not found: {username}")


class DataKeyNotFoundError(EngineError, LookupError):
    """No registered data file contains the requested key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No data file defines key: {key}")
