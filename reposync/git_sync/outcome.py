"""Sync states, per-repository outcomes and the report returned by the coordinator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import SyncAggregateError, SyncFailure, describe_cause
from ..logging_config import mask_credentials
from .error_types import RESOLUTION_HINTS, SyncErrorCategory, categorize_git_error


class SyncState(Enum):
    """States of one repository's synchronization."""
    UNKNOWN = "unknown"                # Not probed yet
    EXISTING_CLONE = "existing_clone"  # Local mirror is a working copy
    NO_CLONE = "no_clone"              # Local mirror missing or not a working copy
    SYNCED = "synced"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Result of synchronizing one repository."""
    repository: str
    success: bool
    operation: str
    state: SyncState
    message: str
    error: Optional[Exception] = None
    error_category: Optional[SyncErrorCategory] = None
    duration: float = 0.0

    @classmethod
    def succeeded(cls, repository: str, operation: str, duration: float = 0.0) -> "SyncOutcome":
        return cls(
            repository=repository,
            success=True,
            operation=operation,
            state=SyncState.SYNCED,
            message=f"{operation} of {repository} completed successfully",
            duration=duration
        )

    @classmethod
    def failed(cls, repository: str, operation: str, error: Exception,
               state: SyncState = SyncState.FAILED, duration: float = 0.0) -> "SyncOutcome":
        cause = error.cause if isinstance(error, SyncFailure) else error
        category = None
        if isinstance(error, SyncFailure):
            category = categorize_git_error(describe_cause(cause))
        return cls(
            repository=repository,
            success=False,
            operation=operation,
            state=state,
            message=mask_credentials(str(error)),
            error=error,
            error_category=category,
            duration=duration
        )

    @property
    def gateway(self) -> bool:
        """True when the failure happened during a forced resynchronization."""
        return bool(getattr(self.error, "gateway", False))

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to a JSON-friendly dictionary."""
        result = {
            "repository": self.repository,
            "success": self.success,
            "operation": self.operation,
            "state": self.state.value,
            "message": self.message,
            "duration": round(self.duration, 3),
        }
        if not self.success:
            result["error_type"] = type(self.error).__name__ if self.error else None
            result["gateway"] = self.gateway
            if self.error_category:
                result["error_category"] = self.error_category.value
                result["hint"] = RESOLUTION_HINTS[self.error_category]
        return result


@dataclass
class SyncReport:
    """All outcomes of one synchronization pass, in configuration order."""
    outcomes: List[SyncOutcome] = field(default_factory=list)
    forced: bool = False
    duration: float = 0.0

    @property
    def succeeded(self) -> List[SyncOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> List[SyncOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def success(self) -> bool:
        return not self.failed

    def get(self, repository: str) -> Optional[SyncOutcome]:
        """Outcome for ``repository``, or None if it was not part of the pass."""
        return next((o for o in self.outcomes if o.repository == repository), None)

    def raise_for_failures(self) -> None:
        """Raise SyncAggregateError if any repository failed."""
        if self.failed:
            raise SyncAggregateError(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "forced": self.forced,
            "total": len(self.outcomes),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "duration": round(self.duration, 3),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
