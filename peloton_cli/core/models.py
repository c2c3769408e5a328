"""Lightweight data models used across the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Credentials:
    """Login credentials, only held for the duration of the login call."""

    username_or_email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Session:
    """Authenticated session returned by the login endpoint."""

    session_id: str = field(repr=False)
    user_id: str


@dataclass(frozen=True)
class WorkoutSummary:
    """One entry of the user's workout history."""

    workout_id: str
    title: str
    created_at: int
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class MetricsDocument:
    """Per-sample performance metrics aligned on elapsed seconds."""

    elapsed_seconds: Sequence[Number]
    series: Tuple[Tuple[str, Sequence[Optional[Number]]], ...]

    @property
    def slugs(self) -> List[str]:
        return [slug for slug, _ in self.series]


class Severity(str, Enum):
    INFORMATION = "information"
    ERROR = "error"


@dataclass(frozen=True)
class LogEvent:
    """A progress or error message emitted by the pipeline."""

    severity: Severity
    message: str
    error: Optional[BaseException] = None


class RunOutcome(str, Enum):
    COMPLETED_FULLY = "completed"
    COMPLETED_WITH_SKIPPED_ITEMS = "completed_with_skipped_items"
    ABORTED_DURING_AUTH = "aborted_during_auth"
    ABORTED_DURING_LISTING = "aborted_during_listing"


@dataclass
class ExportResult:
    """Terminal state and counters of one export run."""

    outcome: RunOutcome
    total: int = 0
    written: int = 0
    skipped: int = 0
    failed_ids: List[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.outcome.value,
            "total": self.total,
            "written": self.written,
            "skipped": self.skipped,
            "failed": self.failed,
            "failed_ids": list(self.failed_ids),
        }
