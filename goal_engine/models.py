"""
Goal Data Model
Goal definitions, notification policies and the progress/forecast value types
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

SCHEMA_VERSION = 2
DEFAULT_MILESTONES = [25, 50, 75, 100]


class GoalValidationError(ValueError):
    """Raised when a goal definition is rejected at creation or edit time."""


class MetricKind(str, Enum):
    ORDERS = "orders"
    SALES = "sales"


class PeriodKind(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class GoalLevel(str, Enum):
    COMPANY = "company"
    DEPARTMENT = "department"
    TEAM = "team"
    INDIVIDUAL = "individual"


@dataclass
class NotificationPolicy:
    """Which notification classes fire for a goal."""

    enabled: bool = True
    milestones: List[int] = field(default_factory=lambda: list(DEFAULT_MILESTONES))
    deadline_warning: bool = True
    daily_updates: bool = False

    def validate(self) -> None:
        seen = set()
        for milestone in self.milestones:
            if isinstance(milestone, bool) or not isinstance(milestone, int):
                raise GoalValidationError(f"Milestone {milestone!r} is not an integer")
            if not 0 < milestone <= 100:
                raise GoalValidationError(f"Milestone {milestone} outside (0, 100]")
            if milestone in seen:
                raise GoalValidationError(f"Duplicate milestone {milestone}")
            seen.add(milestone)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "milestones": list(self.milestones),
            "deadline_warning": self.deadline_warning,
            "daily_updates": self.daily_updates,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "NotificationPolicy":
        if not payload:
            return cls()
        return cls(
            enabled=bool(payload.get("enabled", True)),
            milestones=list(payload.get("milestones", DEFAULT_MILESTONES)),
            deadline_warning=bool(payload.get("deadline_warning", True)),
            daily_updates=bool(payload.get("daily_updates", False)),
        )


@dataclass
class ProgressSnapshot:
    """One day's recorded progress for a goal."""

    date: date
    progress: float
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "progress": self.progress, "value": self.value}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProgressSnapshot":
        return cls(
            date=date.fromisoformat(payload["date"]),
            progress=float(payload.get("progress", 0)),
            value=float(payload.get("value", 0)),
        )


@dataclass
class GoalDefinition:
    """A target for one metric over an inclusive date interval."""

    metric: MetricKind
    target: float
    period: PeriodKind
    start_date: date
    end_date: date
    created_at: datetime
    level: GoalLevel = GoalLevel.COMPANY
    notifications: NotificationPolicy = field(default_factory=NotificationPolicy)
    history: List[ProgressSnapshot] = field(default_factory=list)
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.name is None:
            self.name = f"{self.metric.value.capitalize()} Goal"

    def validate(self) -> None:
        """
        Check the definition invariants

        Raises:
            GoalValidationError: target not a positive number, malformed
                interval or invalid milestone set
        """
        if isinstance(self.target, bool) or not isinstance(self.target, (int, float)):
            raise GoalValidationError(f"Goal target must be numeric, got {self.target!r}")
        if self.target != self.target or self.target <= 0:
            raise GoalValidationError(f"Goal target must be greater than 0, got {self.target}")
        if not isinstance(self.start_date, date) or not isinstance(self.end_date, date):
            raise GoalValidationError("Goal interval must be made of calendar dates")
        if self.start_date > self.end_date:
            raise GoalValidationError(
                f"Goal interval start {self.start_date} is after end {self.end_date}"
            )
        self.notifications.validate()

    def snapshot_for(self, day: date) -> Optional[ProgressSnapshot]:
        for snapshot in self.history:
            if snapshot.date == day:
                return snapshot
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "metric": self.metric.value,
            "value": self.target,
            "period": self.period.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "created_at": self.created_at.isoformat(),
            "level": self.level.value,
            "name": self.name,
            "description": self.description,
            "notifications": self.notifications.to_dict(),
            "history": [snapshot.to_dict() for snapshot in self.history],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GoalDefinition":
        return cls(
            metric=MetricKind(payload["metric"]),
            target=payload["value"],
            period=PeriodKind(payload["period"]),
            start_date=date.fromisoformat(payload["start_date"]),
            end_date=date.fromisoformat(payload["end_date"]),
            created_at=datetime.fromisoformat(payload["created_at"]),
            level=GoalLevel(payload.get("level") or GoalLevel.COMPANY.value),
            notifications=NotificationPolicy.from_dict(payload.get("notifications")),
            history=[ProgressSnapshot.from_dict(item) for item in payload.get("history", [])],
            name=payload.get("name"),
            description=payload.get("description"),
        )


@dataclass
class ProgressReading:
    """Accumulated metric value for a goal's interval."""

    value: float
    percentage: float
    available: bool = True


@dataclass
class ForecastResult:
    """Linear-pace projection of where a goal ends up."""

    percentage: float
    days_remaining: int
    on_track: bool
    unclamped_percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": round(self.percentage, 2),
            "unclamped_percentage": round(self.unclamped_percentage, 2),
            "days_remaining": self.days_remaining,
            "on_track": self.on_track,
        }
