"""Goal lifecycle operations: set, reset, edit and clear goals."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from .models import (
    GoalDefinition,
    GoalLevel,
    GoalValidationError,
    MetricKind,
    NotificationPolicy,
    PeriodKind,
)
from .periods import period_dates
from .progress import aggregate_metric
from .store import GoalStore
from .suggestions import suggest_target

LOGGER = logging.getLogger(__name__)


class GoalNotFoundError(KeyError):
    """Raised when an operation targets a metric without a goal."""


class GoalService:
    """Creates and maintains the single active goal of each metric."""

    def __init__(self, store: GoalStore, repository=None) -> None:
        self.store = store
        self.repository = repository

    def _require(self, metric: MetricKind) -> GoalDefinition:
        goal = self.store.get_goal(metric)
        if goal is None:
            raise GoalNotFoundError(f"No {metric.value} goal is set")
        return goal

    def list_goals(self) -> Dict[MetricKind, GoalDefinition]:
        return self.store.load_goals()

    def set_goal(
        self,
        metric: Union[MetricKind, str],
        target: float,
        period: Union[PeriodKind, str] = PeriodKind.MONTHLY,
        *,
        level: Union[GoalLevel, str] = GoalLevel.COMPANY,
        notifications: Optional[NotificationPolicy] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> GoalDefinition:
        """Create the goal for a metric over the current period, replacing any existing one."""
        now = now or datetime.now()
        try:
            metric = MetricKind(metric)
            period = PeriodKind(period)
            level = GoalLevel(level)
        except ValueError as exc:
            raise GoalValidationError(str(exc)) from exc

        interval = period_dates(period, now)
        goal = GoalDefinition(
            metric=metric,
            target=target,
            period=period,
            start_date=interval.start_date,
            end_date=interval.end_date,
            created_at=now,
            level=level,
            notifications=notifications or NotificationPolicy(),
            name=name,
            description=description,
        )
        goal.validate()
        self.store.save_goal(goal)
        LOGGER.info("Set %s goal: %s over %s..%s", metric.value, target, goal.start_date, goal.end_date)
        return goal

    def reset_goal(self, metric: Union[MetricKind, str], now: Optional[datetime] = None) -> GoalDefinition:
        """Restart the goal's period from now, keeping its target and history."""
        now = now or datetime.now()
        goal = self._require(MetricKind(metric))
        interval = period_dates(goal.period, now)
        goal.start_date = interval.start_date
        goal.end_date = interval.end_date
        goal.created_at = now
        self.store.save_goal(goal)
        LOGGER.info("Reset %s goal to %s..%s", goal.metric.value, goal.start_date, goal.end_date)
        return goal

    def edit_goal(
        self,
        metric: Union[MetricKind, str],
        *,
        level: Optional[Union[GoalLevel, str]] = None,
        notifications: Optional[NotificationPolicy] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> GoalDefinition:
        """Change a goal's level, notification policy or labels in place."""
        goal = self._require(MetricKind(metric))
        candidate = replace(goal)
        try:
            if level is not None:
                candidate.level = GoalLevel(level)
        except ValueError as exc:
            raise GoalValidationError(str(exc)) from exc
        if notifications is not None:
            candidate.notifications = notifications
        if name is not None:
            candidate.name = name
        if description is not None:
            candidate.description = description
        candidate.validate()
        self.store.save_goal(candidate)
        return candidate

    def clear_goal(self, metric: Union[MetricKind, str]) -> bool:
        metric = MetricKind(metric)
        removed = self.store.delete_goal(metric)
        if removed:
            LOGGER.info("Removed %s goal", metric.value)
        return removed

    async def suggest_target(
        self,
        metric: Union[MetricKind, str],
        period: Union[PeriodKind, str] = PeriodKind.MONTHLY,
        now: Optional[datetime] = None,
    ) -> int:
        """Suggest a target from this month's and last month's totals."""
        if self.repository is None:
            raise RuntimeError("An order repository is required for suggestions")
        metric = MetricKind(metric)
        now = now or datetime.now()

        current_month = period_dates(PeriodKind.MONTHLY, now)
        previous_month = period_dates(PeriodKind.MONTHLY, current_month.start_date - timedelta(days=1))

        current_orders: List[dict] = await self.repository.query_orders(
            current_month.start_date, current_month.end_date
        )
        previous_orders: List[dict] = await self.repository.query_orders(
            previous_month.start_date, previous_month.end_date
        )
        return suggest_target(
            aggregate_metric(metric, current_orders),
            aggregate_metric(metric, previous_orders),
            period,
        )
