"""
Notification Dispatcher Module
Milestone, deadline, off-track and daily-update alerts with dedup markers
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from .models import ForecastResult, GoalDefinition, MetricKind, ProgressReading
from .store import GoalStore, PersistenceError

LOGGER = logging.getLogger(__name__)

DEFAULT_REFIRE_AFTER = timedelta(hours=24)
DEADLINE_WARNING_DAYS = 3
OFF_TRACK_WARNING_DAYS = 7
OFF_TRACK_PROGRESS = 50


class NotificationKind(str, Enum):
    MILESTONE = "milestone"
    DEADLINE = "deadline"
    OFFTRACK = "offtrack"
    DAILY = "daily"


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Notification:
    kind: NotificationKind
    metric: MetricKind
    title: str
    message: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "metric": self.metric.value,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
        }


class LoggingNotificationSink:
    """Writes notifications to the log."""

    def emit(self, kind: NotificationKind, metric: MetricKind, message: str, severity: Severity) -> None:
        level = logging.WARNING if severity is Severity.WARNING else logging.INFO
        LOGGER.log(level, "[%s/%s] %s", kind.value, metric.value, message)


class CollectingNotificationSink:
    """Keeps emitted notifications in memory for in-process consumers."""

    def __init__(self) -> None:
        self.notifications: List[Dict[str, Any]] = []

    def emit(self, kind: NotificationKind, metric: MetricKind, message: str, severity: Severity) -> None:
        self.notifications.append({
            "kind": NotificationKind(kind),
            "metric": MetricKind(metric),
            "message": message,
            "severity": Severity(severity),
        })


class WebhookNotificationSink:
    """POSTs notifications to a toast/alert webhook; delivery is fire-and-forget."""

    def __init__(self, url: str, timeout: float = 5.0, session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def emit(self, kind: NotificationKind, metric: MetricKind, message: str, severity: Severity) -> None:
        payload = {
            "kind": NotificationKind(kind).value,
            "metric": MetricKind(metric).value,
            "message": message,
            "severity": Severity(severity).value,
            "sent_at": datetime.now().isoformat(),
        }
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.error("Notification delivery to %s failed: %s", self.url, exc)


class NotificationDispatcher:
    """Detects notification conditions for a goal and emits each at most once per window"""

    def __init__(self,
                 store: GoalStore,
                 sink,
                 refire_after: timedelta = DEFAULT_REFIRE_AFTER,
                 throttle_warnings: bool = True):
        """
        Args:
            store: Store holding the dedup markers
            sink: Object with emit(kind, metric, message, severity)
            refire_after: Window after which a still-true condition fires again
            throttle_warnings: Dedup deadline and off-track warnings like milestones
        """
        self.store = store
        self.sink = sink
        self.refire_after = refire_after
        self.throttle_warnings = throttle_warnings

    def _last_fired(self, metric: MetricKind, condition) -> Optional[datetime]:
        try:
            return self.store.get_marker(metric, condition)
        except PersistenceError as e:
            LOGGER.error(f"Marker lookup for {metric.value}:{condition} failed: {e}")
            return None

    def _remember(self, metric: MetricKind, condition, now: datetime) -> None:
        try:
            self.store.set_marker(metric, condition, now)
        except PersistenceError as e:
            LOGGER.error(f"Marker write for {metric.value}:{condition} failed, dedup lost this cycle: {e}")

    def _window_open(self, metric: MetricKind, condition, now: datetime) -> bool:
        last = self._last_fired(metric, condition)
        return last is None or now - last > self.refire_after

    def _emit(self, notification: Notification) -> bool:
        """Hand a notification to the sink; False if the sink failed"""
        try:
            self.sink.emit(notification.kind, notification.metric, notification.message, notification.severity)
        except Exception as e:
            LOGGER.exception(f"Delivery of {notification.kind.value} notification for {notification.metric.value} failed: {e}")
            return False
        return True

    def dispatch(self,
                 goal: GoalDefinition,
                 reading: ProgressReading,
                 forecast: ForecastResult,
                 now: Optional[datetime] = None) -> List[Notification]:
        """
        Evaluate every notification class for one goal

        Args:
            goal: Goal being evaluated
            reading: This cycle's progress
            forecast: This cycle's forecast
            now: Evaluation instant (default: now)

        Returns:
            Notifications emitted this cycle
        """
        policy = goal.notifications
        if not policy.enabled:
            return []
        if now is None:
            now = datetime.now()

        metric = goal.metric
        progress = reading.percentage
        days_remaining = forecast.days_remaining
        emitted: List[Notification] = []

        for milestone in sorted(policy.milestones):
            if progress >= milestone and self._window_open(metric, milestone, now):
                notification = Notification(
                    kind=NotificationKind.MILESTONE,
                    metric=metric,
                    title="Milestone Achieved!",
                    message=f"You've reached {milestone}% of your {metric.value} goal!",
                    severity=Severity.SUCCESS,
                )
                if self._emit(notification):
                    self._remember(metric, milestone, now)
                    emitted.append(notification)

        warnings = []
        if policy.deadline_warning and 0 < days_remaining <= DEADLINE_WARNING_DAYS and progress < 100:
            warnings.append(Notification(
                kind=NotificationKind.DEADLINE,
                metric=metric,
                title="Goal Deadline Approaching",
                message=(f"Your {metric.value} goal deadline is in {days_remaining} day(s). "
                         f"Current progress: {progress:.1f}%"),
                severity=Severity.WARNING,
            ))
        if progress < OFF_TRACK_PROGRESS and not forecast.on_track and 0 < days_remaining <= OFF_TRACK_WARNING_DAYS:
            warnings.append(Notification(
                kind=NotificationKind.OFFTRACK,
                metric=metric,
                title="Goal Off Track",
                message=(f"Your {metric.value} goal may not be achieved at current pace. "
                         "Consider adjusting your strategy."),
                severity=Severity.WARNING,
            ))

        for notification in warnings:
            condition = notification.kind.value
            if self.throttle_warnings and not self._window_open(metric, condition, now):
                continue
            if not self._emit(notification):
                continue
            if self.throttle_warnings:
                self._remember(metric, condition, now)
            emitted.append(notification)

        if policy.daily_updates:
            last = self._last_fired(metric, NotificationKind.DAILY.value)
            if last is None or last.date() != now.date():
                notification = Notification(
                    kind=NotificationKind.DAILY,
                    metric=metric,
                    title="Daily Goal Update",
                    message=(f"Your {metric.value} goal is at {progress:.1f}% "
                             f"({reading.value:g} of {goal.target:g}), {days_remaining} day(s) left"),
                    severity=Severity.INFO,
                )
                if self._emit(notification):
                    self._remember(metric, NotificationKind.DAILY.value, now)
                    emitted.append(notification)

        if emitted:
            LOGGER.info(f"Emitted {len(emitted)} notification(s) for {metric.value} goal")
        return emitted
