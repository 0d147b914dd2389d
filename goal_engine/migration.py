"""
Goal Schema Migration
Upgrades stored goal payloads to the current GoalDefinition schema at load time
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from .models import SCHEMA_VERSION, GoalDefinition, GoalValidationError, MetricKind, PeriodKind
from .periods import period_dates

LOGGER = logging.getLogger(__name__)

# Older payloads used the dashboard's camelCase field names
_LEGACY_FIELDS = {
    'startDate': 'start_date',
    'endDate': 'end_date',
    'createdAt': 'created_at',
}
_LEGACY_POLICY_FIELDS = {
    'deadlineWarning': 'deadline_warning',
    'dailyUpdates': 'daily_updates',
}


def _iso_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    # Accept full ISO timestamps where a date is expected
    return str(value)[:10]


def _from_bare_target(target: Any, metric: MetricKind, now: datetime) -> Dict[str, Any]:
    interval = period_dates(PeriodKind.MONTHLY, now)
    return {
        'metric': metric.value,
        'value': target,
        'period': PeriodKind.MONTHLY.value,
        'start_date': interval.start_date.isoformat(),
        'end_date': interval.end_date.isoformat(),
        'created_at': now.isoformat(),
    }


def _from_v1(raw: Dict[str, Any], metric: MetricKind) -> Dict[str, Any]:
    payload = {_LEGACY_FIELDS.get(key, key): value for key, value in raw.items()}
    payload.setdefault('metric', metric.value)
    payload['start_date'] = _iso_date(payload['start_date'])
    payload['end_date'] = _iso_date(payload['end_date'])
    created_at = str(payload['created_at']).replace('Z', '+00:00')
    payload['created_at'] = datetime.fromisoformat(created_at).replace(tzinfo=None).isoformat()

    policy = payload.get('notifications')
    if policy:
        payload['notifications'] = {_LEGACY_POLICY_FIELDS.get(k, k): v for k, v in policy.items()}
    return payload


def migrate(raw: Union[int, float, Dict[str, Any]],
            metric: Union[MetricKind, str],
            now: Optional[datetime] = None) -> GoalDefinition:
    """
    Build a GoalDefinition from any stored payload version

    Versions:
        0: a bare number, the target of a monthly goal for the current month
        1: dashboard record with camelCase fields, optional policy/level/history
        2: current schema (``schema_version`` == 2)

    Args:
        raw: Stored payload
        metric: Metric the payload is keyed under
        now: Reference instant for version 0 payloads

    Returns:
        Validated GoalDefinition

    Raises:
        GoalValidationError: Payload cannot be turned into a valid goal
    """
    metric = MetricKind(metric)
    if now is None:
        now = datetime.now()

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        LOGGER.info(f"Migrating legacy numeric {metric.value} goal to a monthly goal")
        payload = _from_bare_target(raw, metric, now)
    elif isinstance(raw, dict):
        version = raw.get('schema_version', 1)
        try:
            payload = dict(raw) if version >= SCHEMA_VERSION else _from_v1(raw, metric)
        except (KeyError, TypeError, ValueError) as e:
            raise GoalValidationError(f"Malformed {metric.value} goal payload: {e}") from e
    else:
        raise GoalValidationError(f"Unsupported {metric.value} goal payload: {raw!r}")

    try:
        goal = GoalDefinition.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise GoalValidationError(f"Malformed {metric.value} goal payload: {e}") from e
    goal.validate()
    return goal


def migrate_document(document: Optional[Dict[str, Any]],
                     now: Optional[datetime] = None) -> Dict[MetricKind, GoalDefinition]:
    """
    Migrate a whole ``{"orders": ..., "sales": ...}`` goals document

    Unreadable entries are logged and dropped.
    """
    goals: Dict[MetricKind, GoalDefinition] = {}
    for metric in MetricKind:
        raw = (document or {}).get(metric.value)
        if raw is None:
            continue
        try:
            goals[metric] = migrate(raw, metric, now)
        except GoalValidationError as e:
            LOGGER.error(f"Dropping unreadable {metric.value} goal: {e}")
    return goals
