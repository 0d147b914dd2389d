#!/usr/bin/env python3
"""
Goal persistence stores.
Keeps goal definitions (one per metric) and notification dedup markers
durable across restarts.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, Union

import psycopg2
import psycopg2.extras

from .migration import migrate, migrate_document
from .models import GoalDefinition, GoalValidationError, MetricKind

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when the store cannot read or write a record"""


def marker_key(metric: Union[MetricKind, str], condition: Union[int, str]) -> str:
    return f"{MetricKind(metric).value}:{condition}"


class GoalStore(ABC):
    """Key-value store for goal definitions and notification markers"""

    @abstractmethod
    def load_goals(self) -> Dict[MetricKind, GoalDefinition]:
        """Return every stored goal keyed by metric"""

    @abstractmethod
    def get_goal(self, metric: MetricKind) -> Optional[GoalDefinition]:
        """Return the goal for a metric, if any"""

    @abstractmethod
    def save_goal(self, goal: GoalDefinition) -> None:
        """Insert or replace the goal for its metric"""

    @abstractmethod
    def delete_goal(self, metric: MetricKind) -> bool:
        """Delete the goal for a metric; True when one existed"""

    @abstractmethod
    def get_marker(self, metric: MetricKind, condition: Union[int, str]) -> Optional[datetime]:
        """Last time a notification condition fired"""

    @abstractmethod
    def set_marker(self, metric: MetricKind, condition: Union[int, str], fired_at: datetime) -> None:
        """Record when a notification condition fired"""

    @abstractmethod
    def clear_markers(self, metric: MetricKind) -> int:
        """Remove all markers of a metric; returns how many were removed"""


class InMemoryGoalStore(GoalStore):
    """Process-local store holding serialised payloads, like a browser storage bucket"""

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        """
        Args:
            document: Optional stored goals document ({"orders": ..., "sales": ...}),
                in any schema version
        """
        self.goals: Dict[str, Dict[str, Any]] = {}
        self.markers: Dict[str, str] = {}
        for metric, goal in migrate_document(document).items():
            self.goals[metric.value] = goal.to_dict()

    def load_goals(self) -> Dict[MetricKind, GoalDefinition]:
        return migrate_document(self.goals)

    def get_goal(self, metric: MetricKind) -> Optional[GoalDefinition]:
        metric = MetricKind(metric)
        payload = self.goals.get(metric.value)
        if payload is None:
            return None
        return migrate(payload, metric)

    def save_goal(self, goal: GoalDefinition) -> None:
        self.goals[goal.metric.value] = goal.to_dict()

    def delete_goal(self, metric: MetricKind) -> bool:
        return self.goals.pop(MetricKind(metric).value, None) is not None

    def get_marker(self, metric: MetricKind, condition: Union[int, str]) -> Optional[datetime]:
        fired_at = self.markers.get(marker_key(metric, condition))
        return datetime.fromisoformat(fired_at) if fired_at else None

    def set_marker(self, metric: MetricKind, condition: Union[int, str], fired_at: datetime) -> None:
        self.markers[marker_key(metric, condition)] = fired_at.isoformat()

    def clear_markers(self, metric: MetricKind) -> int:
        prefix = f"{MetricKind(metric).value}:"
        keys = [key for key in self.markers if key.startswith(prefix)]
        for key in keys:
            del self.markers[key]
        return len(keys)


class PostgresGoalStore(GoalStore):
    """PostgreSQL-backed store; goal payloads live in a JSONB column"""

    def __init__(self, db_params: Optional[Dict[str, Any]] = None):
        self.db_params = db_params or {
            "host": os.environ.get("DB_HOST", "localhost"),
            "port": int(os.environ.get("DB_PORT", 5432)),
            "database": os.environ.get("DB_NAME", "goal_engine"),
            "user": os.environ.get("DB_USER", "goal_engine"),
            "password": os.environ.get("DB_PASSWORD", "")
        }
        self._ensure_tables()

    def _get_connection(self):
        """Get database connection"""
        return psycopg2.connect(**self.db_params)

    def _ensure_tables(self):
        """Create goal and marker tables if they don't exist"""
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("""
                        CREATE TABLE IF NOT EXISTS goal_definitions (
                            metric_kind VARCHAR(20) PRIMARY KEY,
                            payload JSONB NOT NULL,
                            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                        )
                    """)
                    cursor.execute("""
                        CREATE TABLE IF NOT EXISTS notification_markers (
                            marker_key VARCHAR(64) PRIMARY KEY,
                            fired_at TIMESTAMP NOT NULL
                        )
                    """)
                    conn.commit()
                    logger.info("Goal tables ensured")
        except psycopg2.Error as e:
            logger.error(f"Failed to create goal tables: {e}")
            raise PersistenceError("Failed to create goal tables") from e

    def load_goals(self) -> Dict[MetricKind, GoalDefinition]:
        try:
            with self._get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute("SELECT metric_kind, payload FROM goal_definitions")
                    rows = cursor.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Failed to load goals: {e}")
            raise PersistenceError("Failed to load goals") from e

        return migrate_document({row['metric_kind']: row['payload'] for row in rows})

    def get_goal(self, metric: MetricKind) -> Optional[GoalDefinition]:
        metric = MetricKind(metric)
        try:
            with self._get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute(
                        "SELECT payload FROM goal_definitions WHERE metric_kind = %s",
                        (metric.value,)
                    )
                    row = cursor.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Failed to load {metric.value} goal: {e}")
            raise PersistenceError(f"Failed to load {metric.value} goal") from e

        if not row:
            return None
        try:
            return migrate(row['payload'], metric)
        except GoalValidationError as e:
            logger.error(f"Stored {metric.value} goal is unreadable: {e}")
            return None

    def save_goal(self, goal: GoalDefinition) -> None:
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("""
                        INSERT INTO goal_definitions (metric_kind, payload)
                        VALUES (%s, %s)
                        ON CONFLICT (metric_kind)
                        DO UPDATE SET payload = EXCLUDED.payload,
                                      updated_at = CURRENT_TIMESTAMP
                    """, (goal.metric.value, json.dumps(goal.to_dict())))
                    conn.commit()
                    logger.debug(f"Stored {goal.metric.value} goal")
        except psycopg2.Error as e:
            logger.error(f"Failed to store {goal.metric.value} goal: {e}")
            raise PersistenceError(f"Failed to store {goal.metric.value} goal") from e

    def delete_goal(self, metric: MetricKind) -> bool:
        metric = MetricKind(metric)
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute(
                        "DELETE FROM goal_definitions WHERE metric_kind = %s",
                        (metric.value,)
                    )
                    deleted = cursor.rowcount
                    conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Failed to delete {metric.value} goal: {e}")
            raise PersistenceError(f"Failed to delete {metric.value} goal") from e
        return deleted > 0

    def get_marker(self, metric: MetricKind, condition: Union[int, str]) -> Optional[datetime]:
        key = marker_key(metric, condition)
        try:
            with self._get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute(
                        "SELECT fired_at FROM notification_markers WHERE marker_key = %s",
                        (key,)
                    )
                    row = cursor.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Failed to read marker {key}: {e}")
            raise PersistenceError(f"Failed to read marker {key}") from e
        return row['fired_at'] if row else None

    def set_marker(self, metric: MetricKind, condition: Union[int, str], fired_at: datetime) -> None:
        key = marker_key(metric, condition)
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("""
                        INSERT INTO notification_markers (marker_key, fired_at)
                        VALUES (%s, %s)
                        ON CONFLICT (marker_key)
                        DO UPDATE SET fired_at = EXCLUDED.fired_at
                    """, (key, fired_at))
                    conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Failed to store marker {key}: {e}")
            raise PersistenceError(f"Failed to store marker {key}") from e

    def clear_markers(self, metric: MetricKind) -> int:
        prefix = f"{MetricKind(metric).value}:%"
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute(
                        "DELETE FROM notification_markers WHERE marker_key LIKE %s",
                        (prefix,)
                    )
                    deleted = cursor.rowcount
                    conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Failed to clear markers for {metric}: {e}")
            raise PersistenceError(f"Failed to clear markers for {metric}") from e
        if deleted > 0:
            logger.info(f"Cleared {deleted} notification markers")
        return deleted
