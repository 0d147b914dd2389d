"""
Analytics Recorder Module
One progress snapshot per goal per calendar day
"""

import logging
from datetime import datetime
from typing import List, Optional

from .models import GoalDefinition, ProgressReading, ProgressSnapshot
from .store import GoalStore, PersistenceError

LOGGER = logging.getLogger(__name__)


def _same_goal(stored: GoalDefinition, goal: GoalDefinition) -> bool:
    return (stored.created_at == goal.created_at
            and stored.start_date == goal.start_date
            and stored.end_date == goal.end_date)


class AnalyticsRecorder:
    """Appends daily progress snapshots to a goal's history"""

    def __init__(self, store: GoalStore):
        self.store = store

    def record(self, goal: GoalDefinition, reading: ProgressReading,
               now: Optional[datetime] = None) -> bool:
        """
        Record today's snapshot unless one already exists (first write wins)

        The snapshot is appended to the goal as currently stored, so edits made
        while the cycle was running are kept. A goal that was cleared or
        replaced in the meantime gets no snapshot.

        Args:
            goal: Goal as loaded at the start of the cycle; its history is updated too
            reading: Progress computed this cycle
            now: Evaluation instant (default: now)

        Returns:
            True if a snapshot was appended
        """
        if now is None:
            now = datetime.now()
        today = now.date()

        try:
            stored = self.store.get_goal(goal.metric)
        except PersistenceError as e:
            LOGGER.error(f"Snapshot for {goal.metric.value} goal on {today} skipped, goal not readable: {e}")
            return False

        if stored is None or not _same_goal(stored, goal):
            LOGGER.info(f"{goal.metric.value} goal changed during evaluation, discarding snapshot for {today}")
            return False

        if stored.snapshot_for(today) is not None:
            return False

        snapshot = ProgressSnapshot(date=today, progress=reading.percentage, value=reading.value)
        stored.history.append(snapshot)
        if goal.snapshot_for(today) is None:
            goal.history.append(snapshot)
        try:
            self.store.save_goal(stored)
        except PersistenceError as e:
            LOGGER.error(f"Snapshot for {goal.metric.value} goal on {today} not persisted: {e}")
        return True


def recent_history(goal: GoalDefinition, days: int = 7) -> List[ProgressSnapshot]:
    """Last ``days`` snapshots, oldest first."""
    if days <= 0:
        return []
    return sorted(goal.history, key=lambda snapshot: snapshot.date)[-days:]
