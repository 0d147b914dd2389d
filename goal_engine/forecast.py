"""
Forecast Model Module
Linear-pace projection of end-of-period completion
"""

import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .models import ForecastResult, GoalDefinition
from .periods import Period

ON_TRACK_TOLERANCE = 0.9

# id, name, description, daily growth, confidence
WHAT_IF_PRESETS = [
    ('conservative', 'Conservative Growth', '5% daily growth rate', 0.05, 85),
    ('moderate', 'Moderate Growth', '10% daily growth rate', 0.10, 70),
    ('aggressive', 'Aggressive Growth', '15% daily growth rate', 0.15, 55),
]


def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / 86400)


class ForecastModel:
    """Projects where a goal ends up if the current pace holds"""

    def __init__(self, tolerance: float = ON_TRACK_TOLERANCE):
        """
        Args:
            tolerance: Share of the linear expectation that still counts as on track
        """
        self.tolerance = tolerance

    def forecast(self,
                 goal: GoalDefinition,
                 current_progress: float,
                 now: Optional[datetime] = None,
                 raw_value: Optional[float] = None) -> ForecastResult:
        """
        Project end-of-period completion

        Args:
            goal: Goal with its interval
            current_progress: Clamped completion percentage so far
            now: Evaluation instant (default: now)
            raw_value: Unclamped accumulated value, used to expose overshoot

        Returns:
            ForecastResult
        """
        if now is None:
            now = datetime.now()

        interval = Period(goal.start_date, goal.end_date)
        # A single-day goal still spans one day
        total_days = max(1, _ceil_days(interval.end_datetime - interval.start_datetime))
        days_elapsed = _ceil_days(now - interval.start_datetime)
        days_remaining = max(0, total_days - days_elapsed)

        if days_elapsed <= 0:
            return ForecastResult(percentage=0.0, days_remaining=days_remaining, on_track=False)

        daily_rate = current_progress / days_elapsed
        projected = min(daily_rate * total_days, 100.0)
        expected_now = (days_elapsed / total_days) * 100
        on_track = current_progress >= expected_now * self.tolerance

        raw_progress = current_progress
        if raw_value is not None and goal.target > 0:
            raw_progress = raw_value / goal.target * 100

        return ForecastResult(
            percentage=projected,
            days_remaining=days_remaining,
            on_track=on_track,
            unclamped_percentage=raw_progress / days_elapsed * total_days,
        )


def what_if_scenarios(current: float, now: Optional[datetime] = None, days: int = 30) -> List[Dict]:
    """
    Compounding growth scenarios for a metric's current value

    Args:
        current: Current metric value
        now: Start of the projection (default: now)
        days: Projection horizon

    Returns:
        List of scenario dicts
    """
    if now is None:
        now = datetime.now()
    projected_date = (now + timedelta(days=days)).date().isoformat()

    return [
        {
            'id': scenario_id,
            'name': name,
            'description': description,
            'assumptions': {'daily_growth': growth},
            'projected_value': current * math.pow(1 + growth, days),
            'projected_date': projected_date,
            'confidence': confidence,
        }
        for scenario_id, name, description, growth, confidence in WHAT_IF_PRESETS
    ]
