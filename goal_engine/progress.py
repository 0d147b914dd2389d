"""
Progress Evaluator Module
Aggregates orders inside a goal's interval into a completion percentage
"""

import logging
import math
from decimal import Decimal
from typing import Any, Dict, Iterable

from .models import GoalDefinition, MetricKind, ProgressReading

LOGGER = logging.getLogger(__name__)


def _coerce_total(total: Any) -> float:
    """Numeric value of an order total; anything unusable counts as 0."""
    if isinstance(total, bool) or total is None:
        return 0.0
    if isinstance(total, Decimal):
        total = float(total)
    try:
        amount = float(total)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def aggregate_metric(metric: MetricKind, orders: Iterable[Dict[str, Any]]) -> float:
    """
    Reduce order records to the metric's value

    Args:
        metric: orders counts records, sales sums their totals
        orders: Order dicts with a 'total' field

    Returns:
        Accumulated metric value
    """
    metric = MetricKind(metric)
    if metric is MetricKind.ORDERS:
        return float(sum(1 for _ in orders))
    return sum(_coerce_total(order.get('total')) for order in orders)


def completion_percentage(value: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(value / target * 100, 100.0)


class ProgressEvaluator:
    """Computes live progress for goals from the order repository"""

    def __init__(self, repository):
        """
        Args:
            repository: Object with an async query_orders(date_from, date_to)
        """
        self.repository = repository

    async def evaluate(self, goal: GoalDefinition) -> ProgressReading:
        """
        Fetch the goal's orders in one query and compute its progress

        Repository failures are logged and read as zero progress so a
        refresh cycle keeps going.
        """
        try:
            orders = await self.repository.query_orders(goal.start_date, goal.end_date)
        except Exception as e:
            LOGGER.error(f"Progress query for {goal.metric.value} goal failed: {e}")
            return ProgressReading(value=0.0, percentage=0.0, available=False)

        value = aggregate_metric(goal.metric, orders)
        return ProgressReading(
            value=value,
            percentage=completion_percentage(value, goal.target),
        )
