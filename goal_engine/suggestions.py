"""
Suggestion Engine Module
Target suggestions from growth trends and a catalog of named templates
"""

import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Union

from .models import MetricKind, PeriodKind

DEFAULT_GROWTH_RATE = 0.15
GROWTH_DAMPING = 0.3
MIN_GROWTH_RATE = 0.10
MAX_GROWTH_RATE = 0.50

# Scale a monthly baseline to the target period length
PERIOD_MULTIPLIERS = {
    PeriodKind.DAILY: 1 / 30,
    PeriodKind.WEEKLY: 1 / 4.33,
    PeriodKind.MONTHLY: 1,
    PeriodKind.QUARTERLY: 3,
}

TEMPLATE_CATEGORIES = ('growth', 'conservative', 'aggressive', 'maintenance')


def round_up(value: float) -> int:
    """Ceiling that ignores float noise such as 200 * 1.1 == 220.00000000000003."""
    return math.ceil(round(value, 6))


def growth_rate(current: float, previous: float) -> float:
    """Damped period-over-period growth, clamped to [10%, 50%]."""
    if previous > 0:
        rate = (current - previous) / previous * GROWTH_DAMPING
        return max(MIN_GROWTH_RATE, min(MAX_GROWTH_RATE, rate))
    return DEFAULT_GROWTH_RATE


def suggest_target(current: float, previous: float, period: Union[PeriodKind, str]) -> int:
    """
    Suggest a goal target from the current and previous period values

    Args:
        current: Metric value of the current monthly period
        previous: Metric value of the previous comparable period
        period: Period of the goal being created

    Returns:
        Suggested target, rounded up
    """
    base_value = current * PERIOD_MULTIPLIERS[PeriodKind(period)]
    return round_up(base_value * (1 + growth_rate(current, previous)))


@dataclass
class DashboardStats:
    """Current statistics templates are applied to."""

    total_orders: float = 0
    total_sales: float = 0
    orders_today: float = 0
    sales_today: float = 0


@dataclass(frozen=True)
class GoalTemplate:
    id: str
    name: str
    description: str
    metric: MetricKind
    period: PeriodKind
    category: str
    multiplier: float
    # Which statistic the multiplier applies to
    basis: str = 'total'
    basis_factor: float = 1


@dataclass(frozen=True)
class TemplateSuggestion:
    template_id: str
    metric: MetricKind
    period: PeriodKind
    value: int


GOAL_TEMPLATES: List[GoalTemplate] = [
    GoalTemplate('conservative-growth', 'Conservative Growth', 'Steady 10% growth target',
                 MetricKind.ORDERS, PeriodKind.MONTHLY, 'conservative', 1.10),
    GoalTemplate('moderate-growth', 'Moderate Growth', 'Balanced 25% growth target',
                 MetricKind.ORDERS, PeriodKind.MONTHLY, 'growth', 1.25),
    GoalTemplate('aggressive-growth', 'Aggressive Growth', 'Ambitious 50% growth target',
                 MetricKind.ORDERS, PeriodKind.MONTHLY, 'aggressive', 1.50),
    GoalTemplate('sales-conservative', 'Conservative Sales', 'Steady 10% sales growth',
                 MetricKind.SALES, PeriodKind.MONTHLY, 'conservative', 1.10),
    GoalTemplate('sales-moderate', 'Moderate Sales', 'Balanced 25% sales growth',
                 MetricKind.SALES, PeriodKind.MONTHLY, 'growth', 1.25),
    GoalTemplate('sales-aggressive', 'Aggressive Sales', 'Ambitious 50% sales growth',
                 MetricKind.SALES, PeriodKind.MONTHLY, 'aggressive', 1.50),
    GoalTemplate('daily-orders', 'Daily Orders Boost', 'Quick daily order target',
                 MetricKind.ORDERS, PeriodKind.DAILY, 'maintenance', 1.20, basis='today'),
    GoalTemplate('weekly-sales', 'Weekly Sales Push', 'Weekly sales target',
                 MetricKind.SALES, PeriodKind.WEEKLY, 'growth', 1.15, basis='today', basis_factor=7),
]


def get_template(template_id: str) -> GoalTemplate:
    for template in GOAL_TEMPLATES:
        if template.id == template_id:
            return template
    raise KeyError(f"Unknown goal template: {template_id}")


def _basis_value(template: GoalTemplate, stats: DashboardStats) -> float:
    if template.basis == 'today':
        value = stats.orders_today if template.metric is MetricKind.ORDERS else stats.sales_today
    else:
        value = stats.total_orders if template.metric is MetricKind.ORDERS else stats.total_sales
    return value * template.basis_factor


def apply_template(template: GoalTemplate, stats: DashboardStats) -> TemplateSuggestion:
    """Pre-fill values for the goal form; only multiplies the relevant statistic."""
    return TemplateSuggestion(
        template_id=template.id,
        metric=template.metric,
        period=template.period,
        value=round_up(_basis_value(template, stats) * template.multiplier),
    )


def templates_by_category() -> Dict[str, List[GoalTemplate]]:
    grouped: Dict[str, List[GoalTemplate]] = OrderedDict((category, []) for category in TEMPLATE_CATEGORIES)
    for template in GOAL_TEMPLATES:
        grouped[template.category].append(template)
    return grouped
