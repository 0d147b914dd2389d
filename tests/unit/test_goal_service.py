from __future__ import annotations

from datetime import date, datetime

import pytest

from goal_engine.goal_service import GoalNotFoundError, GoalService
from goal_engine.models import GoalLevel, GoalValidationError, MetricKind, NotificationPolicy, PeriodKind
from goal_engine.order_repository import InMemoryOrderRepository
from goal_engine.store import InMemoryGoalStore

NOW = datetime(2025, 1, 15, 10, 0)


@pytest.fixture
def store() -> InMemoryGoalStore:
    return InMemoryGoalStore()


@pytest.fixture
def service(store) -> GoalService:
    return GoalService(store)


def test_set_goal_uses_current_period(service, store):
    goal = service.set_goal("orders", 100, "monthly", now=NOW)
    assert (goal.start_date, goal.end_date) == (date(2025, 1, 1), date(2025, 1, 31))
    assert goal.created_at == NOW
    assert goal.name == "Orders Goal"
    assert store.get_goal(MetricKind.ORDERS) == goal


def test_set_goal_replaces_existing_goal(service):
    service.set_goal(MetricKind.SALES, 1000, PeriodKind.WEEKLY, now=NOW)
    service.set_goal(MetricKind.SALES, 2000, PeriodKind.QUARTERLY, now=NOW)
    goals = service.list_goals()
    assert len(goals) == 1
    assert goals[MetricKind.SALES].target == 2000
    assert goals[MetricKind.SALES].end_date == date(2025, 3, 31)


@pytest.mark.parametrize("target", [0, -10])
def test_set_goal_rejects_non_positive_target(service, store, target):
    with pytest.raises(GoalValidationError):
        service.set_goal("orders", target, now=NOW)
    assert store.get_goal(MetricKind.ORDERS) is None


def test_set_goal_rejects_unknown_level(service):
    with pytest.raises(GoalValidationError):
        service.set_goal("orders", 10, level="galaxy", now=NOW)


def test_set_goal_rejects_bad_milestones(service):
    with pytest.raises(GoalValidationError):
        service.set_goal("orders", 10, notifications=NotificationPolicy(milestones=[50, 150]), now=NOW)


def test_reset_goal_restarts_period_and_keeps_target(service):
    service.set_goal("orders", 100, "weekly", now=datetime(2025, 1, 1, 9, 0))
    later = datetime(2025, 1, 20, 9, 0)
    goal = service.reset_goal("orders", now=later)
    assert goal.target == 100
    assert (goal.start_date, goal.end_date) == (date(2025, 1, 19), date(2025, 1, 25))
    assert goal.created_at == later
    assert service.list_goals()[MetricKind.ORDERS].start_date == date(2025, 1, 19)


def test_edit_goal_changes_policy_and_level(service, store):
    service.set_goal("sales", 500, now=NOW)
    policy = NotificationPolicy(milestones=[10, 90], deadline_warning=False)
    goal = service.edit_goal("sales", level=GoalLevel.TEAM, notifications=policy, description="Q1 push")
    assert goal.level is GoalLevel.TEAM
    assert store.get_goal(MetricKind.SALES).notifications.milestones == [10, 90]
    assert store.get_goal(MetricKind.SALES).description == "Q1 push"
    assert goal.start_date == date(2025, 1, 1)


def test_invalid_edit_leaves_goal_untouched(service, store):
    service.set_goal("sales", 500, now=NOW)
    with pytest.raises(GoalValidationError):
        service.edit_goal("sales", notifications=NotificationPolicy(milestones=[0]))
    assert store.get_goal(MetricKind.SALES).notifications.milestones == [25, 50, 75, 100]


def test_missing_goal(service):
    with pytest.raises(GoalNotFoundError):
        service.reset_goal("orders", now=NOW)
    with pytest.raises(GoalNotFoundError):
        service.edit_goal("orders", level="team")


def test_clear_goal(service):
    service.set_goal("orders", 100, now=NOW)
    assert service.clear_goal("orders") is True
    assert service.clear_goal("orders") is False
    assert service.list_goals() == {}


@pytest.mark.asyncio
async def test_suggest_target_from_month_over_month(store):
    orders = [{"createdAt": f"2024-12-{day:02d}T12:00:00", "total": 10} for day in range(1, 31)] * 5
    orders += [{"createdAt": f"2025-01-{day:02d}T12:00:00", "total": 10} for day in range(1, 21)] * 10
    service = GoalService(store, InMemoryOrderRepository(orders))
    # 200 this month vs 150 last month
    assert await service.suggest_target("orders", "monthly", now=NOW) == 220


@pytest.mark.asyncio
async def test_suggest_target_requires_repository(service):
    with pytest.raises(RuntimeError):
        await service.suggest_target("orders", now=NOW)
