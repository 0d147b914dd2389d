"""
Test Suite: Goal schema migration
Legacy dashboard payloads load as current GoalDefinitions
"""

from datetime import date, datetime

import pytest

from goal_engine.migration import migrate, migrate_document
from goal_engine.models import GoalLevel, GoalValidationError, MetricKind, PeriodKind

NOW = datetime(2025, 2, 14, 10, 0)


def test_bare_number_becomes_monthly_goal():
    goal = migrate(250, MetricKind.ORDERS, NOW)
    assert goal.target == 250
    assert goal.period is PeriodKind.MONTHLY
    assert (goal.start_date, goal.end_date) == (date(2025, 2, 1), date(2025, 2, 28))
    assert goal.created_at == NOW
    assert goal.level is GoalLevel.COMPANY
    assert goal.notifications.milestones == [25, 50, 75, 100]
    assert goal.history == []


def test_dashboard_record_with_camel_case_fields():
    raw = {
        'value': 5000,
        'period': 'weekly',
        'startDate': '2025-02-09',
        'endDate': '2025-02-15',
        'createdAt': '2025-02-09T08:12:00.000Z',
        'level': 'team',
        'notifications': {
            'enabled': True,
            'milestones': [50, 100],
            'deadlineWarning': False,
            'dailyUpdates': True,
        },
        'history': [{'date': '2025-02-10', 'progress': 12.5, 'value': 625}],
    }
    goal = migrate(raw, 'sales', NOW)
    assert goal.metric is MetricKind.SALES
    assert goal.period is PeriodKind.WEEKLY
    assert goal.created_at == datetime(2025, 2, 9, 8, 12)
    assert goal.level is GoalLevel.TEAM
    assert goal.notifications.milestones == [50, 100]
    assert goal.notifications.deadline_warning is False
    assert goal.notifications.daily_updates is True
    assert goal.history[0].date == date(2025, 2, 10)
    assert goal.name == 'Sales Goal'


def test_dashboard_record_with_timestamp_dates():
    raw = {
        'value': 10,
        'period': 'daily',
        'startDate': '2025-02-14T00:00:00.000Z',
        'endDate': '2025-02-14T23:59:59.999Z',
        'createdAt': '2025-02-14T07:00:00',
    }
    goal = migrate(raw, MetricKind.ORDERS, NOW)
    assert goal.start_date == goal.end_date == date(2025, 2, 14)


def test_current_schema_round_trips(january_orders_goal):
    assert migrate(january_orders_goal.to_dict(), MetricKind.ORDERS) == january_orders_goal


@pytest.mark.parametrize("raw", [
    0,
    -5,
    'lots',
    True,
    {'value': 10},
    {'value': 0, 'period': 'monthly', 'startDate': '2025-01-01', 'endDate': '2025-01-31',
     'createdAt': '2025-01-01T00:00:00'},
    {'value': 10, 'period': 'monthly', 'startDate': '2025-02-01', 'endDate': '2025-01-01',
     'createdAt': '2025-01-01T00:00:00'},
    {'value': 10, 'period': 'yearly', 'startDate': '2025-01-01', 'endDate': '2025-12-31',
     'createdAt': '2025-01-01T00:00:00'},
])
def test_invalid_payloads_rejected(raw):
    with pytest.raises(GoalValidationError):
        migrate(raw, MetricKind.ORDERS, NOW)


def test_document_migration_drops_unreadable_entries(caplog):
    goals = migrate_document({'orders': 120, 'sales': 'garbage'}, NOW)
    assert list(goals) == [MetricKind.ORDERS]
    assert goals[MetricKind.ORDERS].target == 120
    assert 'Dropping unreadable sales goal' in caplog.text


def test_empty_document():
    assert migrate_document(None) == {}
    assert migrate_document({'orders': None, 'sales': None}) == {}
