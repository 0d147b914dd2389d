"""
Goal Tracking & Forecasting Engine - Core Modules
"""

from .analytics import AnalyticsRecorder
from .engine import GoalEngine
from .forecast import ForecastModel
from .gamification import GamificationScorer
from .goal_service import GoalService
from .models import GoalDefinition, MetricKind, PeriodKind
from .notifications import NotificationDispatcher
from .periods import period_dates
from .progress import ProgressEvaluator
from .scheduler import EvaluationScheduler

__all__ = [
    'AnalyticsRecorder',
    'EvaluationScheduler',
    'ForecastModel',
    'GamificationScorer',
    'GoalDefinition',
    'GoalEngine',
    'GoalService',
    'MetricKind',
    'NotificationDispatcher',
    'PeriodKind',
    'ProgressEvaluator',
    'period_dates',
]

__version__ = '0.1.0'
