"""
Goal Evaluation Engine
One evaluation cycle: progress, forecast, notifications, analytics, score
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from .analytics import AnalyticsRecorder
from .forecast import ForecastModel
from .gamification import GamificationScorer
from .models import ForecastResult, GoalDefinition, ProgressReading
from .notifications import Notification, NotificationDispatcher
from .progress import ProgressEvaluator
from .store import GoalStore

logger = logging.getLogger(__name__)


@dataclass
class GoalEvaluation:
    """Outcome of evaluating one goal in a cycle"""

    goal: GoalDefinition
    reading: ProgressReading
    forecast: ForecastResult
    notifications: List[Notification] = field(default_factory=list)
    snapshot_recorded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "target": self.goal.target,
            "period": self.goal.period.value,
            "start_date": self.goal.start_date.isoformat(),
            "end_date": self.goal.end_date.isoformat(),
            "value": self.reading.value,
            "progress": round(self.reading.percentage, 2),
            "data_available": self.reading.available,
            "forecast": self.forecast.to_dict(),
            "notifications": [n.to_dict() for n in self.notifications],
            "snapshot_recorded": self.snapshot_recorded,
        }


class GoalEngine:
    """Runs evaluation cycles over every active goal"""

    def __init__(self,
                 store: GoalStore,
                 evaluator: ProgressEvaluator,
                 dispatcher: NotificationDispatcher,
                 recorder: Optional[AnalyticsRecorder] = None,
                 forecaster: Optional[ForecastModel] = None,
                 scorer: Optional[GamificationScorer] = None):
        self.store = store
        self.evaluator = evaluator
        self.dispatcher = dispatcher
        self.recorder = recorder or AnalyticsRecorder(store)
        self.forecaster = forecaster or ForecastModel()
        self.scorer = scorer or GamificationScorer()
        self.is_running = False
        self.last_run = None
        self.last_result: Optional[Dict[str, Any]] = None

    async def evaluate_goal(self, goal: GoalDefinition, now: datetime) -> GoalEvaluation:
        """Evaluate a single goal; the analytics snapshot mutates ``goal``"""
        reading = await self.evaluator.evaluate(goal)
        forecast = self.forecaster.forecast(goal, reading.percentage, now, raw_value=reading.value)
        notifications = self.dispatcher.dispatch(goal, reading, forecast, now)
        recorded = self.recorder.record(goal, reading, now)
        return GoalEvaluation(
            goal=goal,
            reading=reading,
            forecast=forecast,
            notifications=notifications,
            snapshot_recorded=recorded,
        )

    async def run_cycle(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Execute one evaluation cycle

        Args:
            now: Evaluation instant (default: now)

        Returns:
            Cycle result with status, per-goal results and points
        """
        if self.is_running:
            logger.warning("Evaluation cycle already in progress, skipping")
            return {
                "status": "skipped",
                "message": "Evaluation cycle already in progress"
            }

        self.is_running = True
        now = now or datetime.now()

        try:
            try:
                goals = self.store.load_goals()
            except Exception as e:
                logger.error(f"Evaluation cycle aborted, goals could not be loaded: {e}")
                return {
                    "status": "error",
                    "message": str(e),
                    "evaluated_at": now.isoformat()
                }

            results: Dict[str, Any] = {}
            progress: Dict[str, float] = {}
            milestones: Dict[str, List[int]] = {}
            names: Dict[str, str] = {}

            for metric, goal in goals.items():
                try:
                    evaluation = await self.evaluate_goal(goal, now)
                except Exception as e:
                    logger.exception(f"Evaluation of {metric.value} goal failed: {e}")
                    results[metric.value] = {"status": "error", "message": str(e)}
                    continue
                results[metric.value] = evaluation.to_dict()
                progress[metric.value] = evaluation.reading.percentage
                milestones[metric.value] = list(goal.notifications.milestones)
                names[metric.value] = goal.name

            result = {
                "status": "success",
                "evaluated_at": now.isoformat(),
                "goals": results,
                "points": self.scorer.score(progress),
                "achievements": self.scorer.achievements(progress, milestones),
                "leaderboard": [asdict(entry) for entry in self.scorer.leaderboard(progress, names, milestones)],
            }
            self.last_run = now
            self.last_result = result
            logger.info(f"Evaluation cycle completed for {len(goals)} goal(s)")
            return result

        finally:
            self.is_running = False
