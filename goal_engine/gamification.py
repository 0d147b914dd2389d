"""
Gamification Scorer Module
Points and leaderboard ranking derived from goal completion
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

COMPLETION_POINTS = 100
STEP_POINTS = 5
STEP_PERCENT = 10


@dataclass
class LeaderboardEntry:
    id: str
    name: str
    score: int
    rank: int = 0
    achievements: List[str] = field(default_factory=list)
    progress: float = 0.0


class GamificationScorer:
    """Derives display-only points from goal progress"""

    def points_for(self, progress: float) -> int:
        points = COMPLETION_POINTS if progress >= 100 else 0
        return points + int(progress // STEP_PERCENT) * STEP_POINTS

    def score(self, progress_by_metric: Dict[str, float]) -> int:
        """
        Total points for the current goal states

        Args:
            progress_by_metric: Completion percentage per active goal

        Returns:
            Point total
        """
        return sum(self.points_for(progress) for progress in progress_by_metric.values())

    def achievements(self, progress_by_metric: Dict[str, float],
                     milestones_by_metric: Optional[Dict[str, List[int]]] = None) -> List[str]:
        """Badge names earned by the current goal states"""
        badges = []
        if progress_by_metric:
            badges.append('Goal Setter')
        for metric, progress in progress_by_metric.items():
            if progress >= 100:
                badges.append(f'{metric.capitalize()} Goal Achieved')
        milestones_by_metric = milestones_by_metric or {}
        reached_all = [
            bool(milestones) and progress_by_metric.get(metric, 0) >= max(milestones)
            for metric, milestones in milestones_by_metric.items()
        ]
        if reached_all and all(reached_all):
            badges.append('Milestone Master')
        return badges

    def leaderboard(self, progress_by_metric: Dict[str, float],
                    names: Optional[Dict[str, str]] = None,
                    milestones_by_metric: Optional[Dict[str, List[int]]] = None) -> List[LeaderboardEntry]:
        """Ranked entry per goal, scored and badged on its own progress"""
        names = names or {}
        milestones_by_metric = milestones_by_metric or {}
        entries = []
        for metric, progress in progress_by_metric.items():
            own_milestones = {metric: milestones_by_metric[metric]} if metric in milestones_by_metric else None
            entries.append(LeaderboardEntry(
                id=metric,
                name=names.get(metric, metric),
                score=self.points_for(progress),
                achievements=self.achievements({metric: progress}, own_milestones),
                progress=progress,
            ))
        return build_leaderboard(entries)


def build_leaderboard(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Sort entries by score, highest first, and assign 1-based ranks."""
    ranked = sorted(entries, key=lambda entry: entry.score, reverse=True)
    for position, entry in enumerate(ranked, start=1):
        entry.rank = position
    return ranked
