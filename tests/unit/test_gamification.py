"""
Test Suite: Gamification Scorer
"""

import pytest

from goal_engine.gamification import GamificationScorer, LeaderboardEntry, build_leaderboard


@pytest.fixture
def scorer():
    return GamificationScorer()


@pytest.mark.parametrize("progress, points", [
    (0, 0),
    (9.9, 0),
    (10, 5),
    (45, 20),
    (99.9, 45),
    (100, 150),
])
def test_points_per_goal(scorer, progress, points):
    assert scorer.points_for(progress) == points


def test_score_sums_goals(scorer):
    assert scorer.score({'orders': 100, 'sales': 37.5}) == 150 + 15
    assert scorer.score({}) == 0


def test_achievements(scorer):
    badges = scorer.achievements({'orders': 100, 'sales': 80}, {'orders': [25, 50, 100], 'sales': [25, 50, 75]})
    assert badges == ['Goal Setter', 'Orders Goal Achieved', 'Milestone Master']
    assert scorer.achievements({}) == []
    assert 'Milestone Master' not in scorer.achievements({'orders': 60}, {'orders': [25, 50, 75]})


def test_leaderboard_ranks_by_score():
    entries = [
        LeaderboardEntry(id='2', name='Team Alpha', score=90),
        LeaderboardEntry(id='1', name='You', score=120),
        LeaderboardEntry(id='3', name='Team Beta', score=30),
    ]
    board = build_leaderboard(entries)
    assert [(e.name, e.rank) for e in board] == [('You', 1), ('Team Alpha', 2), ('Team Beta', 3)]


def test_leaderboard_per_goal(scorer):
    board = scorer.leaderboard(
        {'orders': 45, 'sales': 100},
        names={'orders': 'Orders Goal'},
        milestones_by_metric={'sales': [25, 50, 75, 100]},
    )
    assert [(e.id, e.name, e.rank, e.score) for e in board] == [
        ('sales', 'sales', 1, 150),
        ('orders', 'Orders Goal', 2, 20),
    ]
    assert board[0].achievements == ['Goal Setter', 'Sales Goal Achieved', 'Milestone Master']
    assert board[1].achievements == ['Goal Setter']
    assert scorer.leaderboard({}) == []
