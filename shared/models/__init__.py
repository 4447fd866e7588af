"""
Shared models for the ranked challenge tracker.
These models are used by the API, the sync job and the database scripts.
"""

from .challenge import Challenge, RankingRule, Visibility, DEFAULT_RANKING_RULE
from .player import Player, Region
from .snapshot import RankSnapshot
from .match import MatchResult, Outcome
from .leaderboard import (
    Leaderboard,
    LeaderboardRow,
    Score,
    FreshRankScore,
    WinsLossesScore,
    LpGainedScore,
)

__all__ = [
    "Challenge",
    "RankingRule",
    "Visibility",
    "DEFAULT_RANKING_RULE",
    "Player",
    "Region",
    "RankSnapshot",
    "MatchResult",
    "Outcome",
    "Leaderboard",
    "LeaderboardRow",
    "Score",
    "FreshRankScore",
    "WinsLossesScore",
    "LpGainedScore",
]
