from pydantic import BaseModel, Field, computed_field
from typing import Annotated, List, Optional, Literal, Union
from datetime import datetime, timezone


class FreshRankScore(BaseModel):
    rule: Literal["fresh_rank"] = "fresh_rank"
    ordinal: float = Field(default=0.0, ge=0.0)
    tier: Optional[str] = None
    division: Optional[str] = None
    lp: Optional[int] = None

    @property
    def key(self) -> float:
        return self.ordinal


class WinsLossesScore(BaseModel):
    rule: Literal["wins_losses"] = "wins_losses"
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    winrate: float = Field(ge=0.0, le=100.0)

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def key(self) -> float:
        return self.wins * 10000 + self.winrate * 100 + self.losses


class LpGainedScore(BaseModel):
    rule: Literal["lp_gained"] = "lp_gained"
    lp_gained: int

    @property
    def key(self) -> float:
        return self.lp_gained


Score = Annotated[
    Union[FreshRankScore, WinsLossesScore, LpGainedScore],
    Field(discriminator="rule"),
]


class LeaderboardRow(BaseModel):
    player_id: str
    name: str
    team: Optional[str] = None
    puuid: Optional[str] = None
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    lp_gained: int = 0
    score: Score
    rank_label: str
    main_rank: str = "N/A"
    initial_rank: str = "N/A"
    final_rank: str = "N/A"

    @computed_field
    @property
    def ordering_key(self) -> float:
        return self.score.key


class Leaderboard(BaseModel):
    challenge_id: str
    ranking_rule: str
    players: List[LeaderboardRow] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
