from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone


class RankSnapshot(BaseModel):
    challenge_id: str
    player_id: str
    tier: str
    division: Optional[str] = None
    lp: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def describe(self) -> str:
        if self.division:
            return f"{self.tier} {self.division}"
        return self.tier
