from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime, timezone


class MatchResult(BaseModel):
    challenge_id: str
    player_id: str
    match_id: Optional[str] = None
    # Kept as a plain string so legacy rows with other values load; only
    # "WIN" and "LOSS" are ever counted.
    result: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


Outcome = Literal["WIN", "LOSS"]
