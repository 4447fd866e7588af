from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Literal
from datetime import datetime, timezone
from uuid import uuid4


RankingRule = Literal["fresh_rank", "lp_gained", "wins_losses"]
Visibility = Literal["public", "private"]

DEFAULT_RANKING_RULE = "lp_gained"


def ensure_aware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Challenge(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    # Stored as a free string: unknown values fall back to LP-gained scoring.
    ranking_rule: str = DEFAULT_RANKING_RULE
    visibility: Visibility = "public"
    owner_id: str
    admin_ids: List[str] = Field(default_factory=list)
    start_at: datetime
    end_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def check_window(self):
        if self.end_at is not None and ensure_aware_utc(self.end_at) <= ensure_aware_utc(self.start_at):
            raise ValueError("End date must be after start date")
        return self

    def can_manage(self, user_id: Optional[str]) -> bool:
        return user_id is not None and (user_id == self.owner_id or user_id in self.admin_ids)

    def is_active(self, now: datetime) -> bool:
        now = ensure_aware_utc(now)
        if ensure_aware_utc(self.start_at) > now:
            return False
        return self.end_at is None or ensure_aware_utc(self.end_at) >= now
