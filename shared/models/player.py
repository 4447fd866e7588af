from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime, timezone
from uuid import uuid4


Region = Literal["EUW", "EUNE", "NA", "KR", "JP", "BR", "LAN", "LAS", "OCE", "TR", "RU"]


class Player(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    challenge_id: str
    puuid: str
    region: Region
    name: str
    team: Optional[str] = None
    active: bool = True
    profile_icon_id: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
