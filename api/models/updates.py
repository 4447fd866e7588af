"""
Request models for the write endpoints.
These models define what fields can be set or updated and their constraints.
Update models have all fields optional since PATCH allows partial updates.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from shared.models import Region, RankingRule, Visibility
from shared.models.challenge import ensure_aware_utc


class ChallengeCreate(BaseModel):
    """Model for creating a challenge via POST /challenges"""

    name: str = Field(..., min_length=1, max_length=100, description="Challenge name")
    ranking_rule: RankingRule = Field(
        default="lp_gained", description="How the leaderboard is ordered"
    )
    visibility: Visibility = Field(default="public", description="Who can see the challenge")
    start_at: datetime = Field(..., description="When the challenge starts (UTC)")
    end_at: Optional[datetime] = Field(default=None, description="When the challenge ends (UTC)")
    admin_ids: List[str] = Field(
        default_factory=list, max_length=20, description="Users allowed to manage the roster"
    )

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_at is not None and ensure_aware_utc(self.end_at) <= ensure_aware_utc(self.start_at):
            raise ValueError("End date must be after start date")
        return self


class ChallengeUpdate(BaseModel):
    """Model for updating a challenge via PATCH /challenges/{id}"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    ranking_rule: Optional[RankingRule] = None
    visibility: Optional[Visibility] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    admin_ids: Optional[List[str]] = Field(default=None, max_length=20)

    def get_update_dict(self) -> dict:
        """Get only the fields that were explicitly set (not None)."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class PlayerInput(BaseModel):
    """
    One player to register. Exactly one identity field must be given:
    a Riot ID (GameName#TagLine), a legacy summoner name, or a raw PUUID.
    """

    region: Region
    riot_id: Optional[str] = Field(default=None, min_length=3, max_length=40)
    summoner_name: Optional[str] = Field(default=None, min_length=2, max_length=30)
    puuid: Optional[str] = Field(default=None, min_length=20, max_length=80)
    team: Optional[str] = Field(default=None, max_length=50)

    @field_validator("riot_id", "summoner_name", "puuid", "team")
    @classmethod
    def strip_value(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None

    @field_validator("riot_id")
    @classmethod
    def validate_riot_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            game_name, _, tag_line = v.partition("#")
            if not game_name.strip() or not tag_line.strip():
                raise ValueError("Invalid Riot ID format. Use GameName#TagLine")
        return v

    @model_validator(mode="after")
    def validate_identity(self):
        given = [f for f in ("riot_id", "summoner_name", "puuid") if getattr(self, f)]
        if len(given) != 1:
            raise ValueError("Provide exactly one of riot_id, summoner_name or puuid")
        return self


class AddPlayersRequest(BaseModel):
    """Model for POST /challenges/{id}/players"""

    players: List[PlayerInput] = Field(..., min_length=1, max_length=50)


class RemovePlayerRequest(BaseModel):
    """Model for POST /challenges/{id}/remove-player"""

    player_id: str = Field(..., min_length=1)
    purge: bool = Field(
        default=False, description="Delete the player and their history instead of deactivating"
    )


class PlayerOutcome(BaseModel):
    region: str
    riot_id: Optional[str] = None
    summoner_name: Optional[str] = None
    puuid: Optional[str] = None
    id: Optional[str] = None
    reason: Optional[str] = None
    reactivated: bool = False


class AddPlayersResponse(BaseModel):
    inserted: List[PlayerOutcome] = Field(default_factory=list)
    skipped: List[PlayerOutcome] = Field(default_factory=list)
    failed: List[PlayerOutcome] = Field(default_factory=list)
