from fastapi import APIRouter, Depends, Body, Query
from typing import List

from api.auth import get_managed_challenge, get_visible_challenge
from api.config import settings
from api.exceptions import PlayerNotFoundError
from api.models.updates import AddPlayersRequest, AddPlayersResponse, RemovePlayerRequest
from api.repository import ChallengeRepository, get_repository
from api.services.riot import RiotClient, get_riot_client
from api.services.roster import register_players
from shared.models import Challenge, MatchResult, Player

router = APIRouter(prefix="/challenges", tags=["players"])

@router.get("/{challenge_id}/players", response_model=List[Player])
async def list_players(
    include_inactive: bool = False,
    challenge: Challenge = Depends(get_visible_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    return await repo.list_players(challenge.id, active_only=not include_inactive)

@router.post("/{challenge_id}/players", response_model=AddPlayersResponse)
async def add_players(
    payload: AddPlayersRequest = Body(...),
    challenge: Challenge = Depends(get_managed_challenge),
    repo: ChallengeRepository = Depends(get_repository),
    riot: RiotClient = Depends(get_riot_client),
):
    return await register_players(repo, riot, challenge, payload.players)

@router.post("/{challenge_id}/remove-player")
async def remove_player(
    payload: RemovePlayerRequest = Body(...),
    challenge: Challenge = Depends(get_managed_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    player = await repo.get_player(challenge.id, payload.player_id)
    if player is None:
        raise PlayerNotFoundError(payload.player_id)

    if payload.purge:
        await repo.delete_player(challenge.id, player.id)
        return {"message": "Player removed successfully", "player_id": player.id, "purged": True}

    await repo.set_player_active(challenge.id, player.id, False)
    return {"message": "Player deactivated successfully", "player_id": player.id, "purged": False}

@router.get("/{challenge_id}/players/{player_id}/matches", response_model=List[MatchResult])
async def get_player_matches(
    player_id: str,
    limit: int = Query(settings.recent_matches_limit, ge=1, le=100),
    challenge: Challenge = Depends(get_visible_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    if await repo.get_player(challenge.id, player_id) is None:
        raise PlayerNotFoundError(player_id)
    return await repo.recent_matches(challenge.id, player_id, limit)
