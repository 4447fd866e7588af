from fastapi import APIRouter, Depends
from typing import Optional

from api.auth import get_managed_challenge, get_visible_challenge
from api.repository import ChallengeRepository, get_repository
from api.services.leaderboard import build_lp_history
from api.services.riot import RiotClient, get_riot_client
from api.services.roster import display_name_from_riot_id
from api.services.sync import take_snapshots
from api.services.throttle import KeyedThrottle, get_riot_throttle
from shared.models import Challenge

router = APIRouter(prefix="/challenges", tags=["snapshots"])

@router.post("/{challenge_id}/snapshot")
async def snapshot_challenge(
    challenge: Challenge = Depends(get_managed_challenge),
    repo: ChallengeRepository = Depends(get_repository),
    riot: RiotClient = Depends(get_riot_client),
    throttle: KeyedThrottle = Depends(get_riot_throttle),
):
    inserted, errors = await take_snapshots(repo, riot, challenge, throttle)
    return {"inserted": inserted, "errors": errors}

@router.get("/{challenge_id}/lp-history")
async def get_lp_history(
    player_id: Optional[str] = None,
    challenge: Challenge = Depends(get_visible_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    players = await repo.list_players(challenge.id, active_only=False)
    names = {p.id: display_name_from_riot_id(p.name) for p in players}
    snapshots = await repo.list_snapshots(challenge.id, player_id=player_id)
    return {"history": build_lp_history(snapshots, names)}
