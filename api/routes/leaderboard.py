from fastapi import APIRouter, Depends

from api.auth import get_visible_challenge
from api.config import settings
from api.repository import ChallengeRepository, get_repository
from api.services.leaderboard import compute_leaderboard
from shared.models import Challenge, Leaderboard

router = APIRouter(prefix="/challenges", tags=["leaderboard"])

@router.get("/{challenge_id}/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    challenge: Challenge = Depends(get_visible_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    return await compute_leaderboard(repo, challenge.id, match_window=settings.leaderboard_match_window)
