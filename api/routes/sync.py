from fastapi import APIRouter, Depends

from api.auth import require_cron_secret
from api.repository import ChallengeRepository, get_repository
from api.services.riot import RiotClient, get_riot_client
from api.services.sync import SyncReport, sync_all_challenges
from api.services.throttle import KeyedThrottle, get_riot_throttle

router = APIRouter(prefix="/cron", tags=["sync"], dependencies=[Depends(require_cron_secret)])

@router.api_route("/sync", methods=["GET", "POST"], response_model=SyncReport)
async def sync_challenges(
    repo: ChallengeRepository = Depends(get_repository),
    riot: RiotClient = Depends(get_riot_client),
    throttle: KeyedThrottle = Depends(get_riot_throttle),
):
    return await sync_all_challenges(repo, riot, throttle)
