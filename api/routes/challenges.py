from fastapi import APIRouter, Depends, Body
from pydantic import ValidationError
from typing import List, Optional

from api.auth import get_current_user, get_optional_user, get_managed_challenge, get_visible_challenge
from api.exceptions import AuthorizationError, ChallengeNotFoundError, ValidationException
from api.models.updates import ChallengeCreate, ChallengeUpdate
from api.repository import ChallengeRepository, get_repository
from shared.models import Challenge

router = APIRouter(prefix="/challenges", tags=["challenges"])

@router.get("/", response_model=List[Challenge])
async def list_challenges(
    user: Optional[dict] = Depends(get_optional_user),
    repo: ChallengeRepository = Depends(get_repository),
):
    return await repo.list_challenges(user["sub"] if user else None)

@router.post("/", response_model=Challenge, status_code=201)
async def create_challenge(
    payload: ChallengeCreate = Body(...),
    user: dict = Depends(get_current_user),
    repo: ChallengeRepository = Depends(get_repository),
):
    challenge = Challenge(owner_id=user["sub"], **payload.model_dump())
    return await repo.create_challenge(challenge)

@router.get("/{challenge_id}", response_model=Challenge)
async def get_challenge(challenge: Challenge = Depends(get_visible_challenge)):
    return challenge

@router.patch("/{challenge_id}", response_model=Challenge)
async def update_challenge(
    update: ChallengeUpdate = Body(...),
    challenge: Challenge = Depends(get_managed_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    updates = update.get_update_dict()
    try:
        # validate the merged record so a lone end date is checked against the stored start
        Challenge(**{**challenge.model_dump(), **updates})
    except ValidationError as e:
        raise ValidationException(e.errors()[0]["msg"].removeprefix("Value error, "))

    updated = await repo.update_challenge(challenge.id, updates)
    if updated is None:
        raise ChallengeNotFoundError(challenge.id)
    return updated

@router.delete("/{challenge_id}")
async def delete_challenge(
    user: dict = Depends(get_current_user),
    challenge: Challenge = Depends(get_managed_challenge),
    repo: ChallengeRepository = Depends(get_repository),
):
    if challenge.owner_id != user["sub"]:
        raise AuthorizationError("Only the owner can delete a challenge")
    if not await repo.delete_challenge(challenge.id):
        raise ChallengeNotFoundError(challenge.id)
    return {"message": "Challenge deleted", "challenge_id": challenge.id}
