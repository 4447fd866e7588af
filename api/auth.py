import hmac
from fastapi import Depends, Request
from jose import JWTError, jwt
from typing import Optional

from api.config import settings
from api.exceptions import AuthenticationError, AuthorizationError, ChallengeNotFoundError
from api.repository import ChallengeRepository, get_repository
from shared.models import Challenge


def _bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        return None
    return auth[7:]


def decode_user(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError("Invalid JWT")
    if not payload.get("sub"):
        raise AuthenticationError("JWT has no subject")
    return payload


async def get_current_user(request: Request) -> dict:
    token = _bearer_token(request)
    if not token:
        raise AuthenticationError("Missing JWT")
    return decode_user(token)


async def get_optional_user(request: Request) -> Optional[dict]:
    token = _bearer_token(request)
    if not token:
        return None
    return decode_user(token)


async def require_cron_secret(request: Request):
    """Accept the secret as a Bearer header or as the api_key query parameter."""
    provided = _bearer_token(request) or request.query_params.get("api_key")
    if not provided or not hmac.compare_digest(provided, settings.cron_secret):
        raise AuthenticationError("Invalid cron secret")


async def get_managed_challenge(
    challenge_id: str,
    user: dict = Depends(get_current_user),
    repo: ChallengeRepository = Depends(get_repository),
) -> Challenge:
    """Load a challenge the caller owns or administers."""
    challenge = await repo.get_challenge(challenge_id)
    if challenge is None:
        raise ChallengeNotFoundError(challenge_id)
    if not challenge.can_manage(user["sub"]):
        raise AuthorizationError()
    return challenge


async def get_visible_challenge(
    challenge_id: str,
    user: Optional[dict] = Depends(get_optional_user),
    repo: ChallengeRepository = Depends(get_repository),
) -> Challenge:
    """Load a challenge the caller may read. Private ones look missing to outsiders."""
    challenge = await repo.get_challenge(challenge_id)
    if challenge is None:
        raise ChallengeNotFoundError(challenge_id)
    if challenge.visibility == "private" and not challenge.can_manage(user["sub"] if user else None):
        raise ChallengeNotFoundError(challenge_id)
    return challenge
