"""
API request/response models. Stored entities live in shared.models.
"""

from api.models.updates import (
    ChallengeCreate,
    ChallengeUpdate,
    PlayerInput,
    AddPlayersRequest,
    RemovePlayerRequest,
    PlayerOutcome,
    AddPlayersResponse,
)

__all__ = [
    "ChallengeCreate",
    "ChallengeUpdate",
    "PlayerInput",
    "AddPlayersRequest",
    "RemovePlayerRequest",
    "PlayerOutcome",
    "AddPlayersResponse",
]
