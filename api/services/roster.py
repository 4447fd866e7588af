"""
Roster registration: resolves player inputs to Riot identities and adds
them to a challenge, one player at a time.
"""

import logging
from typing import List, Optional, Tuple

from api.exceptions import ChallengeTrackerException, DuplicateResourceError
from api.models.updates import AddPlayersResponse, PlayerInput, PlayerOutcome
from api.services.riot import RiotClient
from shared.models import Challenge, Player

logger = logging.getLogger("rankchallenge")


class IdentityNotFound(Exception):
    pass


def display_name_from_riot_id(name: str) -> str:
    """'GameName#Tag' -> 'GameName'."""
    if not name:
        return ""
    return name.split("#")[0]


async def resolve_identity(riot: RiotClient, entry: PlayerInput) -> Tuple[str, str, Optional[int]]:
    """
    Resolve an input to (puuid, display name, profile icon id).

    Raises:
        IdentityNotFound: if Riot does not know the identity
        RiotAPIError: if the Riot API fails
    """
    if entry.puuid:
        summoner = await riot.get_summoner_by_puuid(entry.region, entry.puuid)
        if summoner:
            return entry.puuid, summoner.name or entry.puuid[:12] + "…", summoner.profileIconId
        return entry.puuid, entry.puuid[:12] + "…", None

    if entry.riot_id:
        game_name, _, tag_line = entry.riot_id.partition("#")
        account = await riot.get_account_by_riot_id(entry.region, game_name.strip(), tag_line.strip())
        if account is None or not account.puuid:
            raise IdentityNotFound("Riot ID not found")
        summoner = await riot.get_summoner_by_puuid(entry.region, account.puuid)
        return account.puuid, account.riot_id, summoner.profileIconId if summoner else None

    summoner = await riot.get_summoner_by_name(entry.region, entry.summoner_name)
    if summoner is None or not summoner.puuid:
        raise IdentityNotFound("Summoner not found")
    return summoner.puuid, summoner.name or entry.summoner_name, summoner.profileIconId


def _outcome(entry: PlayerInput, **kwargs) -> PlayerOutcome:
    return PlayerOutcome(
        region=entry.region,
        riot_id=entry.riot_id,
        summoner_name=entry.summoner_name,
        puuid=kwargs.pop("puuid", entry.puuid),
        **kwargs,
    )


async def register_players(
    repo, riot: RiotClient, challenge: Challenge, entries: List[PlayerInput]
) -> AddPlayersResponse:
    """
    Add players to a challenge roster.

    An identity already on the roster is skipped as a duplicate; one that
    was deactivated is switched back on. Failures are reported per player.
    """
    response = AddPlayersResponse()

    for entry in entries:
        puuid = entry.puuid
        try:
            puuid, name, icon = await resolve_identity(riot, entry)

            existing = await repo.find_player_by_puuid(challenge.id, puuid)
            if existing is not None:
                if existing.active:
                    response.skipped.append(_outcome(entry, puuid=puuid, id=existing.id, reason="duplicate"))
                else:
                    await repo.set_player_active(challenge.id, existing.id, True)
                    response.inserted.append(_outcome(entry, puuid=puuid, id=existing.id, reactivated=True))
                continue

            player = await repo.insert_player(
                Player(
                    challenge_id=challenge.id,
                    puuid=puuid,
                    region=entry.region,
                    name=name,
                    team=entry.team or None,
                    profile_icon_id=icon,
                )
            )
            response.inserted.append(_outcome(entry, puuid=puuid, id=player.id))
        except DuplicateResourceError:
            response.skipped.append(_outcome(entry, puuid=puuid, reason="duplicate"))
        except IdentityNotFound as e:
            response.failed.append(_outcome(entry, puuid=puuid, reason=str(e)))
        except ChallengeTrackerException as e:
            logger.warning(f"Could not register player in challenge {challenge.id}: {e.message}")
            response.failed.append(_outcome(entry, puuid=puuid, reason=e.message))

    return response
