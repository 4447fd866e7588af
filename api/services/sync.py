"""
Rank and match synchronisation against the Riot API.

Runs from the scheduled sync endpoint and from the manual snapshot endpoint.
Each player is handled on its own: a Riot failure for one player is logged,
counted, and the loop moves on.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from api.services.riot import RiotClient
from api.services.throttle import KeyedThrottle
from shared.models import Challenge, MatchResult, Player, RankSnapshot
from shared.models.challenge import ensure_aware_utc

logger = logging.getLogger("rankchallenge")


class SyncReport(BaseModel):
    success: bool = True
    inserted: int = 0
    matches: int = 0
    errors: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def throttle_key(player: Player) -> str:
    return f"riot-{player.puuid}"


async def take_snapshots(
    repo,
    riot: RiotClient,
    challenge: Challenge,
    throttle: KeyedThrottle,
    now: Optional[datetime] = None,
    players: Optional[List[Player]] = None,
) -> Tuple[int, int]:
    """
    Record one rank snapshot per active player that has ranked-solo data.

    Returns:
        Tuple of (snapshots inserted, players that failed)
    """
    now = now or datetime.now(timezone.utc)
    if players is None:
        players = await repo.list_players(challenge.id, active_only=True)

    rows: List[RankSnapshot] = []
    errors = 0
    for player in players:
        if not player.puuid:
            continue
        try:
            await throttle.wait(throttle_key(player))
            entry = await riot.get_ranked_solo_entry(player.region, player.puuid)
        except Exception as e:
            logger.error(f"Error fetching snapshot for player {player.id}: {e}")
            errors += 1
            continue
        if entry is None:
            logger.info(f"No ranked data for {player.name}")
            continue
        rows.append(
            RankSnapshot(
                challenge_id=challenge.id,
                player_id=player.id,
                tier=entry.tier,
                division=entry.division,
                lp=entry.lp,
                timestamp=now,
            )
        )

    inserted = await repo.insert_snapshots(rows)
    return inserted, errors


async def sync_player_matches(
    repo,
    riot: RiotClient,
    challenge: Challenge,
    player: Player,
    throttle: KeyedThrottle,
) -> int:
    """
    Store ranked-solo outcomes played inside the challenge window.

    Only matches that started after the latest stored one are requested.
    Remakes are skipped. Returns the number of new results stored.
    """
    start = ensure_aware_utc(challenge.start_at)
    latest = await repo.latest_match_time(challenge.id, player.id)
    since = max(start, ensure_aware_utc(latest)) if latest else start
    end = ensure_aware_utc(challenge.end_at) if challenge.end_at else None

    await throttle.wait(throttle_key(player))
    match_ids = await riot.get_ranked_match_ids(player.region, player.puuid, start_time=since)

    stored = 0
    for match_id in match_ids:
        await throttle.wait(throttle_key(player))
        outcome = await riot.get_match_outcome(player.region, match_id, player.puuid)
        if outcome is None:
            continue
        if outcome.timestamp < start or (end is not None and outcome.timestamp > end):
            continue
        added = await repo.insert_match(
            MatchResult(
                challenge_id=challenge.id,
                player_id=player.id,
                match_id=outcome.match_id,
                result=outcome.result,
                timestamp=outcome.timestamp,
            )
        )
        if added:
            stored += 1
    return stored


async def sync_all_challenges(
    repo,
    riot: RiotClient,
    throttle: KeyedThrottle,
    now: Optional[datetime] = None,
) -> SyncReport:
    """Snapshot ranks and pull new matches for every currently running challenge."""
    now = now or datetime.now(timezone.utc)
    report = SyncReport(timestamp=now)
    logger.info("Sync started")

    for challenge in await repo.list_active_challenges(now):
        try:
            players = await repo.list_players(challenge.id, active_only=True)
            inserted, errors = await take_snapshots(
                repo, riot, challenge, throttle, now=now, players=players
            )
            report.inserted += inserted
            report.errors += errors

            for player in players:
                if not player.puuid:
                    continue
                try:
                    report.matches += await sync_player_matches(repo, riot, challenge, player, throttle)
                except Exception as e:
                    logger.error(f"Error syncing matches for {player.name}: {e}")
                    report.errors += 1
        except Exception as e:
            logger.error(f"Error in challenge {challenge.id}: {e}")
            report.errors += 1

    logger.info(
        f"Sync completed: {report.inserted} snapshots, {report.matches} matches, {report.errors} errors"
    )
    return report
