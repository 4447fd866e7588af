"""
Leaderboard aggregation.

Turns each active player's first/last rank snapshot and recent match results
into a LeaderboardRow, then orders the rows under the challenge's ranking
rule. Nothing here is cached: every call recomputes from storage.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from api.exceptions import ChallengeNotFoundError
from api.services.ranking import ordinal_from_rank
from shared.models import (
    Challenge,
    FreshRankScore,
    Leaderboard,
    LeaderboardRow,
    LpGainedScore,
    MatchResult,
    Player,
    RankSnapshot,
    WinsLossesScore,
)

logger = logging.getLogger("rankchallenge")

FRESH_RANK = "fresh_rank"
WINS_LOSSES = "wins_losses"
LP_GAINED = "lp_gained"

MATCH_WINDOW = 100
NO_DATA = "No data"
NOT_AVAILABLE = "N/A"


def resolve_rule(ranking_rule: Optional[str]) -> str:
    """Map a stored ranking rule to one of the three scoring paths."""
    if ranking_rule in (FRESH_RANK, WINS_LOSSES):
        return ranking_rule
    return LP_GAINED


def count_results(matches: Iterable[MatchResult]) -> Tuple[int, int]:
    wins = losses = 0
    for match in matches:
        if match.result == "WIN":
            wins += 1
        elif match.result == "LOSS":
            losses += 1
    return wins, losses


def winrate(wins: int, losses: int) -> float:
    games = wins + losses
    return (wins / games) * 100 if games > 0 else 0.0


def lp_delta(first: Optional[RankSnapshot], last: Optional[RankSnapshot]) -> int:
    if first is None or last is None:
        return 0
    return (last.lp or 0) - (first.lp or 0)


def format_lp_delta(delta: int) -> str:
    return f"{'+' if delta > 0 else ''}{delta} LP"


def build_row(
    player: Player,
    rule: str,
    first: Optional[RankSnapshot],
    last: Optional[RankSnapshot],
    matches: List[MatchResult],
) -> LeaderboardRow:
    """Summarise one player's challenge history under a ranking rule."""
    wins, losses = count_results(matches)
    gained = lp_delta(first, last)
    rule = resolve_rule(rule)

    if rule == FRESH_RANK:
        if last is not None:
            score = FreshRankScore(
                ordinal=ordinal_from_rank(last.tier, last.division, last.lp),
                tier=last.tier,
                division=last.division,
                lp=last.lp,
            )
            label = f"{last.describe()} ({last.lp} LP)"
        else:
            score = FreshRankScore()
            label = NO_DATA
    elif rule == WINS_LOSSES:
        rate = winrate(wins, losses)
        score = WinsLossesScore(wins=wins, losses=losses, winrate=rate)
        label = f"{wins}W {losses}L ({rate:.1f}%)"
    else:
        score = LpGainedScore(lp_gained=gained)
        label = format_lp_delta(gained)

    initial_rank = first.describe() if first else NOT_AVAILABLE
    return LeaderboardRow(
        player_id=player.id,
        name=player.name,
        team=player.team or None,
        puuid=player.puuid or None,
        wins=wins,
        losses=losses,
        lp_gained=gained,
        score=score,
        rank_label=label,
        main_rank=initial_rank,
        initial_rank=initial_rank,
        final_rank=last.describe() if last else NOT_AVAILABLE,
    )


def _wins_losses_key(row: LeaderboardRow) -> Tuple[int, float, int]:
    games = row.wins + row.losses
    rate = row.wins / games if games > 0 else 0.0
    return row.wins, rate, games


def sort_rows(rows: List[LeaderboardRow], ranking_rule: Optional[str]) -> List[LeaderboardRow]:
    """
    Order rows best first.

    Wins/losses compares wins, then winrate, then games played; the composite
    ordering key is not used for that. Every other rule sorts on the key.
    Sorting is stable, so equal rows keep roster order.
    """
    if resolve_rule(ranking_rule) == WINS_LOSSES:
        return sorted(rows, key=_wins_losses_key, reverse=True)
    return sorted(rows, key=lambda row: row.ordering_key, reverse=True)


async def _player_row(repo, challenge: Challenge, player: Player, match_window: int) -> LeaderboardRow:
    first = await repo.first_snapshot(challenge.id, player.id)
    last = await repo.last_snapshot(challenge.id, player.id)
    matches = await repo.recent_matches(challenge.id, player.id, match_window)
    return build_row(player, challenge.ranking_rule, first, last, matches)


async def compute_leaderboard(
    repo, challenge_id: str, match_window: int = MATCH_WINDOW
) -> Leaderboard:
    """
    Build the leaderboard for a challenge.

    Players are processed concurrently. A failure for one player is logged
    and that player is left out; only a missing challenge fails the request.

    Raises:
        ChallengeNotFoundError: if the challenge does not exist
    """
    challenge = await repo.get_challenge(challenge_id)
    if challenge is None:
        raise ChallengeNotFoundError(challenge_id)

    players = [p for p in await repo.list_players(challenge_id, active_only=True) if p.active]
    results = await asyncio.gather(
        *(_player_row(repo, challenge, player, match_window) for player in players),
        return_exceptions=True,
    )

    rows: List[LeaderboardRow] = []
    failures: List[Tuple[str, BaseException]] = []
    for player, result in zip(players, results):
        if isinstance(result, Exception):
            failures.append((player.id, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            rows.append(result)

    for player_id, error in failures:
        logger.error(f"Leaderboard row failed for player {player_id} in challenge {challenge_id}: {error}")

    return Leaderboard(
        challenge_id=challenge.id,
        ranking_rule=challenge.ranking_rule,
        players=sort_rows(rows, challenge.ranking_rule),
    )


def build_lp_history(snapshots: List[RankSnapshot], names: Dict[str, str]) -> List[dict]:
    """
    Group snapshots into a chart-ready LP timeline.

    One entry per minute, keyed by player display name. Snapshots must be
    ordered oldest first; a later snapshot in the same minute wins.
    """
    timeline: Dict[str, dict] = defaultdict(dict)
    for snap in snapshots:
        time = snap.timestamp.strftime("%Y-%m-%dT%H:%M")
        entry = timeline[time]
        entry["time"] = time
        entry[names.get(snap.player_id, "Unknown")] = snap.lp
    return list(timeline.values())
