"""
Shared fixtures: an in-memory stand-in for ChallengeRepository, a scripted
Riot client, and an HTTP client bound to the app with both swapped in.
"""

import os

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB", "rankchallenge_test")
os.environ.setdefault("JWT_SECRET", "test-secret-test-secret-test-secret-0123")
os.environ.setdefault("CRON_SECRET", "cron-secret-for-tests")
os.environ.setdefault("RIOT_API_KEY", "RGAPI-test")
os.environ.setdefault("RATE_LIMIT", "100000")

from typing import Dict, List, Optional, Set, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.exceptions import DuplicateResourceError, RiotAPIError
from api.services.riot import MatchOutcome, RankedEntry, RiotAccount, Summoner
from api.services.throttle import KeyedThrottle
from helpers import T0, at
from shared.models import Challenge, MatchResult, Player, RankSnapshot
from shared.models.challenge import ensure_aware_utc


class InMemoryRepository:
    def __init__(self):
        self.challenges: Dict[str, Challenge] = {}
        self.players: List[Player] = []
        self.snapshots: List[RankSnapshot] = []
        self.matches: List[MatchResult] = []
        self.broken_players: Set[str] = set()

    async def list_challenges(self, user_id=None):
        return [
            c for c in self.challenges.values()
            if c.visibility == "public" or c.can_manage(user_id)
        ]

    async def list_active_challenges(self, now):
        return [c for c in self.challenges.values() if c.is_active(now)]

    async def get_challenge(self, challenge_id):
        return self.challenges.get(challenge_id)

    async def create_challenge(self, challenge):
        self.challenges[challenge.id] = challenge
        return challenge

    async def update_challenge(self, challenge_id, updates):
        current = self.challenges.get(challenge_id)
        if current is None:
            return None
        self.challenges[challenge_id] = current.model_copy(update=updates)
        return self.challenges[challenge_id]

    async def delete_challenge(self, challenge_id):
        if self.challenges.pop(challenge_id, None) is None:
            return False
        self.players = [p for p in self.players if p.challenge_id != challenge_id]
        self.snapshots = [s for s in self.snapshots if s.challenge_id != challenge_id]
        self.matches = [m for m in self.matches if m.challenge_id != challenge_id]
        return True

    async def list_players(self, challenge_id, active_only=True):
        return [
            p for p in self.players
            if p.challenge_id == challenge_id and (p.active or not active_only)
        ]

    async def get_player(self, challenge_id, player_id):
        return next((p for p in self.players if p.challenge_id == challenge_id and p.id == player_id), None)

    async def find_player_by_puuid(self, challenge_id, puuid):
        return next((p for p in self.players if p.challenge_id == challenge_id and p.puuid == puuid), None)

    async def insert_player(self, player):
        if await self.find_player_by_puuid(player.challenge_id, player.puuid):
            raise DuplicateResourceError("Player", player.puuid)
        self.players.append(player)
        return player

    async def set_player_active(self, challenge_id, player_id, active):
        for i, p in enumerate(self.players):
            if p.challenge_id == challenge_id and p.id == player_id:
                self.players[i] = p.model_copy(update={"active": active})
                return True
        return False

    async def delete_player(self, challenge_id, player_id):
        before = len(self.players)
        self.players = [p for p in self.players if not (p.challenge_id == challenge_id and p.id == player_id)]
        self.snapshots = [s for s in self.snapshots if s.player_id != player_id]
        self.matches = [m for m in self.matches if m.player_id != player_id]
        return len(self.players) < before

    async def insert_snapshots(self, snapshots):
        self.snapshots.extend(snapshots)
        return len(snapshots)

    def _player_snapshots(self, challenge_id, player_id):
        if player_id in self.broken_players:
            raise RuntimeError("storage unavailable")
        rows = [s for s in self.snapshots if s.challenge_id == challenge_id and s.player_id == player_id]
        return sorted(rows, key=lambda s: ensure_aware_utc(s.timestamp))

    async def first_snapshot(self, challenge_id, player_id):
        rows = self._player_snapshots(challenge_id, player_id)
        return rows[0] if rows else None

    async def last_snapshot(self, challenge_id, player_id):
        rows = self._player_snapshots(challenge_id, player_id)
        return rows[-1] if rows else None

    async def list_snapshots(self, challenge_id, player_id=None):
        rows = [s for s in self.snapshots if s.challenge_id == challenge_id]
        if player_id:
            rows = [s for s in rows if s.player_id == player_id]
        return sorted(rows, key=lambda s: ensure_aware_utc(s.timestamp))

    async def recent_matches(self, challenge_id, player_id, limit):
        rows = [m for m in self.matches if m.challenge_id == challenge_id and m.player_id == player_id]
        rows = list(reversed(sorted(rows, key=lambda m: ensure_aware_utc(m.timestamp))))
        return rows[:limit]

    async def latest_match_time(self, challenge_id, player_id):
        latest = await self.recent_matches(challenge_id, player_id, 1)
        return latest[0].timestamp if latest else None

    async def insert_match(self, match):
        for m in self.matches:
            if (m.challenge_id, m.player_id, m.match_id) == (match.challenge_id, match.player_id, match.match_id):
                return False
        self.matches.append(match)
        return True

    # helpers for building fixtures

    def add_challenge(self, **kwargs) -> Challenge:
        data = {"name": "Winter climb", "owner_id": "owner", "start_at": T0}
        data.update(kwargs)
        challenge = Challenge(**data)
        self.challenges[challenge.id] = challenge
        return challenge

    def add_player(self, challenge: Challenge, name: str, **kwargs) -> Player:
        data = {
            "challenge_id": challenge.id,
            "puuid": f"puuid-{name}-0000000000000000",
            "region": "EUW",
            "name": name,
        }
        data.update(kwargs)
        player = Player(**data)
        self.players.append(player)
        return player

    def add_snapshot(self, player: Player, tier: str, division: Optional[str], lp: int, minute: int = 0):
        self.snapshots.append(
            RankSnapshot(
                challenge_id=player.challenge_id,
                player_id=player.id,
                tier=tier,
                division=division,
                lp=lp,
                timestamp=at(minute),
            )
        )

    def add_results(self, player: Player, wins: int = 0, losses: int = 0, start_minute: int = 0):
        minute = start_minute
        for result in ["WIN"] * wins + ["LOSS"] * losses:
            self.matches.append(
                MatchResult(
                    challenge_id=player.challenge_id,
                    player_id=player.id,
                    match_id=f"EUW1_{player.id}_{minute}",
                    result=result,
                    timestamp=at(minute),
                )
            )
            minute += 1


class FakeRiotClient:
    """Scripted replacement for RiotClient keyed by PUUID / Riot ID."""

    def __init__(self):
        self.accounts: Dict[Tuple[str, str], RiotAccount] = {}
        self.summoners: Dict[str, Summoner] = {}
        self.entries: Dict[str, RankedEntry] = {}
        self.match_ids: Dict[str, List[str]] = {}
        self.outcomes: Dict[Tuple[str, str], MatchOutcome] = {}
        self.failing: Set[str] = set()
        self.calls: List[Tuple[str, str]] = []

    def _check(self, method: str, key: str):
        self.calls.append((method, key))
        if key in self.failing:
            raise RiotAPIError("Riot API request failed with status 500", upstream_status=500)

    async def get_account_by_riot_id(self, region, game_name, tag_line):
        self._check("account", f"{game_name}#{tag_line}")
        return self.accounts.get((game_name, tag_line))

    async def get_summoner_by_name(self, region, summoner_name):
        self._check("summoner_by_name", summoner_name)
        return next((s for s in self.summoners.values() if s.name == summoner_name), None)

    async def get_summoner_by_puuid(self, region, puuid):
        self._check("summoner", puuid)
        return self.summoners.get(puuid)

    async def get_ranked_solo_entry(self, region, puuid):
        self._check("entry", puuid)
        return self.entries.get(puuid)

    async def get_ranked_match_ids(self, region, puuid, start_time=None, count=100):
        self._check("match_ids", puuid)
        return list(self.match_ids.get(puuid, []))

    async def get_match_outcome(self, region, match_id, puuid):
        self._check("match", match_id)
        return self.outcomes.get((match_id, puuid))


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def riot() -> FakeRiotClient:
    return FakeRiotClient()


@pytest.fixture
def throttle() -> KeyedThrottle:
    return KeyedThrottle(min_interval=0.1, capacity=100, sleep=_no_sleep)


@pytest_asyncio.fixture
async def client(repo, riot, throttle):
    from api.main import app
    from api.repository import get_repository
    from api.services.riot import get_riot_client
    from api.services.throttle import get_riot_throttle

    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_riot_client] = lambda: riot
    app.dependency_overrides[get_riot_throttle] = lambda: throttle
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
