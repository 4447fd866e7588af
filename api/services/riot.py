"""
Thin async client for the Riot Games API.

Only the calls the tracker needs: identity resolution (account-v1 and
summoner-v4), the ranked-solo league entry, and ranked match outcomes
(match-v5). A 404 means "no such thing" and returns None; every other failure
raises RiotAPIError.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from api.config import settings
from api.exceptions import RiotAPIError, RiotAPIKeyError

logger = logging.getLogger("rankchallenge")

RANKED_SOLO_QUEUE = "RANKED_SOLO_5x5"
RANKED_SOLO_QUEUE_ID = 420

PLATFORMS = {
    "EUW": "euw1",
    "EUNE": "eun1",
    "NA": "na1",
    "KR": "kr",
    "JP": "jp1",
    "BR": "br1",
    "LAN": "la1",
    "LAS": "la2",
    "OCE": "oc1",
    "TR": "tr1",
    "RU": "ru",
}

# Regional clusters used by match-v5
MATCH_REGIONS = {
    "EUW": "europe",
    "EUNE": "europe",
    "TR": "europe",
    "RU": "europe",
    "NA": "americas",
    "BR": "americas",
    "LAN": "americas",
    "LAS": "americas",
    "KR": "asia",
    "JP": "asia",
    "OCE": "sea",
}


def platform_for(region: str) -> str:
    try:
        return PLATFORMS[region]
    except KeyError:
        raise ValueError(f"Unknown region '{region}'")


def match_region_for(region: str) -> str:
    try:
        return MATCH_REGIONS[region]
    except KeyError:
        raise ValueError(f"Unknown region '{region}'")


def account_region_for(region: str) -> str:
    # account-v1 is served by americas, asia and europe only
    cluster = match_region_for(region)
    return "americas" if cluster == "sea" else cluster


class RiotAccount(BaseModel):
    puuid: str
    gameName: Optional[str] = None
    tagLine: Optional[str] = None

    @property
    def riot_id(self) -> str:
        return f"{self.gameName}#{self.tagLine}"


class Summoner(BaseModel):
    puuid: str
    name: Optional[str] = None
    profileIconId: Optional[int] = None


class RankedEntry(BaseModel):
    tier: str
    division: Optional[str] = None
    lp: int = 0


class MatchOutcome(BaseModel):
    match_id: str
    result: str
    timestamp: datetime


class RiotClient:
    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {"X-Riot-Token": self.api_key}

    async def _get(self, host: str, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        url = f"https://{host}.api.riotgames.com{path}"
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.get(url, headers=self.headers, params=params)
            except httpx.RequestError as e:
                raise RiotAPIError(f"Failed to reach the Riot API: {e}")

        if response.status_code == 404:
            return None
        if response.status_code == 403:
            raise RiotAPIKeyError()
        if response.is_error:
            logger.warning(f"Riot API {path} failed: {response.status_code} {response.text[:200]}")
            raise RiotAPIError(
                f"Riot API request failed with status {response.status_code}",
                upstream_status=response.status_code,
            )
        return response.json()

    async def get_account_by_riot_id(self, region: str, game_name: str, tag_line: str) -> Optional[RiotAccount]:
        data = await self._get(
            account_region_for(region),
            f"/riot/account/v1/accounts/by-riot-id/{quote(game_name, safe='')}/{quote(tag_line, safe='')}",
        )
        return RiotAccount(**data) if data else None

    async def get_summoner_by_name(self, region: str, summoner_name: str) -> Optional[Summoner]:
        data = await self._get(
            platform_for(region),
            f"/lol/summoner/v4/summoners/by-name/{quote(summoner_name.strip(), safe='')}",
        )
        return Summoner(**data) if data else None

    async def get_summoner_by_puuid(self, region: str, puuid: str) -> Optional[Summoner]:
        data = await self._get(
            platform_for(region),
            f"/lol/summoner/v4/summoners/by-puuid/{quote(puuid, safe='')}",
        )
        return Summoner(**data) if data else None

    async def get_ranked_solo_entry(self, region: str, puuid: str) -> Optional[RankedEntry]:
        entries = await self._get(
            platform_for(region),
            f"/lol/league/v4/entries/by-puuid/{quote(puuid, safe='')}",
        )
        for entry in entries or []:
            if entry.get("queueType") != RANKED_SOLO_QUEUE:
                continue
            try:
                lp = int(entry.get("leaguePoints") or 0)
            except (TypeError, ValueError):
                lp = 0
            return RankedEntry(
                tier=str(entry.get("tier") or "").upper(),
                division=str(entry.get("rank") or "").upper() or None,
                lp=max(lp, 0),
            )
        return None

    async def get_ranked_match_ids(
        self, region: str, puuid: str, start_time: Optional[datetime] = None, count: int = 100
    ) -> List[str]:
        params: Dict[str, Any] = {"queue": RANKED_SOLO_QUEUE_ID, "count": count}
        if start_time is not None:
            params["startTime"] = int(start_time.timestamp())
        data = await self._get(
            match_region_for(region),
            f"/lol/match/v5/matches/by-puuid/{quote(puuid, safe='')}/ids",
            params=params,
        )
        return list(data or [])

    async def get_match_outcome(self, region: str, match_id: str, puuid: str) -> Optional[MatchOutcome]:
        """WIN/LOSS for `puuid` in a match; None for remakes or unknown matches."""
        data = await self._get(match_region_for(region), f"/lol/match/v5/matches/{quote(match_id, safe='')}")
        if not data:
            return None
        info = data.get("info") or {}
        participant = next(
            (p for p in info.get("participants", []) if p.get("puuid") == puuid),
            None,
        )
        if participant is None or participant.get("gameEndedInEarlySurrender"):
            return None
        ended_ms = info.get("gameEndTimestamp") or info.get("gameStartTimestamp") or info.get("gameCreation") or 0
        return MatchOutcome(
            match_id=match_id,
            result="WIN" if participant.get("win") else "LOSS",
            timestamp=datetime.fromtimestamp(ended_ms / 1000, tz=timezone.utc),
        )


riot_client = RiotClient(settings.riot_api_key, timeout=settings.riot_timeout_seconds)


def get_riot_client() -> RiotClient:
    return riot_client
