"""
MongoDB access for challenges, rosters, rank snapshots and match results.

Route handlers and services only talk to ChallengeRepository, never to the
collections directly.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from api.db import get_db
from api.exceptions import DuplicateResourceError
from shared.models import Challenge, MatchResult, Player, RankSnapshot

# _id is monotonic per insert, so it breaks timestamp ties by insertion order.
OLDEST_FIRST = [("timestamp", ASCENDING), ("_id", ASCENDING)]
NEWEST_FIRST = [("timestamp", DESCENDING), ("_id", DESCENDING)]


class ChallengeRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    # Challenges

    async def list_challenges(self, user_id: Optional[str] = None) -> List[Challenge]:
        query = {"visibility": "public"}
        if user_id:
            query = {
                "$or": [
                    {"visibility": "public"},
                    {"owner_id": user_id},
                    {"admin_ids": user_id},
                ]
            }
        cursor = self.db.challenges.find(query).sort("created_at", DESCENDING)
        return [Challenge(**doc) async for doc in cursor]

    async def list_active_challenges(self, now: datetime) -> List[Challenge]:
        cursor = self.db.challenges.find(
            {
                "start_at": {"$lte": now},
                "$or": [{"end_at": None}, {"end_at": {"$gte": now}}],
            }
        )
        return [Challenge(**doc) async for doc in cursor]

    async def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        doc = await self.db.challenges.find_one({"id": challenge_id})
        return Challenge(**doc) if doc else None

    async def create_challenge(self, challenge: Challenge) -> Challenge:
        await self.db.challenges.insert_one(challenge.model_dump())
        return challenge

    async def update_challenge(self, challenge_id: str, updates: dict) -> Optional[Challenge]:
        if updates:
            result = await self.db.challenges.update_one({"id": challenge_id}, {"$set": updates})
            if result.matched_count == 0:
                return None
        return await self.get_challenge(challenge_id)

    async def delete_challenge(self, challenge_id: str) -> bool:
        result = await self.db.challenges.delete_one({"id": challenge_id})
        if result.deleted_count == 0:
            return False
        await self.db.players.delete_many({"challenge_id": challenge_id})
        await self.db.rank_snapshots.delete_many({"challenge_id": challenge_id})
        await self.db.player_matches.delete_many({"challenge_id": challenge_id})
        return True

    # Roster

    async def list_players(self, challenge_id: str, active_only: bool = True) -> List[Player]:
        query = {"challenge_id": challenge_id}
        if active_only:
            query["active"] = True
        cursor = self.db.players.find(query).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
        return [Player(**doc) async for doc in cursor]

    async def get_player(self, challenge_id: str, player_id: str) -> Optional[Player]:
        doc = await self.db.players.find_one({"challenge_id": challenge_id, "id": player_id})
        return Player(**doc) if doc else None

    async def find_player_by_puuid(self, challenge_id: str, puuid: str) -> Optional[Player]:
        doc = await self.db.players.find_one({"challenge_id": challenge_id, "puuid": puuid})
        return Player(**doc) if doc else None

    async def insert_player(self, player: Player) -> Player:
        try:
            await self.db.players.insert_one(player.model_dump())
        except DuplicateKeyError:
            raise DuplicateResourceError("Player", player.puuid)
        return player

    async def set_player_active(self, challenge_id: str, player_id: str, active: bool) -> bool:
        result = await self.db.players.update_one(
            {"challenge_id": challenge_id, "id": player_id}, {"$set": {"active": active}}
        )
        return result.matched_count > 0

    async def delete_player(self, challenge_id: str, player_id: str) -> bool:
        result = await self.db.players.delete_one({"challenge_id": challenge_id, "id": player_id})
        if result.deleted_count == 0:
            return False
        await self.db.rank_snapshots.delete_many({"challenge_id": challenge_id, "player_id": player_id})
        await self.db.player_matches.delete_many({"challenge_id": challenge_id, "player_id": player_id})
        return True

    # Snapshots

    async def insert_snapshots(self, snapshots: List[RankSnapshot]) -> int:
        if not snapshots:
            return 0
        result = await self.db.rank_snapshots.insert_many([s.model_dump() for s in snapshots])
        return len(result.inserted_ids)

    async def _edge_snapshot(self, challenge_id: str, player_id: str, order) -> Optional[RankSnapshot]:
        cursor = (
            self.db.rank_snapshots.find({"challenge_id": challenge_id, "player_id": player_id})
            .sort(order)
            .limit(1)
        )
        async for doc in cursor:
            return RankSnapshot(**doc)
        return None

    async def first_snapshot(self, challenge_id: str, player_id: str) -> Optional[RankSnapshot]:
        return await self._edge_snapshot(challenge_id, player_id, OLDEST_FIRST)

    async def last_snapshot(self, challenge_id: str, player_id: str) -> Optional[RankSnapshot]:
        return await self._edge_snapshot(challenge_id, player_id, NEWEST_FIRST)

    async def list_snapshots(self, challenge_id: str, player_id: Optional[str] = None) -> List[RankSnapshot]:
        query = {"challenge_id": challenge_id}
        if player_id:
            query["player_id"] = player_id
        cursor = self.db.rank_snapshots.find(query).sort(OLDEST_FIRST)
        return [RankSnapshot(**doc) async for doc in cursor]

    # Matches

    async def recent_matches(self, challenge_id: str, player_id: str, limit: int) -> List[MatchResult]:
        cursor = (
            self.db.player_matches.find({"challenge_id": challenge_id, "player_id": player_id})
            .sort(NEWEST_FIRST)
            .limit(limit)
        )
        return [MatchResult(**doc) async for doc in cursor]

    async def latest_match_time(self, challenge_id: str, player_id: str) -> Optional[datetime]:
        latest = await self.recent_matches(challenge_id, player_id, 1)
        return latest[0].timestamp if latest else None

    async def insert_match(self, match: MatchResult) -> bool:
        """Store a match result; returns False when it was already stored."""
        try:
            await self.db.player_matches.insert_one(match.model_dump())
        except DuplicateKeyError:
            return False
        return True


def get_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> ChallengeRepository:
    return ChallengeRepository(db)
