"""
Create collections and indexes for the challenge tracker.

Run once against a fresh database:  python -m db.init_db
"""

from pymongo import MongoClient, ASCENDING, DESCENDING
import os
import sys
import time

from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGODB_URI")
MONGO_DB = os.getenv("MONGODB_DB", "rankchallenge")

COLLECTIONS = ["challenges", "players", "rank_snapshots", "player_matches"]


def wait_for_mongodb(max_retries=5, retry_delay=5):
    for attempt in range(max_retries):
        try:
            client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=5000)
            client.server_info()
            return client
        except Exception as e:
            if attempt < max_retries - 1:
                print(f"Attempt {attempt + 1}/{max_retries}: MongoDB connection failed: {str(e)}")
                print(f"Retrying in {retry_delay} seconds...")
                time.sleep(retry_delay)
            else:
                raise Exception(f"Could not connect to MongoDB after maximum retries: {str(e)}")


def create_indexes(db):
    db.challenges.create_index([("id", ASCENDING)], unique=True)
    db.challenges.create_index([("owner_id", ASCENDING)])
    db.challenges.create_index([("visibility", ASCENDING), ("created_at", DESCENDING)])
    db.challenges.create_index([("start_at", ASCENDING), ("end_at", ASCENDING)])

    db.players.create_index([("id", ASCENDING)], unique=True)
    # one roster entry per Riot account per challenge
    db.players.create_index([("challenge_id", ASCENDING), ("puuid", ASCENDING)], unique=True)
    db.players.create_index([("challenge_id", ASCENDING), ("active", ASCENDING)])

    db.rank_snapshots.create_index(
        [("challenge_id", ASCENDING), ("player_id", ASCENDING), ("timestamp", ASCENDING)]
    )

    db.player_matches.create_index(
        [("challenge_id", ASCENDING), ("player_id", ASCENDING), ("match_id", ASCENDING)],
        unique=True,
    )
    db.player_matches.create_index(
        [("challenge_id", ASCENDING), ("player_id", ASCENDING), ("timestamp", DESCENDING)]
    )


def main():
    try:
        print(f"Attempting to connect to MongoDB with URI: {MONGO_URI}")
        client = wait_for_mongodb()
        db = client[MONGO_DB]

        for col in COLLECTIONS:
            if col not in db.list_collection_names():
                db.create_collection(col)
                print(f"Created collection: {col}")

        create_indexes(db)
        print("Database indexes created successfully.")
    except Exception as e:
        print(f"Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
