from motor.motor_asyncio import AsyncIOMotorClient

from api.config import settings

client = AsyncIOMotorClient(
    settings.mongodb_uri,
    tz_aware=True,
    maxPoolSize=settings.mongo_max_pool_size,
    minPoolSize=settings.mongo_min_pool_size,
    serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
)
db = client[settings.mongodb_db]

def get_db():
    return db
