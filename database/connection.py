"""MongoDB and Redis connections shared by the API and the consumer."""
import logging
from typing import Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel
import redis.asyncio as redis
from shared.config import settings

logger = logging.getLogger(__name__)


# The unique indexes back insert_if_absent in the repositories
COLLECTION_INDEXES: Dict[str, List[IndexModel]] = {
    "sources": [
        IndexModel([("name", ASCENDING)], unique=True),
        IndexModel([("is_active", ASCENDING)]),
    ],
    "articles": [
        IndexModel([("canonical_url", ASCENDING)], unique=True),
        IndexModel([("source_id", ASCENDING)]),
        IndexModel([("is_summarized", ASCENDING), ("published_at", DESCENDING)]),
        IndexModel([("published_at", DESCENDING)]),
        IndexModel([("categories", ASCENDING)]),
    ],
    "summaries": [
        IndexModel([("article_id", ASCENDING)], unique=True),
        IndexModel([("created_at", DESCENDING)]),
        IndexModel([("keywords", ASCENDING)]),
    ],
}


class DatabaseConnection:
    """Process-wide Motor and Redis clients."""

    _mongo_client: Optional[AsyncIOMotorClient] = None
    _redis_client: Optional[redis.Redis] = None
    _db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def init_mongo(cls) -> AsyncIOMotorDatabase:
        """Connect to MongoDB once and make sure the indexes exist."""
        if cls._mongo_client is None:
            cls._mongo_client = AsyncIOMotorClient(settings.mongo_url, tz_aware=True)
            cls._db = cls._mongo_client[settings.mongo_db_name]
            await cls._ensure_indexes(cls._db)
            logger.info(f"Connected to MongoDB database {settings.mongo_db_name}")
        return cls._db

    @staticmethod
    async def _ensure_indexes(db: AsyncIOMotorDatabase):
        for collection, indexes in COLLECTION_INDEXES.items():
            await db[collection].create_indexes(indexes)

    @classmethod
    async def get_mongo_db(cls) -> AsyncIOMotorDatabase:
        return cls._db if cls._db is not None else await cls.init_mongo()

    @classmethod
    async def init_redis(cls) -> redis.Redis:
        """Create the Redis client (string responses, used for JSON job payloads)."""
        if cls._redis_client is None:
            cls._redis_client = redis.from_url(settings.redis_url, decode_responses=True)
        return cls._redis_client

    @classmethod
    async def get_redis(cls) -> redis.Redis:
        return cls._redis_client if cls._redis_client is not None else await cls.init_redis()

    @classmethod
    async def ping_mongo(cls) -> bool:
        """True when MongoDB answers a ping."""
        if cls._mongo_client is None:
            return False
        try:
            await cls._mongo_client.admin.command("ping")
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    @classmethod
    async def close_connections(cls):
        if cls._mongo_client is not None:
            cls._mongo_client.close()
            cls._mongo_client = None
            cls._db = None
        if cls._redis_client is not None:
            await cls._redis_client.aclose()
            cls._redis_client = None


async def get_db() -> AsyncIOMotorDatabase:
    """FastAPI dependency for the MongoDB database."""
    return await DatabaseConnection.get_mongo_db()


async def get_redis() -> redis.Redis:
    """FastAPI dependency for the Redis client."""
    return await DatabaseConnection.get_redis()
