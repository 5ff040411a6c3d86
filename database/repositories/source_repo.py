"""Source repository: read access for the fetcher plus default source seeding."""
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.utils import generate_source_id, get_utc_now


DEFAULT_SOURCES = [
    {
        "name": "TechCrunch",
        "website_url": "https://techcrunch.com",
        "feed_url": "https://techcrunch.com/feed/"
    },
    {
        "name": "BBC News",
        "website_url": "https://www.bbc.com/news",
        "feed_url": "http://feeds.bbci.co.uk/news/rss.xml"
    },
    {
        "name": "The Verge",
        "website_url": "https://www.theverge.com",
        "feed_url": "https://www.theverge.com/rss/index.xml"
    },
    {
        "name": "Ars Technica",
        "website_url": "https://arstechnica.com",
        "feed_url": "http://feeds.arstechnica.com/arstechnica/index"
    }
]


class SourceRepository:
    """Repository for Source lookups."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.sources

    async def get_source(self, source_id: str) -> Optional[Dict[str, Any]]:
        """Get a source by ID."""
        return await self.collection.find_one({"_id": source_id})

    async def get_active_sources(self) -> List[Dict[str, Any]]:
        """List active sources that have a feed URL."""
        cursor = self.collection.find({
            "is_active": True,
            "feed_url": {"$nin": [None, ""]}
        })
        return await cursor.to_list(length=None)

    async def count_sources(self) -> int:
        return await self.collection.count_documents({})

    async def ensure_default_sources(self) -> int:
        """Insert the built-in sources that are missing. Returns how many were added."""
        added = 0
        for source in DEFAULT_SOURCES:
            now = get_utc_now()
            result = await self.collection.update_one(
                {"name": source["name"]},
                {
                    "$setOnInsert": {
                        "_id": generate_source_id(),
                        "website_url": source["website_url"],
                        "feed_url": source["feed_url"],
                        "is_active": True,
                        "is_default": True,
                        "owner_user_id": None,
                        "created_at": now,
                        "updated_at": now
                    }
                },
                upsert=True
            )
            if result.upserted_id is not None:
                added += 1
        return added
