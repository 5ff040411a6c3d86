"""Article repository for CRUD operations on Articles collection."""
import re
from datetime import datetime
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from shared.utils import generate_article_id, get_utc_now, canonical_url


class ArticleRepository:
    """Repository for Article CRUD operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.articles

    def build_article(
        self,
        url: str,
        source_id: str,
        title: str,
        description: str = "",
        original_content: str = "",
        published_at: Optional[datetime] = None,
        categories: Optional[List[str]] = None,
        image_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build a new, not yet summarized article document."""
        now = get_utc_now()
        return {
            "_id": generate_article_id(),
            "title": title,
            "canonical_url": canonical_url(url),
            "source_id": source_id,
            "categories": categories or [],
            "image_url": image_url,
            "description": description,
            "original_content": original_content,
            "published_at": published_at or now,
            "is_summarized": False,
            "created_at": now,
            "updated_at": now
        }

    async def insert_if_absent(self, article: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Insert the article unless its canonical URL is already stored.

        Returns the inserted document, or None when an article with the same
        URL exists (including one inserted concurrently by another fetch).
        """
        url = article["canonical_url"]
        on_insert = {key: value for key, value in article.items() if key != "canonical_url"}

        try:
            result = await self.collection.update_one(
                {"canonical_url": url},
                {"$setOnInsert": on_insert},
                upsert=True
            )
        except DuplicateKeyError:
            # Two upserts raced on the unique index; the other one won
            return None

        if result.upserted_id is None:
            return None
        return article

    async def get_article(self, article_id: str) -> Optional[Dict[str, Any]]:
        """Get an article by ID."""
        return await self.collection.find_one({"_id": article_id})

    async def get_article_by_url(self, url: str) -> Optional[Dict[str, Any]]:
        """Get an article by canonical URL."""
        return await self.collection.find_one({"canonical_url": canonical_url(url)})

    async def article_exists(self, url: str) -> bool:
        """Check if an article with the given URL exists."""
        count = await self.collection.count_documents({"canonical_url": canonical_url(url)}, limit=1)
        return count > 0

    async def get_unsummarized_articles(self) -> List[Dict[str, Any]]:
        """List every article still waiting for a summary."""
        cursor = self.collection.find({"is_summarized": False}).sort("published_at", -1)
        return await cursor.to_list(length=None)

    async def get_pending_with_content(self, limit: int) -> List[Dict[str, Any]]:
        """Get up to `limit` unsummarized articles that have content to summarize."""
        cursor = self.collection.find({
            "is_summarized": False,
            "original_content": {"$exists": True, "$ne": ""}
        }).limit(limit)
        return await cursor.to_list(length=limit)

    async def mark_as_summarized(self, article_id: str) -> Optional[Dict[str, Any]]:
        """Set the summarized flag. Safe to call repeatedly; returns None for unknown IDs."""
        if not article_id or not isinstance(article_id, str):
            return None

        return await self.collection.find_one_and_update(
            {"_id": article_id},
            {
                "$set": {
                    "is_summarized": True,
                    "updated_at": get_utc_now()
                }
            },
            return_document=ReturnDocument.AFTER
        )

    async def get_articles_by_interests(
        self,
        interests: List[str],
        page: int = 1,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """List summarized articles matching any of the reader's interests, newest first."""
        cleaned = [i.strip() for i in interests if isinstance(i, str) and i.strip()]
        if not cleaned:
            return []

        page = max(1, page)
        limit = max(1, min(100, limit))
        pattern = "|".join(re.escape(interest) for interest in cleaned)

        query = {
            "$or": [
                {"categories": {"$in": cleaned}},
                {"title": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}}
            ],
            "is_summarized": True
        }

        cursor = (
            self.collection.find(query)
            .sort("published_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)
