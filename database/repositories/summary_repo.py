"""Summary repository for CRUD operations on Summaries collection."""
import re
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from shared.utils import generate_summary_id, get_utc_now


MAX_KEYWORDS = 10
DEFAULT_READ_TIME = 2


class SummaryRepository:
    """Repository for Summary CRUD operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.summaries

    async def insert_if_absent(
        self,
        article_id: str,
        text: str,
        keywords: List[str]
    ) -> Optional[Dict[str, Any]]:
        """
        Store the summary for an article unless one already exists.

        Returns the new document, or None if the article already had a summary.
        """
        summary = {
            "_id": generate_summary_id(),
            "text": text,
            "keywords": list(keywords)[:MAX_KEYWORDS],
            "read_count": 0,
            "created_at": get_utc_now()
        }

        try:
            result = await self.collection.update_one(
                {"article_id": article_id},
                {"$setOnInsert": summary},
                upsert=True
            )
        except DuplicateKeyError:
            return None

        if result.upserted_id is None:
            return None

        return {**summary, "article_id": article_id}

    async def get_summary(self, summary_id: str) -> Optional[Dict[str, Any]]:
        """Get a summary by ID."""
        return await self.collection.find_one({"_id": summary_id})

    async def get_by_article(self, article_id: str) -> Optional[Dict[str, Any]]:
        """Get the summary belonging to an article."""
        return await self.collection.find_one({"article_id": article_id})

    async def summary_exists(self, article_id: str) -> bool:
        """Check whether an article already has a summary."""
        count = await self.collection.count_documents({"article_id": article_id}, limit=1)
        return count > 0

    async def increment_read_count(self, summary_id: str) -> Optional[Dict[str, Any]]:
        """Increment the read counter and return the updated summary."""
        return await self.collection.find_one_and_update(
            {"_id": summary_id},
            {"$inc": {"read_count": 1}},
            return_document=ReturnDocument.AFTER
        )

    async def get_summaries_by_interests(
        self,
        interests: List[str],
        page: int = 1,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """List summaries whose keywords or text match any interest, newest first."""
        cleaned = [i.strip() for i in interests if isinstance(i, str) and i.strip()]
        if not cleaned:
            return []

        page = max(1, page)
        limit = max(1, min(100, limit))
        pattern = "|".join(re.escape(interest) for interest in cleaned)

        query = {
            "$or": [
                {"keywords": {"$in": cleaned}},
                {"text": {"$regex": pattern, "$options": "i"}}
            ]
        }

        cursor = (
            self.collection.find(query)
            .sort("created_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def count_summaries(self, since: Optional[datetime] = None) -> int:
        """Count summaries, optionally only those created at or after `since`."""
        query = {"created_at": {"$gte": since}} if since is not None else {}
        return await self.collection.count_documents(query)

    async def get_read_totals(self) -> Dict[str, float]:
        """Average and total read counts across all summaries."""
        cursor = self.collection.aggregate([
            {"$group": {
                "_id": None,
                "avg_reads": {"$avg": "$read_count"},
                "total_reads": {"$sum": "$read_count"},
                "count": {"$sum": 1}
            }}
        ])
        results = await cursor.to_list(length=1)
        if not results:
            return {"avg_reads": 0.0, "total_reads": 0, "count": 0}
        totals = results[0]
        return {
            "avg_reads": totals.get("avg_reads") or 0.0,
            "total_reads": totals.get("total_reads") or 0,
            "count": totals.get("count") or 0
        }

    async def get_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Summary counters for the dashboard.

        Today starts at 00:00 UTC; the week is the last seven days. The
        estimated read time in minutes is 0.3 per average read, at least 1,
        and 2 when there are no summaries yet.
        """
        now = now or get_utc_now()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total = await self.count_summaries()
        today = await self.count_summaries(start_of_day)
        last_week = await self.count_summaries(now - timedelta(days=7))
        totals = await self.get_read_totals()

        if totals["count"]:
            avg_read_time = max(1, round(totals["avg_reads"] * 0.3))
        else:
            avg_read_time = DEFAULT_READ_TIME

        return {
            "total_summaries": total,
            "today_summaries": today,
            "last_week_summaries": last_week,
            "avg_read_time": avg_read_time,
            "total_reads": int(totals["total_reads"]),
            "last_updated": now
        }
