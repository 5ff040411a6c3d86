"""Summary service for direct summarization and summary reads."""
import logging
from typing import Dict, Any, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.repositories.article_repo import ArticleRepository
from database.repositories.source_repo import SourceRepository
from database.repositories.summary_repo import SummaryRepository, DEFAULT_READ_TIME
from shared.exceptions import ArticleNotFoundError
from shared.summarizer import SummarizationGateway
from shared.utils import get_utc_now

logger = logging.getLogger(__name__)


class SummaryService:
    """Service for creating and reading article summaries."""

    def __init__(self, db: AsyncIOMotorDatabase, gateway: Optional[SummarizationGateway] = None):
        self.article_repo = ArticleRepository(db)
        self.summary_repo = SummaryRepository(db)
        self.source_repo = SourceRepository(db)
        self.gateway = gateway

    async def create_summary(
        self,
        article_id: str,
        text: str,
        keywords: List[str]
    ) -> Optional[Dict[str, Any]]:
        """
        Store a summary and flag its article.

        The two writes are not atomic; if the flag update is lost the fallback
        sweep repairs it. Returns the existing summary when one was already stored.
        """
        summary = await self.summary_repo.insert_if_absent(article_id, text, keywords)
        if summary is None:
            summary = await self.summary_repo.get_by_article(article_id)

        await self.article_repo.mark_as_summarized(article_id)
        return summary

    async def create_summary_direct(self, article_id: str) -> Dict[str, Any]:
        """Summarize an article right away, bypassing the queue."""
        article = await self.article_repo.get_article(article_id)
        if not article or not (article.get("original_content") or "").strip():
            raise ArticleNotFoundError(f"Article {article_id} not found or has no content")

        existing = await self.summary_repo.get_by_article(article_id)
        if existing:
            await self.article_repo.mark_as_summarized(article_id)
            return existing

        result = await self.gateway.summarize(article["original_content"])
        return await self.create_summary(article_id, result.summary, result.keywords)

    async def get_summary_by_article_id(self, article_id: str) -> Optional[Dict[str, Any]]:
        """Get the summary for an article."""
        return await self.summary_repo.get_by_article(article_id)

    async def get_summary(self, summary_id: str) -> Optional[Dict[str, Any]]:
        """Get a summary for display, counting the view."""
        return await self.summary_repo.increment_read_count(summary_id)

    async def get_summaries_by_interests(
        self,
        interests: List[str],
        page: int = 1,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """Summaries matching a reader's interests, newest first."""
        return await self.summary_repo.get_summaries_by_interests(interests, page, limit)

    async def get_stats(self) -> Dict[str, Any]:
        """Dashboard counters; zeros when the database cannot be read."""
        try:
            stats = await self.summary_repo.get_stats()
            stats["total_sources"] = await self.source_repo.count_sources()
        except Exception as e:
            logger.error(f"Failed to compute summary stats: {e}")
            return {
                "total_summaries": 0,
                "total_sources": 0,
                "today_summaries": 0,
                "last_week_summaries": 0,
                "avg_read_time": DEFAULT_READ_TIME,
                "total_reads": 0,
                "last_updated": get_utc_now()
            }
        return stats
