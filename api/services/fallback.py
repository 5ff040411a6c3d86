"""Catch-up sweep that summarizes articles the queue path left behind."""
import logging
from typing import Dict, Any, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.repositories.article_repo import ArticleRepository
from database.repositories.summary_repo import SummaryRepository, MAX_KEYWORDS
from shared.config import settings
from shared.summarizer import SummarizationGateway, SummaryOptions, SummaryLength, SummaryStyle

logger = logging.getLogger(__name__)


class SummaryFallbackService:
    """
    Summarizes unsummarized articles directly, without the queue.

    Safe to run repeatedly and alongside the worker: an article that already
    has a summary only gets its flag repaired.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        gateway: SummarizationGateway,
        batch_size: Optional[int] = None
    ):
        self.article_repo = ArticleRepository(db)
        self.summary_repo = SummaryRepository(db)
        self.gateway = gateway
        self.batch_size = batch_size or settings.fallback_batch_size
        self.options = SummaryOptions(
            length=SummaryLength.MEDIUM,
            style=SummaryStyle.FORMAL,
            language="Turkish"
        )

    async def process_unsummarized_articles(self) -> None:
        """Summarize a bounded batch of pending articles. Never raises."""
        logger.info("Processing unsummarized articles (fallback mode)")

        try:
            articles = await self.article_repo.get_pending_with_content(self.batch_size)
        except Exception as e:
            logger.error(f"Failed to process unsummarized articles: {e}")
            return

        logger.info(f"Found {len(articles)} unsummarized articles")

        for article in articles:
            try:
                await self._process_single_article(article)
            except Exception as e:
                logger.error(f"Failed to process article {article.get('_id')}: {e}")

    async def _process_single_article(self, article: Dict[str, Any]):
        article_id = article["_id"]

        if await self.summary_repo.summary_exists(article_id):
            # Summary stored but the flag update was lost
            await self.article_repo.mark_as_summarized(article_id)
            logger.info(f"Repaired summarized flag for article {article_id}")
            return

        content = article.get("original_content") or ""
        if not content.strip():
            logger.warning(f"Article {article_id} has no content to summarize")
            return

        result = await self.gateway.summarize(content, self.options)

        created = await self.summary_repo.insert_if_absent(
            article_id,
            result.summary,
            result.keywords[:MAX_KEYWORDS]
        )
        if created is None:
            logger.info(f"Article {article_id} was summarized concurrently, keeping existing summary")

        await self.article_repo.mark_as_summarized(article_id)
        logger.info(f"Successfully summarized article: {article.get('title')}")
