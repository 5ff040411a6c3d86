"""RSS/Atom feed fetcher that turns feed entries into stored articles."""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import aiohttp
import feedparser
from bs4 import BeautifulSoup
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.services.publisher import PublisherService
from database.repositories.article_repo import ArticleRepository
from database.repositories.source_repo import SourceRepository
from shared.config import settings
from shared.exceptions import FeedFetchError
from shared.utils import canonical_url, get_utc_now

logger = logging.getLogger(__name__)


UNTITLED = "Başlık mevcut değil"


@dataclass
class FetchResult:
    """Outcome of a fetch pass."""
    success: bool
    message: str
    articles_processed: int = 0
    errors: List[str] = field(default_factory=list)


class FeedFetcher:
    """Fetches source feeds, stores unseen articles and queues them for summarization."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        publisher: Optional[PublisherService] = None,
        timeout: int = None,
        max_redirects: int = None,
        max_content_length: int = None,
        min_summary_length: int = None,
        new_source_item_limit: int = None,
        max_age_days: int = None
    ):
        self.article_repo = ArticleRepository(db)
        self.source_repo = SourceRepository(db)
        self.publisher = publisher
        self.timeout = timeout or settings.feed_timeout
        self.max_redirects = max_redirects or settings.feed_max_redirects
        self.max_content_length = max_content_length or settings.feed_max_content_length
        self.min_summary_length = min_summary_length or settings.feed_min_summary_length
        self.new_source_item_limit = new_source_item_limit or settings.feed_new_source_item_limit
        self.max_age_days = max_age_days or settings.feed_max_age_days
        self.headers = {
            "User-Agent": settings.feed_user_agent,
            "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5",
        }

    async def fetch_articles_from_rss(self) -> FetchResult:
        """
        Fetch every active source and store the new articles.

        Source-level failures are collected in `errors`; a failure to list the
        sources themselves propagates.
        """
        sources = await self.source_repo.get_active_sources()

        if not sources:
            logger.warning("No RSS sources found")
            return FetchResult(success=True, message="No RSS sources configured")

        logger.info(f"Starting RSS fetch for {len(sources)} sources")

        errors: List[str] = []
        processed = 0
        for source in sources:
            processed += await self._process_source(source, errors)

        message = f"RSS fetch completed. Processed {processed} new articles from {len(sources)} sources"
        logger.info(message)

        return FetchResult(
            success=True,
            message=message,
            articles_processed=processed,
            errors=errors
        )

    async def process_new_source(self, source: Dict[str, Any]) -> FetchResult:
        """Ingest the first few entries of a source the user just added."""
        errors: List[str] = []
        logger.info(f"Processing RSS for new source: {source.get('name')}")

        processed = await self._process_source(source, errors, limit=self.new_source_item_limit)

        return FetchResult(
            success=True,
            message=f"Processed {processed} new articles from {source.get('name')}",
            articles_processed=processed,
            errors=errors
        )

    async def _process_source(
        self,
        source: Dict[str, Any],
        errors: List[str],
        limit: Optional[int] = None
    ) -> int:
        """Ingest one source's entries, returning how many new articles were stored."""
        name = source.get("name") or source.get("_id")
        feed_url = (source.get("feed_url") or "").strip()
        if not feed_url:
            logger.warning(f"Source {name} has no RSS feed URL")
            return 0

        try:
            logger.info(f"Fetching RSS from {name}: {feed_url}")
            entries = await self.fetch_feed(name, feed_url)
        except FeedFetchError as e:
            logger.error(f"Error fetching RSS for {name}: {e.reason}")
            errors.append(f"RSS fetch error for {name}: {e.reason}")
            return 0

        if limit is not None:
            entries = entries[:limit]

        logger.info(f"Found {len(entries)} items from {name}")

        processed = 0
        for entry in entries:
            url = canonical_url(entry.get("link"))
            if not url:
                logger.debug("Skipping item without URL")
                continue

            try:
                if await self._ingest_entry(entry, url, source):
                    processed += 1
            except Exception as e:
                logger.error(f"Error processing article {url}: {e}")
                errors.append(f"Article processing error for {url}: {e}")

        return processed

    async def _ingest_entry(self, entry: Dict[str, Any], url: str, source: Dict[str, Any]) -> bool:
        """Store an entry as a new article. Returns False when the URL is already known."""
        if await self.article_repo.article_exists(url):
            return False

        fields = self.normalize_entry(entry)
        article = self.article_repo.build_article(url=url, source_id=source["_id"], **fields)

        inserted = await self.article_repo.insert_if_absent(article)
        if inserted is None:
            # Stored by a concurrent fetch pass in the meantime
            logger.debug(f"Article already exists: {url}")
            return False

        logger.debug(f"Created article: {inserted['title']}")
        await self._queue_for_summary(inserted)
        return True

    async def _queue_for_summary(self, article: Dict[str, Any]):
        content = article.get("original_content") or ""
        if self.publisher is None or len(content) <= self.min_summary_length:
            return

        job_id = await self.publisher.add_summarize_job(article["_id"], content)
        if job_id is None:
            logger.warning(f"Article {article['_id']} stored without a summarization job")

    async def fetch_feed(self, source_name: str, feed_url: str) -> List[Dict[str, Any]]:
        """Download and parse a feed, returning its entries in feed order."""
        content = await self._download_feed(source_name, feed_url)

        # feedparser is blocking, run it in the default executor
        loop = asyncio.get_running_loop()
        feed = await loop.run_in_executor(None, feedparser.parse, content)

        entries = list(feed.get("entries") or [])
        if feed.get("bozo"):
            reason = feed.get("bozo_exception")
            if not entries:
                raise FeedFetchError(source_name, f"Malformed feed: {reason}")
            logger.warning(f"Feed parsing warning for {source_name}: {reason}")

        return entries

    async def _download_feed(self, source_name: str, feed_url: str) -> bytes:
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self.headers
            ) as session:
                async with session.get(feed_url, max_redirects=self.max_redirects) as response:
                    if response.status >= 400:
                        raise FeedFetchError(source_name, f"HTTP Error {response.status}")
                    return await response.read()
        except asyncio.TimeoutError:
            raise FeedFetchError(source_name, f"Timeout after {self.timeout} seconds")
        except aiohttp.ClientError as e:
            raise FeedFetchError(source_name, f"Network error: {e}")

    def normalize_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """Extract clean article fields from a feedparser entry."""
        description = self.sanitize_text(entry.get("summary") or entry.get("description"))

        encoded = None
        if entry.get("content"):
            encoded = entry["content"][0].get("value")
        original_content = self.sanitize_text(encoded or entry.get("summary")) or description

        return {
            "title": self.sanitize_text(entry.get("title")) or UNTITLED,
            "description": description,
            "original_content": original_content,
            "published_at": self.parse_published_date(entry),
            "categories": self._extract_categories(entry),
            "image_url": self._extract_image_url(entry),
        }

    def sanitize_text(self, text: Any) -> str:
        """Strip markup, collapse whitespace and cap the length."""
        if not text or not isinstance(text, str):
            return ""
        if "<" in text:
            text = BeautifulSoup(text, "html.parser").get_text(" ")
        return " ".join(text.split())[:self.max_content_length]

    def parse_published_date(self, entry: Dict[str, Any], now: Optional[datetime] = None) -> datetime:
        """
        Return the entry's publication date, or now when it is missing,
        unparseable, in the future or older than the allowed age.
        """
        now = now or get_utc_now()
        parsed = entry.get("published_parsed") or entry.get("updated_parsed")

        if not parsed:
            raw = entry.get("published") or entry.get("updated")
            if raw:
                logger.warning(f"Failed to parse date: {raw}")
            return now

        try:
            published = datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            logger.warning(f"Failed to parse date: {parsed}")
            return now

        if published > now or published < now - timedelta(days=self.max_age_days):
            logger.warning(f"Invalid date range for article: {published.isoformat()}")
            return now

        return published

    def _extract_categories(self, entry: Dict[str, Any]) -> List[str]:
        categories: List[str] = []
        for tag in entry.get("tags") or []:
            term = (tag.get("term") or "").strip()
            if term and term not in categories:
                categories.append(term)
        return categories

    def _extract_image_url(self, entry: Dict[str, Any]) -> Optional[str]:
        for media in (entry.get("media_content") or []) + (entry.get("media_thumbnail") or []):
            if media.get("url") and media.get("medium", "image") == "image":
                return media["url"]

        for enclosure in entry.get("enclosures") or []:
            if (enclosure.get("type") or "").startswith("image/") and enclosure.get("href"):
                return enclosure["href"]

        return None
