"""Interval scheduler for the RSS fetch and the summary fallback sweep."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Any, List, Optional

from api.services.fallback import SummaryFallbackService
from api.services.feed_fetcher import FeedFetcher
from shared.config import settings

logger = logging.getLogger(__name__)


@dataclass
class SchedulerConfig:
    """Intervals in seconds for the periodic jobs."""
    rss_fetch_interval: float = 1800
    summary_fallback_interval: float = 600
    run_on_startup: bool = False

    @classmethod
    def from_settings(cls) -> "SchedulerConfig":
        return cls(
            rss_fetch_interval=settings.rss_fetch_interval,
            summary_fallback_interval=settings.summary_fallback_interval,
            run_on_startup=settings.scheduler_run_on_startup
        )


class TaskScheduler:
    """
    Runs the feed fetch and the fallback sweep on their own intervals.

    Scheduled runs log and swallow every error so the process keeps running
    unattended. The trigger_* methods are for on-demand calls and let errors
    reach the caller.
    """

    def __init__(
        self,
        feed_fetcher: FeedFetcher,
        fallback_service: SummaryFallbackService,
        config: Optional[SchedulerConfig] = None
    ):
        self.feed_fetcher = feed_fetcher
        self.fallback_service = fallback_service
        self.config = config or SchedulerConfig.from_settings()
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self):
        """Start both periodic loops on the running event loop."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(
                self._run_periodically("rss-fetch", self.config.rss_fetch_interval, self.handle_rss_fetch)
            ),
            asyncio.create_task(
                self._run_periodically(
                    "summary-fallback", self.config.summary_fallback_interval, self.handle_summary_fallback
                )
            ),
        ]
        logger.info(
            f"Scheduler started (rss fetch every {self.config.rss_fetch_interval}s, "
            f"summary fallback every {self.config.summary_fallback_interval}s)"
        )

    async def stop(self):
        """Cancel the periodic loops and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Scheduler stopped")

    async def _run_periodically(self, name: str, interval: float, job: Callable[[], Awaitable[None]]):
        if self.config.run_on_startup:
            await job()
        while True:
            await asyncio.sleep(interval)
            logger.debug(f"Running scheduled job {name}")
            await job()

    async def handle_rss_fetch(self):
        """Scheduled RSS fetch."""
        logger.info("Starting RSS fetch task...")
        try:
            await self.feed_fetcher.fetch_articles_from_rss()
            logger.info("RSS fetch task completed successfully")
        except Exception as e:
            logger.error(f"RSS fetch task failed: {e}")

    async def handle_summary_fallback(self):
        """Scheduled summary fallback sweep."""
        logger.info("Starting summary fallback task...")
        try:
            await self.fallback_service.process_unsummarized_articles()
            logger.info("Summary fallback task completed successfully")
        except Exception as e:
            logger.error(f"Summary fallback task failed: {e}")

    async def trigger_rss_fetch(self) -> Dict[str, Any]:
        """Manual RSS fetch; errors propagate."""
        logger.info("Manual RSS fetch triggered")
        try:
            result = await self.feed_fetcher.fetch_articles_from_rss()
        except Exception as e:
            logger.error(f"Manual RSS fetch failed: {e}")
            raise
        logger.info("Manual RSS fetch completed successfully")
        return {"message": "RSS fetch completed successfully", "result": result}

    async def trigger_summary_processing(self) -> Dict[str, Any]:
        """Manual fallback sweep; errors propagate."""
        logger.info("Manual summary processing triggered")
        try:
            await self.fallback_service.process_unsummarized_articles()
        except Exception as e:
            logger.error(f"Manual summary processing failed: {e}")
            raise
        logger.info("Manual summary processing completed successfully")
        return {"message": "Summary processing completed successfully"}
