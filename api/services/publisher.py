"""Publisher service for pushing summarization jobs to the Redis queue."""
import json
import logging
from typing import Dict, Any, Optional
import redis.asyncio as redis
from shared.config import settings
from shared.jobs import QueueKeys, SUMMARIZE_JOB
from shared.utils import generate_job_id, get_utc_now

logger = logging.getLogger(__name__)


class PublisherService:
    """Service for publishing summarization jobs to the Redis queue."""

    def __init__(self, redis_client: redis.Redis, keys: QueueKeys = None):
        self.redis = redis_client
        self.keys = keys or QueueKeys()
        self.max_attempts = settings.queue_job_attempts
        self.backoff_delay = settings.queue_backoff_delay

    def build_job(self, article_id: str, content: str) -> Dict[str, Any]:
        """Build the payload for a summarize-article job."""
        return {
            "job_id": generate_job_id(),
            "name": SUMMARIZE_JOB,
            "article_id": article_id,
            "content": content,
            "attempts_made": 0,
            "max_attempts": self.max_attempts,
            "backoff_delay": self.backoff_delay,
            "created_at": get_utc_now().isoformat()
        }

    async def add_summarize_job(self, article_id: str, content: str) -> Optional[str]:
        """
        Queue an article for summarization.

        Queue failures are logged and swallowed so article ingestion never fails
        because Redis is unavailable; the fallback sweep picks the article up later.
        """
        job = self.build_job(article_id, content)
        try:
            await self.redis.lpush(self.keys.waiting, json.dumps(job))
        except Exception as e:
            logger.error(f"Failed to add article {article_id} to queue: {e}")
            return None

        logger.info(f"Added article {article_id} to summarization queue")
        return job["job_id"]

    async def get_queue_stats(self) -> Dict[str, Any]:
        """Count jobs by state; reports a disconnected status instead of raising."""
        try:
            return {
                "waiting": await self.redis.llen(self.keys.waiting),
                "active": await self.redis.llen(self.keys.active),
                "delayed": await self.redis.zcard(self.keys.delayed),
                "completed": await self.redis.llen(self.keys.completed),
                "failed": await self.redis.llen(self.keys.failed),
                "status": "connected"
            }
        except Exception as e:
            logger.error(f"Failed to get queue stats: {e}")
            return {
                "waiting": 0,
                "active": 0,
                "delayed": 0,
                "completed": 0,
                "failed": 0,
                "status": "disconnected",
                "error": str(e)
            }
