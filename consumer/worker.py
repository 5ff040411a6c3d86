"""Worker process for consuming and processing summarization jobs."""
import asyncio
import json
import logging
import time
from typing import Optional, Dict, Any
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.repositories.article_repo import ArticleRepository
from database.repositories.summary_repo import SummaryRepository
from shared.config import settings
from shared.exceptions import SummarizationInputError
from shared.jobs import QueueKeys, SUMMARIZE_JOB
from shared.summarizer import SummarizationGateway
from shared.utils import calculate_exponential_backoff, get_utc_now

logger = logging.getLogger(__name__)


class SummaryWorker:
    """Worker that processes summarize-article jobs from the Redis queue."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis_client: redis.Redis,
        worker_id: str = "worker-1",
        gateway: Optional[SummarizationGateway] = None,
        keys: Optional[QueueKeys] = None,
        poll_interval: Optional[float] = None
    ):
        self.db = db
        self.redis = redis_client
        self.worker_id = worker_id
        self.article_repo = ArticleRepository(db)
        self.summary_repo = SummaryRepository(db)
        self.gateway = gateway or SummarizationGateway()
        self.keys = keys or QueueKeys()
        self.poll_interval = settings.consumer_poll_interval if poll_interval is None else poll_interval
        self.keep_completed = settings.queue_keep_completed
        self.keep_failed = settings.queue_keep_failed
        self.running = True

    async def start(self):
        """Start the worker loop."""
        logger.info(f"Worker {self.worker_id} starting...")

        while self.running:
            try:
                await self._promote_delayed_jobs()
                raw_job = await self._get_next_job()

                if raw_job:
                    await self._process_job(raw_job)
                    continue
            except Exception as e:
                logger.error(f"Worker {self.worker_id} poll failed, retrying in {self.poll_interval}s: {e}")

            # No jobs available or the queue is unreachable, wait before polling again
            await asyncio.sleep(self.poll_interval)

    async def stop(self):
        """Stop the worker gracefully."""
        logger.info(f"Worker {self.worker_id} stopping...")
        self.running = False

    async def _get_next_job(self) -> Optional[str]:
        """Move the oldest waiting job onto the active list and return it."""
        return await self.redis.lmove(self.keys.waiting, self.keys.active, "RIGHT", "LEFT")

    async def _promote_delayed_jobs(self) -> int:
        """Move retries whose backoff has elapsed back onto the waiting list."""
        due = await self.redis.zrangebyscore(self.keys.delayed, "-inf", time.time())
        promoted = 0
        for raw_job in due:
            # Only the worker whose ZREM succeeds re-queues the job
            if await self.redis.zrem(self.keys.delayed, raw_job):
                await self.redis.lpush(self.keys.waiting, raw_job)
                promoted += 1
        return promoted

    async def _process_job(self, raw_job: str):
        """Process a single job taken from the active list."""
        try:
            job = json.loads(raw_job)
        except json.JSONDecodeError:
            job = None

        if not isinstance(job, dict):
            logger.error(f"Failed to parse job: {raw_job}")
            await self.redis.lrem(self.keys.active, 1, raw_job)
            return

        if job.get("name") != SUMMARIZE_JOB:
            logger.error(f"Unknown job type {job.get('name')!r}, dropping job {job.get('job_id')}")
            await self.redis.lrem(self.keys.active, 1, raw_job)
            return

        if not job.get("article_id"):
            await self._handle_failure(raw_job, job, ValueError("Job has no article_id"), retryable=False)
            return

        try:
            await self.handle_summarize_article(job)
        except SummarizationInputError as e:
            # Bad payload; retrying cannot help
            await self._handle_failure(raw_job, job, e, retryable=False)
        except Exception as e:
            await self._handle_failure(raw_job, job, e)
        else:
            await self._handle_success(raw_job, job)

    async def handle_summarize_article(self, job: Dict[str, Any]) -> Dict[str, Any]:
        """
        Summarize the job's article and store the result.

        Errors propagate so the queue's retry policy applies.
        """
        article_id = job["article_id"]
        logger.info(f"Worker {self.worker_id} summarizing article: {article_id}")

        result = await self.gateway.summarize(job.get("content"))

        summary = await self.summary_repo.insert_if_absent(article_id, result.summary, result.keywords)
        if summary is None:
            logger.info(f"Summary for article {article_id} already exists, only updating flag")

        await self.article_repo.mark_as_summarized(article_id)

        logger.info(f"Summarization completed for article: {article_id}")
        return {"success": True, "article_id": article_id}

    def _history_record(self, job: Dict[str, Any], **extra) -> str:
        record = {key: value for key, value in job.items() if key != "content"}
        record.update(extra)
        record["finished_at"] = get_utc_now().isoformat()
        record["worker_id"] = self.worker_id
        return json.dumps(record)

    async def _handle_success(self, raw_job: str, job: Dict[str, Any]):
        """Record a completed job, keeping only the most recent ones."""
        await self.redis.lrem(self.keys.active, 1, raw_job)
        await self.redis.lpush(self.keys.completed, self._history_record(job))
        await self.redis.ltrim(self.keys.completed, 0, self.keep_completed - 1)

    async def _handle_failure(
        self,
        raw_job: str,
        job: Dict[str, Any],
        error: Exception,
        retryable: bool = True
    ):
        """Schedule a retry with exponential backoff, or record the job as failed."""
        await self.redis.lrem(self.keys.active, 1, raw_job)

        attempts_made = job.get("attempts_made", 0) + 1
        max_attempts = job.get("max_attempts", settings.queue_job_attempts)
        job["attempts_made"] = attempts_made
        job["last_error"] = str(error)

        if retryable and attempts_made < max_attempts:
            delay = calculate_exponential_backoff(
                attempts_made - 1,
                job.get("backoff_delay", settings.queue_backoff_delay)
            )
            logger.warning(
                f"Job {job.get('job_id')} for article {job.get('article_id')} failed "
                f"(attempt {attempts_made}/{max_attempts}), retrying in {delay}s: {error}"
            )
            await self.redis.zadd(self.keys.delayed, {json.dumps(job): time.time() + delay})
            return

        await self.redis.lpush(self.keys.failed, self._history_record(job))
        await self.redis.ltrim(self.keys.failed, 0, self.keep_failed - 1)
        logger.error(
            f"Summarization failed for article {job.get('article_id')} after {attempts_made} attempts: {error}"
        )
