"""FastAPI dependencies shared by the routers."""
from functools import lru_cache
from fastapi import Depends, Request
import redis.asyncio as redis

from api.services.publisher import PublisherService
from api.services.scheduler import TaskScheduler
from database.connection import get_redis
from shared.summarizer import SummarizationGateway


@lru_cache()
def get_gateway() -> SummarizationGateway:
    """Process-wide summarization gateway (the model client is reused)."""
    return SummarizationGateway()


async def get_publisher(redis_client: redis.Redis = Depends(get_redis)) -> PublisherService:
    """Dependency for the summary queue publisher."""
    return PublisherService(redis_client)


def get_scheduler(request: Request) -> TaskScheduler:
    """Scheduler created during application startup."""
    return request.app.state.scheduler
