"""Queue introspection routes for the REST API."""
from fastapi import APIRouter, Depends

from api.dependencies import get_publisher
from api.schemas.responses import QueueStatsResponse
from api.services.publisher import PublisherService


router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("/stats", response_model=QueueStatsResponse)
async def get_queue_stats(publisher: PublisherService = Depends(get_publisher)):
    """Job counts by state for the summary queue."""
    return QueueStatsResponse(**await publisher.get_queue_stats())
