"""Source routes for the REST API."""
from fastapi import APIRouter, HTTPException, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.dependencies import get_publisher
from api.schemas.responses import FetchArticlesResponse
from api.services.feed_fetcher import FeedFetcher
from api.services.publisher import PublisherService
from database.connection import get_db
from database.repositories.source_repo import SourceRepository


router = APIRouter(prefix="/sources", tags=["sources"])


@router.post("/{source_id}/fetch", response_model=FetchArticlesResponse)
async def fetch_new_source(
    source_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    publisher: PublisherService = Depends(get_publisher)
):
    """Ingest the latest entries of a newly added source without waiting for the scheduler."""
    source_repo = SourceRepository(db)

    source = await source_repo.get_source(source_id)
    if not source:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Source {source_id} not found"
        )

    fetcher = FeedFetcher(db, publisher)
    result = await fetcher.process_new_source(source)

    return FetchArticlesResponse(
        success=result.success,
        message=result.message,
        articles_processed=result.articles_processed,
        errors=result.errors
    )
