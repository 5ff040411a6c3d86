"""Summary routes for the REST API."""
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.dependencies import get_gateway
from api.schemas.responses import SummaryResponse, SummaryStatsResponse
from api.services.summaries import SummaryService
from database.connection import get_db
from shared.exceptions import ArticleNotFoundError
from shared.summarizer import SummarizationGateway


router = APIRouter(prefix="/summaries", tags=["summaries"])


@router.get("", response_model=List[SummaryResponse])
async def list_summaries(
    interests: List[str] = Query(default=[]),
    page: int = 1,
    limit: int = 10,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List summaries matching the reader's interests (repeated or comma separated)."""
    summary_service = SummaryService(db)
    interests = [part for value in interests for part in value.split(",")]

    summaries = await summary_service.get_summaries_by_interests(interests, page=page, limit=limit)
    return [SummaryResponse.from_document(summary) for summary in summaries]


@router.get("/stats", response_model=SummaryStatsResponse)
async def get_summary_stats(db: AsyncIOMotorDatabase = Depends(get_db)):
    """Dashboard counters for stored summaries."""
    summary_service = SummaryService(db)

    stats = await summary_service.get_stats()
    return SummaryStatsResponse(**stats)


@router.post("/article/{article_id}", response_model=SummaryResponse, status_code=status.HTTP_201_CREATED)
async def create_summary(
    article_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway: SummarizationGateway = Depends(get_gateway)
):
    """Summarize an article immediately, bypassing the queue."""
    summary_service = SummaryService(db, gateway)

    try:
        summary = await summary_service.create_summary_direct(article_id)
    except ArticleNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return SummaryResponse.from_document(summary)


@router.get("/article/{article_id}", response_model=SummaryResponse)
async def get_summary_by_article(
    article_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get the summary of an article."""
    summary_service = SummaryService(db)

    summary = await summary_service.get_summary_by_article_id(article_id)
    if not summary:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Summary for article {article_id} not found"
        )

    return SummaryResponse.from_document(summary)


@router.get("/{summary_id}", response_model=SummaryResponse)
async def get_summary(
    summary_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get a summary and count the view."""
    summary_service = SummaryService(db)

    summary = await summary_service.get_summary(summary_id)
    if not summary:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Summary {summary_id} not found"
        )

    return SummaryResponse.from_document(summary)
