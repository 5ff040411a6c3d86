"""Article routes for the REST API."""
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.dependencies import get_scheduler
from api.schemas.responses import ArticleResponse, FetchArticlesResponse, MessageResponse
from api.services.scheduler import TaskScheduler
from database.connection import get_db
from database.repositories.article_repo import ArticleRepository


router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/fetch", response_model=FetchArticlesResponse)
async def fetch_articles(scheduler: TaskScheduler = Depends(get_scheduler)):
    """
    Fetch all active feeds now.

    Unlike the scheduled run, failures outside a single source are returned
    to the caller as a server error.
    """
    outcome = await scheduler.trigger_rss_fetch()
    result = outcome["result"]

    return FetchArticlesResponse(
        success=result.success,
        message=result.message,
        articles_processed=result.articles_processed,
        errors=result.errors
    )


@router.post("/process-summaries", response_model=MessageResponse)
async def process_summaries(scheduler: TaskScheduler = Depends(get_scheduler)):
    """Run the fallback summarization sweep now."""
    outcome = await scheduler.trigger_summary_processing()
    return MessageResponse(message=outcome["message"])


@router.get("", response_model=List[ArticleResponse])
async def list_articles(
    interests: List[str] = Query(default=[]),
    page: int = 1,
    limit: int = 10,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List summarized articles matching the reader's interests (repeated or comma separated)."""
    article_repo = ArticleRepository(db)
    interests = [part for value in interests for part in value.split(",")]

    articles = await article_repo.get_articles_by_interests(interests, page=page, limit=limit)
    return [ArticleResponse.from_document(article) for article in articles]


@router.get("/unsummarized", response_model=List[ArticleResponse])
async def list_unsummarized_articles(db: AsyncIOMotorDatabase = Depends(get_db)):
    """List articles that are still waiting for a summary."""
    article_repo = ArticleRepository(db)

    articles = await article_repo.get_unsummarized_articles()
    return [ArticleResponse.from_document(article) for article in articles]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get a single article."""
    article_repo = ArticleRepository(db)

    article = await article_repo.get_article(article_id)
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article {article_id} not found"
        )

    return ArticleResponse.from_document(article)


@router.post("/{article_id}/summarized", response_model=ArticleResponse)
async def mark_article_summarized(
    article_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Flag an article as summarized."""
    article_repo = ArticleRepository(db)

    article = await article_repo.mark_as_summarized(article_id)
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article {article_id} not found"
        )

    return ArticleResponse.from_document(article)
