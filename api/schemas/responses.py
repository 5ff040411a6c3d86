"""Response schemas for API endpoints."""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ArticleResponse(BaseModel):
    """Response schema for an article."""
    id: str = Field(..., description="Unique article identifier")
    title: str = Field(..., description="Article title")
    url: str = Field(..., description="Canonical article URL")
    source_id: str = Field(..., description="Source the article came from")
    categories: List[str] = Field(default_factory=list, description="Feed categories")
    image_url: Optional[str] = Field(None, description="Lead image URL")
    description: str = Field(default="", description="Short description")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    is_summarized: bool = Field(..., description="Whether a summary has been stored")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ArticleResponse":
        return cls(
            id=doc["_id"],
            title=doc["title"],
            url=doc["canonical_url"],
            source_id=doc["source_id"],
            categories=doc.get("categories") or [],
            image_url=doc.get("image_url"),
            description=doc.get("description") or "",
            published_at=doc.get("published_at"),
            is_summarized=doc.get("is_summarized", False)
        )


class SummaryResponse(BaseModel):
    """Response schema for a stored summary."""
    id: str = Field(..., description="Unique summary identifier")
    article_id: str = Field(..., description="Summarized article")
    text: str = Field(..., description="Summary text")
    keywords: List[str] = Field(default_factory=list, description="Summary keywords")
    read_count: int = Field(default=0, description="Number of detail views")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "SummaryResponse":
        return cls(
            id=doc["_id"],
            article_id=doc["article_id"],
            text=doc["text"],
            keywords=doc.get("keywords") or [],
            read_count=doc.get("read_count", 0),
            created_at=doc.get("created_at")
        )


class SummaryStatsResponse(BaseModel):
    """Response schema for summary dashboard counters."""
    total_summaries: int = Field(..., description="Stored summaries")
    total_sources: int = Field(..., description="Configured sources")
    today_summaries: int = Field(..., description="Summaries created since 00:00 UTC")
    last_week_summaries: int = Field(..., description="Summaries created in the last seven days")
    avg_read_time: int = Field(..., description="Estimated read time in minutes")
    total_reads: int = Field(..., description="Detail views across all summaries")
    last_updated: datetime = Field(..., description="When the counters were computed")


class SummarizeTextResponse(BaseModel):
    """Response schema for ad-hoc summarization."""
    summary: str = Field(..., description="Generated summary")
    keywords: List[str] = Field(..., description="Extracted keywords")
    quotes: List[str] = Field(default_factory=list, description="Key quotes, when requested")


class FetchArticlesResponse(BaseModel):
    """Response schema for a feed fetch pass."""
    success: bool = Field(..., description="Whether the pass completed")
    message: str = Field(..., description="Summary of the pass")
    articles_processed: int = Field(..., description="Number of new articles stored")
    errors: List[str] = Field(default_factory=list, description="Per-source and per-item errors")


class ConnectionTestResponse(BaseModel):
    """Response schema for the AI connection check."""
    status: str = Field(..., description="success or error")
    message: str = Field(..., description="Human readable result")


class QueueStatsResponse(BaseModel):
    """Response schema for summary queue statistics."""
    waiting: int
    active: int
    delayed: int
    completed: int
    failed: int
    status: str = Field(..., description="connected or disconnected")
    error: Optional[str] = None


class MessageResponse(BaseModel):
    """Response schema for plain acknowledgements."""
    message: str


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
