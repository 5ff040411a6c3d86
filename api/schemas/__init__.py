# Schemas module
from .requests import SummarizeTextRequest
from .responses import (
    ArticleResponse,
    SummaryResponse,
    SummaryStatsResponse,
    SummarizeTextResponse,
    FetchArticlesResponse,
    ConnectionTestResponse,
    QueueStatsResponse,
    MessageResponse,
    ErrorResponse
)

__all__ = [
    "SummarizeTextRequest",
    "ArticleResponse",
    "SummaryResponse",
    "SummaryStatsResponse",
    "SummarizeTextResponse",
    "FetchArticlesResponse",
    "ConnectionTestResponse",
    "QueueStatsResponse",
    "MessageResponse",
    "ErrorResponse"
]
