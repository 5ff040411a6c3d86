# Routes module
from .articles import router as articles_router
from .sources import router as sources_router
from .ai import router as ai_router
from .summaries import router as summaries_router
from .queue_stats import router as queue_router

__all__ = ["articles_router", "sources_router", "ai_router", "summaries_router", "queue_router"]
