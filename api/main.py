"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_gateway, get_publisher
from api.routes import articles_router, sources_router, ai_router, summaries_router, queue_router
from api.schemas.responses import ErrorResponse
from api.services.fallback import SummaryFallbackService
from api.services.feed_fetcher import FeedFetcher
from api.services.publisher import PublisherService
from api.services.scheduler import TaskScheduler
from database.connection import DatabaseConnection
from database.repositories.source_repo import SourceRepository
from shared.config import settings
from shared.utils import get_utc_now

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    db = await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    if settings.seed_default_sources:
        added = await SourceRepository(db).ensure_default_sources()
        if added:
            logger.info(f"Seeded {added} default sources")

    publisher = PublisherService(redis_client)
    scheduler = TaskScheduler(
        FeedFetcher(db, publisher),
        SummaryFallbackService(db, get_gateway())
    )
    app.state.scheduler = scheduler

    if settings.scheduler_enabled:
        scheduler.start()

    yield

    # Shutdown
    await scheduler.stop()
    await DatabaseConnection.close_connections()


# Create FastAPI app
app = FastAPI(
    title="News Summary Pipeline",
    description="RSS ingestion with AI generated article summaries",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error", detail=str(exc)).model_dump()
    )


# Include routers
app.include_router(articles_router)
app.include_router(sources_router)
app.include_router(ai_router)
app.include_router(summaries_router)
app.include_router(queue_router)


# Health check endpoints
@app.get("/health")
async def health_check(publisher: PublisherService = Depends(get_publisher)):
    """Health check endpoint."""
    mongo_ok = await DatabaseConnection.ping_mongo()
    queue = await publisher.get_queue_stats()

    return {
        "status": "ok" if mongo_ok else "degraded",
        "timestamp": get_utc_now().isoformat(),
        "database": {"mongodb": "connected" if mongo_ok else "disconnected"},
        "queue": queue
    }


@app.get("/health/live")
async def liveness():
    """Liveness check."""
    return {"status": "alive", "timestamp": get_utc_now().isoformat()}


@app.get("/health/ready")
async def readiness():
    """Readiness check; 503 until MongoDB answers."""
    if not await DatabaseConnection.ping_mongo():
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "timestamp": get_utc_now().isoformat()}
        )
    return {"status": "ready", "timestamp": get_utc_now().isoformat()}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "News Summary Pipeline",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


def run():
    """Console script entry point."""
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug
    )


if __name__ == "__main__":
    run()
