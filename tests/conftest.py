"""Pytest configuration and fixtures."""
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock, AsyncMock


@pytest.fixture
def mock_mongo_db():
    """Create mock MongoDB database."""
    db = MagicMock()

    # Mock collections
    db.sources = MagicMock()
    db.articles = MagicMock()
    db.summaries = MagicMock()

    # Mock common operations
    for collection in (db.sources, db.articles, db.summaries):
        collection.find_one = AsyncMock(return_value=None)
        collection.update_one = AsyncMock()
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.count_documents = AsyncMock(return_value=0)
        collection.find = MagicMock()

    return db


@pytest.fixture
def mock_redis_client():
    """Create mock Redis client."""
    redis = AsyncMock()

    redis.lpush = AsyncMock(return_value=1)
    redis.lmove = AsyncMock(return_value=None)
    redis.llen = AsyncMock(return_value=0)
    redis.lrem = AsyncMock(return_value=1)
    redis.ltrim = AsyncMock(return_value=True)
    redis.zadd = AsyncMock(return_value=1)
    redis.zrem = AsyncMock(return_value=1)
    redis.zcard = AsyncMock(return_value=0)
    redis.zrangebyscore = AsyncMock(return_value=[])

    return redis


@pytest.fixture
def mock_gateway():
    """Create a summarization gateway returning a fixed result."""
    from shared.summarizer import SummaryResult

    gateway = MagicMock()
    gateway.summarize = AsyncMock(return_value=SummaryResult(
        summary="Kısa bir özet.",
        keywords=["teknoloji", "yapay", "zeka"]
    ))
    gateway.test_connection = AsyncMock(
        return_value={"status": "success", "message": "AI connection successful"}
    )
    return gateway


@pytest.fixture
def sample_source():
    """Create sample source data."""
    return {
        "_id": "src_test001",
        "name": "TestSource",
        "website_url": "https://example.com",
        "feed_url": "https://example.com/feed.xml",
        "is_active": True,
        "is_default": False,
        "owner_user_id": None
    }


@pytest.fixture
def sample_article():
    """Create sample article data."""
    return {
        "_id": "art_test001",
        "title": "Test Article Title",
        "canonical_url": "https://example.com/test-article",
        "source_id": "src_test001",
        "categories": ["Technology"],
        "image_url": None,
        "description": "Short description of the article.",
        "original_content": "This is the test article content. " * 10,
        "published_at": datetime(2024, 2, 4, 10, 30, tzinfo=timezone.utc),
        "is_summarized": False,
        "created_at": datetime(2024, 2, 4, 10, 30, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 2, 4, 10, 30, tzinfo=timezone.utc)
    }


@pytest.fixture
def sample_summary():
    """Create sample summary data."""
    return {
        "_id": "sum_test001",
        "article_id": "art_test001",
        "text": "Kısa bir özet.",
        "keywords": ["teknoloji", "yapay", "zeka"],
        "read_count": 0,
        "created_at": datetime(2024, 2, 4, 10, 35, tzinfo=timezone.utc)
    }


@pytest.fixture
def sample_job():
    """Create sample summarize-article job."""
    return {
        "job_id": "job_test123",
        "name": "summarize-article",
        "article_id": "art_test001",
        "content": "This is the test article content. " * 10,
        "attempts_made": 0,
        "max_attempts": 3,
        "backoff_delay": 2.0,
        "created_at": "2024-02-04T10:30:00+00:00"
    }
