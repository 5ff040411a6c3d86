"""Shared utility functions."""
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_job_id() -> str:
    """Generate a unique job ID."""
    return f"job_{uuid.uuid4().hex[:12]}"


def generate_article_id() -> str:
    """Generate a unique article ID."""
    return f"art_{uuid.uuid4().hex[:12]}"


def generate_summary_id() -> str:
    """Generate a unique summary ID."""
    return f"sum_{uuid.uuid4().hex[:12]}"


def generate_source_id() -> str:
    """Generate a unique source ID."""
    return f"src_{uuid.uuid4().hex[:12]}"


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def canonical_url(url: Optional[str]) -> str:
    """Return the deduplication key for a feed item link."""
    if not url or not isinstance(url, str):
        return ""
    return url.strip()


def calculate_exponential_backoff(attempt: int, base_delay: float = 1.0, max_delay: float = 60.0) -> float:
    """Calculate exponential backoff delay."""
    delay = base_delay * (2 ** attempt)
    return min(delay, max_delay)
