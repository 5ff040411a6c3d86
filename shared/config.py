"""Shared configuration for all services."""
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis Configuration
    redis_url: str = "redis://localhost:6379"
    summary_queue_prefix: str = "summary"

    # MongoDB Configuration
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "news_summary"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Logging
    log_level: str = "INFO"

    # Queue / Consumer Configuration
    queue_job_attempts: int = 3
    queue_backoff_delay: float = 2.0  # seconds, doubled per attempt
    queue_keep_completed: int = 10
    queue_keep_failed: int = 5
    consumer_poll_interval: float = 1.0
    consumer_concurrency: int = 1
    worker_id: Optional[str] = None

    # Feed Fetching
    feed_timeout: int = 10
    feed_max_redirects: int = 5
    feed_max_content_length: int = 5000
    feed_min_summary_length: int = 100
    feed_new_source_item_limit: int = 10
    feed_max_age_days: int = 365
    feed_user_agent: str = "Mozilla/5.0 (compatible; NewsSummaryBot/1.0)"

    # Generative AI
    google_cloud_project: Optional[str] = None
    google_cloud_location: str = "us-central1"
    google_api_key: Optional[str] = None
    ai_model: str = "gemini-2.5-flash-lite"
    ai_max_output_tokens: int = 1000
    ai_temperature: float = 0.1
    ai_top_p: float = 0.8
    ai_max_attempts: int = 3
    ai_retry_base_delay: float = 1.0
    ai_request_timeout: float = 30.0
    ai_max_input_chars: int = 50000
    ai_default_language: str = "Turkish"

    # Fallback Processor / Scheduler
    fallback_batch_size: int = 5
    rss_fetch_interval: int = 1800  # seconds
    summary_fallback_interval: int = 600  # seconds
    scheduler_enabled: bool = True
    scheduler_run_on_startup: bool = False
    seed_default_sources: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
