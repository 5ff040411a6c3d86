"""Queue layout shared by the publisher and the summary worker."""
from shared.config import settings


SUMMARIZE_JOB = "summarize-article"


class QueueKeys:
    """Redis keys used by the summary queue."""

    def __init__(self, prefix: str = None):
        prefix = prefix or settings.summary_queue_prefix
        self.waiting = f"{prefix}:waiting"
        self.active = f"{prefix}:active"
        # Sorted set of retries, scored by the time they become runnable
        self.delayed = f"{prefix}:delayed"
        self.completed = f"{prefix}:completed"
        self.failed = f"{prefix}:failed"
