"""Exceptions shared by the API and consumer services."""


class PipelineError(Exception):
    """Base class for ingestion and summarization errors."""


class SummarizationInputError(PipelineError, ValueError):
    """Text handed to the summarizer is missing, not a string, or blank."""


class ArticleNotFoundError(PipelineError, LookupError):
    """Article does not exist or has no content to summarize."""


class ModelResponseError(PipelineError):
    """The generative model returned nothing usable."""


class FeedFetchError(PipelineError):
    """A single source's feed could not be downloaded or parsed."""

    def __init__(self, source_name: str, reason: str):
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"{source_name}: {reason}")
