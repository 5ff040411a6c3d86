# Repositories module
from .article_repo import ArticleRepository
from .source_repo import SourceRepository
from .summary_repo import SummaryRepository

__all__ = ["ArticleRepository", "SourceRepository", "SummaryRepository"]
