"""
Repository layer exports.
"""

from db.repositories.chapter_update_repository import MUTABLE_FIELDS, ChapterUpdateRepository
from db.repositories.crawl_target_repository import CrawlTargetRepository
from db.repositories.errors import CrawlTargetNotFoundError, RepositoryError, UpdateNotFoundError
from db.repositories.failure_log_repository import FailureLogRepository

__all__ = [
    "MUTABLE_FIELDS",
    "ChapterUpdateRepository",
    "CrawlTargetNotFoundError",
    "CrawlTargetRepository",
    "FailureLogRepository",
    "RepositoryError",
    "UpdateNotFoundError",
]
