"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.chapter_update import ChapterUpdate
from db.models.crawl_target import CrawlTarget
from db.models.failure_log import FailureLog

__all__ = [
    "ChapterUpdate",
    "CrawlTarget",
    "FailureLog",
]
