"""
Storage layer exports.
"""

from chapterwatch.crawling.storage.base import UpdateStorage
from chapterwatch.crawling.storage.sqlalchemy_storage import SQLAlchemyUpdateStorage

__all__ = ["SQLAlchemyUpdateStorage", "UpdateStorage"]
