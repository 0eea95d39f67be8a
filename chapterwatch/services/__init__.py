"""
chapterwatch/services package marker.
"""

from chapterwatch.services.crawl_service import ChapterCrawlService, record_failure

__all__ = ["ChapterCrawlService", "record_failure"]
