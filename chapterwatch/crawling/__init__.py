"""
Chapter crawl core: adapter dispatch, bounded queues, reconciliation and batch engine.
"""

from chapterwatch.crawling.engine import ChapterCrawlEngine
from chapterwatch.crawling.limiter import BoundedQueue, QueueRegistry
from chapterwatch.crawling.precision import CHAPTER_PRECISION, precision_equals, precision_round
from chapterwatch.crawling.reconciler import UpdateReconciler, diff_update, is_related_update
from chapterwatch.crawling.registry import AdapterRegistry

__all__ = [
    "CHAPTER_PRECISION",
    "AdapterRegistry",
    "BoundedQueue",
    "ChapterCrawlEngine",
    "QueueRegistry",
    "UpdateReconciler",
    "diff_update",
    "is_related_update",
    "precision_equals",
    "precision_round",
]
