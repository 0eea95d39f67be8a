"""
chapterwatch/domain package marker.
"""

from chapterwatch.domain.crawl import (
    TERMINAL_STATES,
    CrawlRunResult,
    CrawlTargetState,
    CrawlTargetSummary,
)

__all__ = [
    "TERMINAL_STATES",
    "CrawlRunResult",
    "CrawlTargetState",
    "CrawlTargetSummary",
]
