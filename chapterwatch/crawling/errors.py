"""
Exception taxonomy for crawl batch runs.
"""

from __future__ import annotations

from typing import Any


class CrawlError(Exception):
    """Base exception for crawl failures."""


class CrawlConfigurationError(CrawlError):
    """Raised when a crawl target is configured in a way the runner cannot honor."""


class UnknownAdapterError(CrawlConfigurationError):
    """Raised when a crawl target names an adapter kind with no registration."""


class AdapterFetchError(CrawlError):
    """Raised when an adapter cannot fetch or parse its source."""


class AmbiguousUpdateMatchError(CrawlError):
    """Raised when a fetched chapter matches more than one stored update."""


class CrawlTargetError(CrawlError):
    """
    A pipeline failure tagged with the crawl target it belongs to.
    """

    def __init__(self, target: Any, cause: BaseException) -> None:
        self.target = target
        self.cause = cause
        super().__init__(f"Crawl target '{target.name}' failed: {cause}")
