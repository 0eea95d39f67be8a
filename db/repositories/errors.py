"""
Repository-layer exceptions for crawl persistence flows.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for crawl repository failures."""


class CrawlTargetNotFoundError(RepositoryError):
    """Raised when a referenced crawl target does not exist."""


class UpdateNotFoundError(RepositoryError):
    """Raised when a referenced chapter update does not exist."""
