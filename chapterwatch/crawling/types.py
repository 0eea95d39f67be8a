"""
Shared crawl runtime data models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final


class _Unset:
    """Marker for a field the producer did not report."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


@dataclass(frozen=True)
class CrawlTargetData:
    """
    A tracked series as read from storage at the start of a run.
    """

    crawl_target_id: uuid.UUID
    name: str
    adapter: str
    target_url: str
    enabled: bool = True
    crawl_success: bool | None = None
    last_crawled_on: datetime | None = None


@dataclass(frozen=True)
class CrawlTargetFilter:
    """
    Selection criteria for the crawl targets included in a run.
    """

    enabled_only: bool = True
    names: tuple[str, ...] = ()
    adapters: tuple[str, ...] = ()


@dataclass(frozen=True)
class FetchedUpdate:
    """
    A chapter release as observed by an adapter, before storage assigns an id.

    read_at stays UNSET unless the producer knows the read marker; UNSET
    values are neither compared nor written.
    """

    crawl_target_id: uuid.UUID
    origin_id: str
    chapter: float
    chapter_name: str | None
    observed_on: datetime
    read_at: datetime | None | _Unset = UNSET


@dataclass(frozen=True)
class StoredUpdate:
    """
    A persisted chapter update.
    """

    update_id: uuid.UUID
    crawl_target_id: uuid.UUID
    origin_id: str
    chapter: float
    chapter_name: str | None
    observed_on: datetime
    read_at: datetime | None = None


@dataclass(frozen=True)
class FailureLogEntry:
    """
    One run-fatal error to persist.
    """

    context: str
    error_type: str
    message: str
    details: str | None = None


@dataclass(frozen=True)
class ReconcileResult:
    """
    Write counts for one target's reconciliation pass.
    """

    crawl_target_id: uuid.UUID
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    written: list[StoredUpdate] = field(default_factory=list)
