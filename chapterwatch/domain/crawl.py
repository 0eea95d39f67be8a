"""
chapterwatch/domain/crawl.py

Domain models for crawl batch orchestration.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


class CrawlTargetState:
    PENDING = "pending"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({CrawlTargetState.SUCCEEDED, CrawlTargetState.FAILED})


@dataclass(frozen=True)
class CrawlTargetSummary:
    """
    Outcome for one crawl target in one batch run.
    """

    crawl_target_id: uuid.UUID
    name: str
    adapter: str
    status: str
    records_fetched: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == CrawlTargetState.SUCCEEDED

    def to_dict(self) -> dict[str, object]:
        return {
            "crawl_target_id": str(self.crawl_target_id),
            "name": self.name,
            "adapter": self.adapter,
            "status": self.status,
            "records_fetched": self.records_fetched,
            "inserted": self.inserted,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "error": self.error,
        }


@dataclass(frozen=True)
class CrawlRunResult:
    """
    End-of-run summary across every crawl target.
    """

    started_at: datetime
    finished_at: datetime
    summaries: list[CrawlTargetSummary] = field(default_factory=list)

    @property
    def failed(self) -> list[CrawlTargetSummary]:
        return [summary for summary in self.summaries if not summary.succeeded]

    @property
    def succeeded(self) -> list[CrawlTargetSummary]:
        return [summary for summary in self.summaries if summary.succeeded]

    def to_dict(self) -> dict[str, object]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "targets": len(self.summaries),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "summaries": [summary.to_dict() for summary in self.summaries],
        }
