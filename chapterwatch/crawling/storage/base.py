"""
Storage layer interface consumed by the crawl engine.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from chapterwatch.crawling.types import (
    CrawlTargetData,
    CrawlTargetFilter,
    FailureLogEntry,
    FetchedUpdate,
    StoredUpdate,
)


class UpdateStorage(ABC):
    """
    Storage abstraction for crawl targets, chapter history and failure logs.
    """

    @abstractmethod
    async def list_sources(self, filters: CrawlTargetFilter) -> list[CrawlTargetData]:
        """
        Return the crawl targets selected for a run.
        """

    @abstractmethod
    async def list_updates(self, crawl_target_id: uuid.UUID) -> list[StoredUpdate]:
        """
        Return every stored chapter update for one crawl target.
        """

    @abstractmethod
    async def insert_update(self, record: FetchedUpdate) -> StoredUpdate:
        """
        Persist a new chapter update and return it with its assigned id.
        """

    @abstractmethod
    async def update_update(self, update_id: uuid.UUID, fields: Mapping[str, Any]) -> StoredUpdate:
        """
        Apply a partial update of mutable fields to an existing chapter update.
        """

    @abstractmethod
    async def update_source_status(
        self,
        crawl_target_id: uuid.UUID,
        *,
        success: bool,
        last_attempted_on: datetime,
    ) -> None:
        """
        Record the outcome of the latest crawl attempt for one target.
        """

    @abstractmethod
    async def append_failure_log(self, entry: FailureLogEntry) -> None:
        """
        Persist one run-fatal error.
        """
