"""
tests/helpers.py

Shared builders and fakes for crawl tests.

InMemoryUpdateStorage implements the storage interface over plain lists and
records every write so tests can assert on exactly what was persisted.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from chapterwatch.crawling.storage import UpdateStorage
from chapterwatch.crawling.types import (
    UNSET,
    CrawlTargetData,
    CrawlTargetFilter,
    FailureLogEntry,
    FetchedUpdate,
    StoredUpdate,
)

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 3, 8, 12, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 3, 9, 6, 30, tzinfo=timezone.utc)


class InMemoryUpdateStorage(UpdateStorage):
    def __init__(
        self,
        *,
        targets: list[CrawlTargetData] | None = None,
        updates: list[StoredUpdate] | None = None,
        write_delay: float = 0.0,
    ) -> None:
        self.targets = list(targets or [])
        self.updates = list(updates or [])
        self.write_delay = write_delay
        self.inserts: list[FetchedUpdate] = []
        self.patches: list[tuple[uuid.UUID, dict[str, Any]]] = []
        self.statuses: list[tuple[uuid.UUID, bool, datetime]] = []
        self.failure_logs: list[FailureLogEntry] = []
        self.list_updates_calls: list[uuid.UUID] = []
        self.list_error: Exception | None = None
        self.write_error: Exception | None = None
        self.failure_log_error: Exception | None = None
        self.status_errors: dict[uuid.UUID, Exception] = {}

    async def list_sources(self, filters: CrawlTargetFilter) -> list[CrawlTargetData]:
        if self.list_error is not None:
            raise self.list_error
        selected = [target for target in self.targets if target.enabled or not filters.enabled_only]
        if filters.names:
            selected = [target for target in selected if target.name in filters.names]
        if filters.adapters:
            selected = [target for target in selected if target.adapter in filters.adapters]
        return selected

    async def list_updates(self, crawl_target_id: uuid.UUID) -> list[StoredUpdate]:
        self.list_updates_calls.append(crawl_target_id)
        return [update for update in self.updates if update.crawl_target_id == crawl_target_id]

    async def insert_update(self, record: FetchedUpdate) -> StoredUpdate:
        await asyncio.sleep(self.write_delay)
        if self.write_error is not None:
            raise self.write_error
        self.inserts.append(record)
        stored = StoredUpdate(
            update_id=uuid.uuid4(),
            crawl_target_id=record.crawl_target_id,
            origin_id=record.origin_id,
            chapter=record.chapter,
            chapter_name=record.chapter_name,
            observed_on=record.observed_on,
            read_at=None if record.read_at is UNSET else record.read_at,
        )
        self.updates.append(stored)
        return stored

    async def update_update(self, update_id: uuid.UUID, fields: Mapping[str, Any]) -> StoredUpdate:
        await asyncio.sleep(self.write_delay)
        if self.write_error is not None:
            raise self.write_error
        self.patches.append((update_id, dict(fields)))
        for index, update in enumerate(self.updates):
            if update.update_id == update_id:
                self.updates[index] = replace(update, **fields)
                return self.updates[index]
        raise KeyError(update_id)

    async def update_source_status(
        self,
        crawl_target_id: uuid.UUID,
        *,
        success: bool,
        last_attempted_on: datetime,
    ) -> None:
        await asyncio.sleep(0)
        if crawl_target_id in self.status_errors:
            raise self.status_errors[crawl_target_id]
        self.statuses.append((crawl_target_id, success, last_attempted_on))

    async def append_failure_log(self, entry: FailureLogEntry) -> None:
        if self.failure_log_error is not None:
            raise self.failure_log_error
        self.failure_logs.append(entry)

    def status_for(self, crawl_target_id: uuid.UUID) -> list[bool]:
        return [success for target_id, success, _ in self.statuses if target_id == crawl_target_id]


def make_target(name: str, adapter: str = "webtoon", **overrides: Any) -> CrawlTargetData:
    values: dict[str, Any] = {
        "crawl_target_id": uuid.uuid4(),
        "name": name,
        "adapter": adapter,
        "target_url": f"https://example.com/{name}",
    }
    values.update(overrides)
    return CrawlTargetData(**values)


def make_stored(target: CrawlTargetData, origin_id: str, chapter: float, **overrides: Any) -> StoredUpdate:
    values: dict[str, Any] = {
        "update_id": uuid.uuid4(),
        "crawl_target_id": target.crawl_target_id,
        "origin_id": origin_id,
        "chapter": chapter,
        "chapter_name": f"Ch.{chapter:g}",
        "observed_on": T0,
        "read_at": None,
    }
    values.update(overrides)
    return StoredUpdate(**values)


def make_fetched(target: CrawlTargetData, origin_id: str, chapter: float, **overrides: Any) -> FetchedUpdate:
    values: dict[str, Any] = {
        "crawl_target_id": target.crawl_target_id,
        "origin_id": origin_id,
        "chapter": chapter,
        "chapter_name": f"Ch.{chapter:g}",
        "observed_on": T0,
    }
    values.update(overrides)
    return FetchedUpdate(**values)
