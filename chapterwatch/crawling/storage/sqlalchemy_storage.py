"""
SQLAlchemy-backed storage implementation for crawl history.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chapterwatch.crawling.storage.base import UpdateStorage
from chapterwatch.crawling.types import (
    UNSET,
    CrawlTargetData,
    CrawlTargetFilter,
    FailureLogEntry,
    FetchedUpdate,
    StoredUpdate,
)
from db.models.chapter_update import ChapterUpdate
from db.models.crawl_target import CrawlTarget
from db.repositories import ChapterUpdateRepository, CrawlTargetRepository, FailureLogRepository


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back out.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_target(row: CrawlTarget) -> CrawlTargetData:
    return CrawlTargetData(
        crawl_target_id=row.id,
        name=row.name,
        adapter=row.adapter,
        target_url=row.target_url,
        enabled=row.enabled,
        crawl_success=row.crawl_success,
        last_crawled_on=_as_utc(row.last_crawled_on),
    )


def _to_update(row: ChapterUpdate) -> StoredUpdate:
    return StoredUpdate(
        update_id=row.id,
        crawl_target_id=row.crawl_target_id,
        origin_id=row.origin_id,
        chapter=row.chapter,
        chapter_name=row.chapter_name,
        observed_on=_as_utc(row.observed_on),
        read_at=_as_utc(row.read_at),
    )


class SQLAlchemyUpdateStorage(UpdateStorage):
    """
    Persist crawl results through the repositories, one short session per call.

    Each call commits on its own so concurrent writes from the write queue
    never share a session.
    """

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_sources(self, filters: CrawlTargetFilter) -> list[CrawlTargetData]:
        async with self._session_factory() as session:
            rows = await CrawlTargetRepository(session).list_targets(
                enabled_only=filters.enabled_only,
                names=filters.names,
                adapters=filters.adapters,
            )
            return [_to_target(row) for row in rows]

    async def list_updates(self, crawl_target_id: uuid.UUID) -> list[StoredUpdate]:
        async with self._session_factory() as session:
            rows = await ChapterUpdateRepository(session).list_for_target(crawl_target_id)
            return [_to_update(row) for row in rows]

    async def insert_update(self, record: FetchedUpdate) -> StoredUpdate:
        async with self._session_factory() as session:
            try:
                row = await ChapterUpdateRepository(session).insert(
                    crawl_target_id=record.crawl_target_id,
                    origin_id=record.origin_id,
                    chapter=record.chapter,
                    chapter_name=record.chapter_name,
                    observed_on=record.observed_on,
                    read_at=None if record.read_at is UNSET else record.read_at,
                )
                stored = _to_update(row)
                await session.commit()
                return stored
            except SQLAlchemyError:
                await session.rollback()
                raise

    async def update_update(self, update_id: uuid.UUID, fields: Mapping[str, Any]) -> StoredUpdate:
        async with self._session_factory() as session:
            try:
                row = await ChapterUpdateRepository(session).update_fields(
                    update_id=update_id,
                    fields=fields,
                )
                stored = _to_update(row)
                await session.commit()
                return stored
            except SQLAlchemyError:
                await session.rollback()
                raise

    async def update_source_status(
        self,
        crawl_target_id: uuid.UUID,
        *,
        success: bool,
        last_attempted_on: datetime,
    ) -> None:
        async with self._session_factory() as session:
            try:
                await CrawlTargetRepository(session).mark_crawled(
                    crawl_target_id=crawl_target_id,
                    success=success,
                    crawled_on=last_attempted_on,
                )
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise

    async def append_failure_log(self, entry: FailureLogEntry) -> None:
        async with self._session_factory() as session:
            try:
                await FailureLogRepository(session).append(
                    context=entry.context,
                    error_type=entry.error_type,
                    message=entry.message,
                    details=entry.details,
                )
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise
