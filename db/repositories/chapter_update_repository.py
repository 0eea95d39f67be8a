"""
Repository for chapter update history reads and delta writes.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models.chapter_update import ChapterUpdate
from db.repositories.errors import UpdateNotFoundError

MUTABLE_FIELDS = frozenset({"observed_on", "chapter_name", "read_at"})


class ChapterUpdateRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_target(self, crawl_target_id: uuid.UUID) -> list[ChapterUpdate]:
        stmt: Select[tuple[ChapterUpdate]] = (
            select(ChapterUpdate)
            .where(ChapterUpdate.crawl_target_id == crawl_target_id)
            .order_by(ChapterUpdate.chapter.desc(), ChapterUpdate.created_at)
        )
        return list((await self._session.scalars(stmt)).all())

    async def insert(
        self,
        *,
        crawl_target_id: uuid.UUID,
        origin_id: str,
        chapter: float,
        chapter_name: str | None,
        observed_on: datetime,
        read_at: datetime | None = None,
    ) -> ChapterUpdate:
        row = ChapterUpdate(
            crawl_target_id=crawl_target_id,
            origin_id=origin_id,
            chapter=chapter,
            chapter_name=chapter_name,
            observed_on=observed_on,
            read_at=read_at,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def update_fields(
        self,
        *,
        update_id: uuid.UUID,
        fields: Mapping[str, Any],
    ) -> ChapterUpdate:
        """
        Apply a partial update restricted to the mutable columns.
        """

        illegal = set(fields) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Immutable chapter update fields cannot be changed: {sorted(illegal)}")

        row = await self._session.get(ChapterUpdate, update_id)
        if row is None:
            raise UpdateNotFoundError(f"Chapter update {update_id} does not exist.")
        for name, value in fields.items():
            setattr(row, name, value)
        await self._session.flush()
        return row
