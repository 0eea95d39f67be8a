"""
Repository for crawl target lookup and crawl status persistence.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models.crawl_target import CrawlTarget
from db.repositories.errors import CrawlTargetNotFoundError


class CrawlTargetRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, crawl_target_id: uuid.UUID) -> CrawlTarget | None:
        return await self._session.get(CrawlTarget, crawl_target_id)

    async def list_targets(
        self,
        *,
        enabled_only: bool = True,
        names: Sequence[str] | None = None,
        adapters: Sequence[str] | None = None,
    ) -> list[CrawlTarget]:
        stmt: Select[tuple[CrawlTarget]] = select(CrawlTarget)

        if enabled_only:
            stmt = stmt.where(CrawlTarget.enabled.is_(True))
        if names:
            stmt = stmt.where(CrawlTarget.name.in_(list(names)))
        if adapters:
            stmt = stmt.where(CrawlTarget.adapter.in_(list(adapters)))

        stmt = stmt.order_by(CrawlTarget.name)
        return list((await self._session.scalars(stmt)).all())

    async def create(
        self,
        *,
        name: str,
        adapter: str,
        target_url: str,
        enabled: bool = True,
    ) -> CrawlTarget:
        target = CrawlTarget(
            name=name,
            adapter=adapter,
            target_url=target_url,
            enabled=enabled,
        )
        self._session.add(target)
        await self._session.flush()
        await self._session.refresh(target)
        return target

    async def mark_crawled(
        self,
        *,
        crawl_target_id: uuid.UUID,
        success: bool,
        crawled_on: datetime,
    ) -> CrawlTarget:
        target = await self.get(crawl_target_id)
        if target is None:
            raise CrawlTargetNotFoundError(f"Crawl target {crawl_target_id} does not exist.")
        target.crawl_success = success
        target.last_crawled_on = crawled_on
        return target
