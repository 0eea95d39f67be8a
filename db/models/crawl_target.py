"""
db/models/crawl_target.py

Crawl target model: one tracked series feed and the adapter that crawls it.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CrawlTarget(Base, TimestampMixin):
    """
    A series tracked on one external source.

    crawl_success and last_crawled_on record the outcome of the most recent
    batch run and are written exactly once per run.
    """

    __tablename__ = "crawl_targets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    adapter: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="webtoon, mangadex",
    )
    target_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Series page URL or source-specific series identifier",
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    crawl_success: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    last_crawled_on: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_crawl_targets_adapter", "adapter"),
        Index("ix_crawl_targets_enabled", "enabled"),
    )
