"""
db/models/chapter_update.py

One observed chapter release for a crawl target.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ChapterUpdate(Base, TimestampMixin):
    __tablename__ = "chapter_updates"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    crawl_target_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("crawl_targets.id", ondelete="CASCADE"),
        nullable=False,
    )
    origin_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Identifier the source uses for this chapter",
    )
    chapter: Mapped[float] = mapped_column(Float, nullable=False)
    chapter_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    observed_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "crawl_target_id",
            "origin_id",
            "chapter",
            name="uq_chapter_updates_target_origin_chapter",
        ),
        Index("ix_chapter_updates_crawl_target_id", "crawl_target_id"),
    )
