"""
db/models/failure_log.py

Persisted record of a run-fatal crawl error.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class FailureLog(Base):
    __tablename__ = "failure_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    context: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Process that failed, e.g. crawl",
    )
    error_type: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_failure_logs_context", "context"),
        Index("ix_failure_logs_created_at", "created_at"),
    )
