"""
Repository for run-fatal failure log entries.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from db.models.failure_log import FailureLog


class FailureLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self,
        *,
        context: str,
        error_type: str,
        message: str,
        details: str | None = None,
    ) -> FailureLog:
        entry = FailureLog(
            context=context,
            error_type=error_type,
            message=message,
            details=details,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry
