"""
chapterwatch/services/crawl_service.py

Service orchestration for one chapter crawl batch.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Sequence

from chapterwatch.config import CrawlSettings, get_crawl_settings
from chapterwatch.crawling.engine import ChapterCrawlEngine
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.registry import AdapterRegistry
from chapterwatch.crawling.storage import SQLAlchemyUpdateStorage, UpdateStorage
from chapterwatch.crawling.types import FailureLogEntry
from chapterwatch.domain.crawl import CrawlRunResult
from db.session import dispose_engine, get_session_factory

logger = logging.getLogger(__name__)

FAILURE_CONTEXT = "crawl"


class ChapterCrawlService:
    """
    Builds the engine over database storage and runs one batch to completion.
    """

    def __init__(
        self,
        *,
        settings: CrawlSettings | None = None,
        storage: UpdateStorage | None = None,
    ) -> None:
        self._settings = settings or get_crawl_settings()
        self._storage = storage

    async def crawl(
        self,
        *,
        targets: Sequence[str] | None = None,
        adapters: Sequence[str] | None = None,
    ) -> CrawlRunResult:
        """
        Run one batch; errors outside a target's pipeline are logged, recorded
        as a failure log entry where possible, and re-raised.
        """

        storage: UpdateStorage | None = self._storage
        registry = AdapterRegistry(settings=self._settings)
        try:
            if storage is None:
                storage = SQLAlchemyUpdateStorage(session_factory=get_session_factory())
            engine = ChapterCrawlEngine(settings=self._settings, storage=storage, registry=registry)
            return await engine.run(targets=targets, adapters=adapters)
        except Exception as exc:
            log_event(
                logger,
                logging.CRITICAL,
                "crawl_batch_fatal",
                exc_info=exc,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            if storage is not None:
                await record_failure(storage, exc)
            raise
        finally:
            registry.close()
            if self._storage is None:
                await dispose_engine()


async def record_failure(storage: UpdateStorage, exc: BaseException) -> bool:
    """
    Best-effort persistence of a run-fatal error; never raises.
    """

    entry = FailureLogEntry(
        context=FAILURE_CONTEXT,
        error_type=type(exc).__name__,
        message=str(exc) or type(exc).__name__,
        details="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )
    try:
        await storage.append_failure_log(entry)
    except Exception as log_exc:  # noqa: BLE001
        log_event(
            logger,
            logging.ERROR,
            "failure_log_write_failed",
            error_type=type(log_exc).__name__,
            error=str(log_exc),
        )
        return False
    return True
