"""
Chapter crawl batch engine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from chapterwatch.config import CrawlSettings
from chapterwatch.crawling.errors import CrawlTargetError
from chapterwatch.crawling.limiter import QueueRegistry
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.reconciler import UpdateReconciler
from chapterwatch.crawling.registry import AdapterRegistry
from chapterwatch.crawling.storage import UpdateStorage
from chapterwatch.crawling.types import CrawlTargetData, CrawlTargetFilter, ReconcileResult
from chapterwatch.domain.crawl import (
    TERMINAL_STATES,
    CrawlRunResult,
    CrawlTargetState,
    CrawlTargetSummary,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _TargetRun:
    """
    Mutable per-run state for one crawl target.
    """

    target: CrawlTargetData
    state: str = CrawlTargetState.PENDING
    records_fetched: int = 0
    result: ReconcileResult | None = None
    failure: CrawlTargetError | None = None

    def advance(self, state: str) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(
                f"Crawl target '{self.target.name}' already {self.state}; cannot move to {state}."
            )
        self.state = state
        log_event(
            logger,
            logging.DEBUG,
            "crawl_target_state",
            crawl_target=self.target.name,
            state=state,
        )

    def summary(self) -> CrawlTargetSummary:
        result = self.result
        return CrawlTargetSummary(
            crawl_target_id=self.target.crawl_target_id,
            name=self.target.name,
            adapter=self.target.adapter,
            status=self.state,
            records_fetched=self.records_fetched,
            inserted=result.inserted if result else 0,
            updated=result.updated if result else 0,
            unchanged=result.unchanged if result else 0,
            error=str(self.failure.cause) if self.failure else None,
        )


class ChapterCrawlEngine:
    """
    Runs every selected crawl target through fetch and reconcile, concurrently.

    A target's failure is recorded on that target only; the batch completes
    as long as the targets could be listed and every failure could be marked.
    """

    def __init__(
        self,
        *,
        settings: CrawlSettings,
        storage: UpdateStorage,
        registry: AdapterRegistry | None = None,
        queues: QueueRegistry | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._registry = registry or AdapterRegistry(settings=settings)
        self._queues = queues or QueueRegistry(
            fetch_concurrency=settings.fetch_concurrency,
            write_concurrency=settings.write_concurrency,
        )
        self._clock = clock
        self._reconciler = UpdateReconciler(
            storage=storage,
            write_queue=self._queues.write_queue,
            precision=settings.chapter_precision,
        )

    @property
    def queues(self) -> QueueRegistry:
        return self._queues

    async def run(
        self,
        *,
        targets: Sequence[str] | None = None,
        adapters: Sequence[str] | None = None,
    ) -> CrawlRunResult:
        started_at = self._clock()
        log_event(logger, logging.INFO, "crawl_batch_started")

        selected = await self._storage.list_sources(
            CrawlTargetFilter(
                enabled_only=True,
                names=self._normalize(targets),
                adapters=tuple(kind.lower() for kind in self._normalize(adapters)),
            )
        )
        log_event(logger, logging.INFO, "crawl_targets_listed", count=len(selected))

        runs = [_TargetRun(target=target) for target in selected]
        await asyncio.gather(*(self.run_target(run) for run in runs))

        failed_runs = [run for run in runs if run.failure is not None]
        for run in failed_runs:
            log_event(
                logger,
                logging.ERROR,
                "crawl_target_failed",
                exc_info=run.failure.cause,
                crawl_target=run.target.name,
                crawl_target_id=run.target.crawl_target_id,
                adapter=run.target.adapter,
                error_type=type(run.failure.cause).__name__,
                error=str(run.failure.cause),
            )
        await self._mark_failed(failed_runs)

        result = CrawlRunResult(
            started_at=started_at,
            finished_at=self._clock(),
            summaries=[run.summary() for run in runs],
        )
        log_event(
            logger,
            logging.INFO,
            "crawl_batch_completed",
            targets=len(result.summaries),
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def run_target(self, run: _TargetRun) -> None:
        """
        Fetch, reconcile and mark one target; never raises.
        """

        target = run.target
        try:
            fetch = self._registry.dispatch(target, only_latest=self._settings.only_latest)

            run.advance(CrawlTargetState.FETCHING)
            fetch_queue = self._queues.fetch_queue(target.adapter.strip().lower())
            fetched = await fetch_queue.schedule(fetch)
            run.records_fetched = len(fetched)

            run.advance(CrawlTargetState.RECONCILING)
            log_event(
                logger,
                logging.INFO,
                "crawl_target_reconciling",
                crawl_target=target.name,
                fetched=len(fetched),
            )
            stored = await self._storage.list_updates(target.crawl_target_id)
            run.result = await self._reconciler.reconcile(target.crawl_target_id, stored, fetched)

            await self._storage.update_source_status(
                target.crawl_target_id,
                success=True,
                last_attempted_on=self._clock(),
            )
            run.advance(CrawlTargetState.SUCCEEDED)
            log_event(
                logger,
                logging.INFO,
                "crawl_target_succeeded",
                crawl_target=target.name,
                inserted=run.result.inserted,
                updated=run.result.updated,
                unchanged=run.result.unchanged,
            )
        except Exception as exc:
            run.failure = CrawlTargetError(target, exc)
            run.state = CrawlTargetState.FAILED

    async def _mark_failed(self, runs: Sequence[_TargetRun]) -> None:
        """
        Attempt every failure mark, then re-raise the first one that failed.
        """

        attempted_on = self._clock()
        results = await asyncio.gather(
            *(
                self._storage.update_source_status(
                    run.target.crawl_target_id,
                    success=False,
                    last_attempted_on=attempted_on,
                )
                for run in runs
            ),
            return_exceptions=True,
        )
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            log_event(
                logger,
                logging.ERROR,
                "crawl_failure_marks_failed",
                failed=len(errors),
                attempted=len(runs),
            )
            raise errors[0]

    @staticmethod
    def _normalize(values: Sequence[str] | None) -> tuple[str, ...]:
        if not values:
            return ()
        return tuple(value.strip() for value in values if value and value.strip())
