"""
Reconcile freshly fetched chapter releases against stored history.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from chapterwatch.crawling.errors import AmbiguousUpdateMatchError
from chapterwatch.crawling.limiter import BoundedQueue
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.precision import CHAPTER_PRECISION, precision_equals
from chapterwatch.crawling.storage import UpdateStorage
from chapterwatch.crawling.types import UNSET, FetchedUpdate, ReconcileResult, StoredUpdate

logger = logging.getLogger(__name__)


def is_related_update(
    stored: StoredUpdate,
    fetched: FetchedUpdate,
    *,
    precision: int = CHAPTER_PRECISION,
) -> bool:
    """
    True when both records describe the same logical chapter of the same target.
    """

    return (
        stored.crawl_target_id == fetched.crawl_target_id
        and stored.origin_id == fetched.origin_id
        and precision_equals(stored.chapter, fetched.chapter, precision)
    )


def diff_update(stored: StoredUpdate, fetched: FetchedUpdate) -> dict[str, Any]:
    """
    Return only the mutable fields whose fetched value differs from storage.

    origin_id, chapter and the owning target are never part of the result.
    """

    changes: dict[str, Any] = {}
    # Aware datetimes compare by instant regardless of offset.
    if stored.observed_on != fetched.observed_on:
        changes["observed_on"] = fetched.observed_on
    if stored.chapter_name != fetched.chapter_name:
        changes["chapter_name"] = fetched.chapter_name
    if fetched.read_at is not UNSET and stored.read_at != fetched.read_at:
        changes["read_at"] = fetched.read_at
    return changes


class UpdateReconciler:
    """
    Computes and schedules the minimal writes for one target's fetched batch.
    """

    def __init__(
        self,
        *,
        storage: UpdateStorage,
        write_queue: BoundedQueue,
        precision: int = CHAPTER_PRECISION,
    ) -> None:
        self._storage = storage
        self._write_queue = write_queue
        self._precision = precision

    def find_related(
        self,
        stored: Sequence[StoredUpdate],
        fetched: FetchedUpdate,
    ) -> StoredUpdate | None:
        candidates = [
            update
            for update in stored
            if is_related_update(update, fetched, precision=self._precision)
        ]
        if len(candidates) > 1:
            ids = ", ".join(str(candidate.update_id) for candidate in candidates)
            raise AmbiguousUpdateMatchError(
                f"origin_id='{fetched.origin_id}' chapter={fetched.chapter} matches "
                f"{len(candidates)} stored updates ({ids}) for crawl target "
                f"{fetched.crawl_target_id}."
            )
        return candidates[0] if candidates else None

    async def reconcile(
        self,
        crawl_target_id: uuid.UUID,
        stored: Sequence[StoredUpdate],
        fetched: Sequence[FetchedUpdate],
    ) -> ReconcileResult:
        """
        Insert unmatched releases, patch changed ones, skip the rest.

        ``stored`` must be read once before calling so writes scheduled here
        are never read back within the same pass. Every match is resolved
        before the first write is scheduled.
        """

        plan: list[tuple[FetchedUpdate, StoredUpdate | None, dict[str, Any]]] = []
        unchanged = 0
        for update in fetched:
            related = self.find_related(stored, update)
            if related is None:
                plan.append((update, None, {}))
                continue
            changes = diff_update(related, update)
            if not changes:
                unchanged += 1
                continue
            plan.append((update, related, changes))

        writes: list[asyncio.Task[StoredUpdate]] = []
        inserted = updated = 0
        for update, related, changes in plan:
            if related is None:
                writes.append(self._write_queue.schedule(self._storage.insert_update, update))
                inserted += 1
            else:
                writes.append(
                    self._write_queue.schedule(
                        self._storage.update_update,
                        related.update_id,
                        changes,
                    )
                )
                updated += 1

        results = await asyncio.gather(*writes, return_exceptions=True)
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            log_event(
                logger,
                logging.ERROR,
                "reconcile_writes_failed",
                crawl_target_id=crawl_target_id,
                failed=len(errors),
                scheduled=len(writes),
            )
            raise errors[0]

        log_event(
            logger,
            logging.INFO,
            "reconcile_completed",
            crawl_target_id=crawl_target_id,
            fetched=len(fetched),
            inserted=inserted,
            updated=updated,
            unchanged=unchanged,
        )
        return ReconcileResult(
            crawl_target_id=crawl_target_id,
            inserted=inserted,
            updated=updated,
            unchanged=unchanged,
            written=[result for result in results if isinstance(result, StoredUpdate)],
        )
