"""
tests/test_engine.py

Batch orchestration: per-target isolation, status marking and run-fatal errors.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

import pytest

from chapterwatch.config import CrawlSettings
from chapterwatch.crawling.adapters.base import CrawlerAdapter
from chapterwatch.crawling.engine import ChapterCrawlEngine
from chapterwatch.crawling.errors import AdapterFetchError
from chapterwatch.crawling.limiter import QueueRegistry
from chapterwatch.crawling.registry import AdapterRegistry
from chapterwatch.crawling.types import CrawlTargetData, FetchedUpdate
from chapterwatch.domain.crawl import CrawlTargetState
from tests.helpers import NOW, T1, InMemoryUpdateStorage, make_fetched, make_stored, make_target


class StubAdapter(CrawlerAdapter):
    """
    Adapter whose results are produced by a per-target callable.
    """

    def __init__(
        self,
        kind: str,
        settings: CrawlSettings,
        handlers: dict[str, Callable[[CrawlTargetData], list[FetchedUpdate]]],
    ) -> None:
        super().__init__(settings=settings)
        self.kind = kind
        self.handlers = handlers
        self.calls: list[str] = []
        self._lock = threading.Lock()
        self.active = 0
        self.peak_active = 0

    def fetch_updates(self, target: CrawlTargetData) -> list[FetchedUpdate]:
        with self._lock:
            self.calls.append(target.name)
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
        try:
            return self.handlers[target.name](target)
        finally:
            with self._lock:
                self.active -= 1


def _engine(
    settings: CrawlSettings,
    storage: InMemoryUpdateStorage,
    adapters: dict[str, CrawlerAdapter],
) -> ChapterCrawlEngine:
    registry = AdapterRegistry(settings=settings, registrations=adapters)
    return ChapterCrawlEngine(
        settings=settings,
        storage=storage,
        registry=registry,
        queues=QueueRegistry(fetch_concurrency=1, write_concurrency=50),
        clock=lambda: NOW,
    )


def _raise(exc: Exception) -> Callable[[CrawlTargetData], list[FetchedUpdate]]:
    def handler(target: CrawlTargetData) -> list[FetchedUpdate]:
        raise exc

    return handler


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


class TestIsolation:
    def test_failing_target_does_not_affect_others(self, settings: CrawlSettings) -> None:
        broken = make_target("A", adapter="stub")
        healthy = make_target("B", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[broken, healthy])
        adapter = StubAdapter(
            "stub",
            settings,
            {
                "A": _raise(AdapterFetchError("upstream 503")),
                "B": lambda target: [make_fetched(target, "b1", 1.0)],
            },
        )

        result = asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        statuses = {summary.name: summary.status for summary in result.summaries}
        assert statuses == {"A": CrawlTargetState.FAILED, "B": CrawlTargetState.SUCCEEDED}
        assert storage.status_for(broken.crawl_target_id) == [False]
        assert storage.status_for(healthy.crawl_target_id) == [True]
        assert [record.origin_id for record in storage.inserts] == ["b1"]
        assert all(attempted == NOW for _, _, attempted in storage.statuses)
        failed = result.failed[0]
        assert failed.name == "A"
        assert "upstream 503" in (failed.error or "")

    def test_unknown_adapter_fails_only_that_target(self, settings: CrawlSettings) -> None:
        misconfigured = make_target("mystery", adapter="tapas")
        healthy = make_target("tower", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[misconfigured, healthy])
        adapter = StubAdapter("stub", settings, {"tower": lambda target: []})

        result = asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        assert storage.status_for(misconfigured.crawl_target_id) == [False]
        assert storage.status_for(healthy.crawl_target_id) == [True]
        summary = next(s for s in result.summaries if s.name == "mystery")
        assert "Unknown adapter 'tapas'" in (summary.error or "")
        assert "mystery" in (summary.error or "")

    def test_write_failure_marks_target_failed(self, settings: CrawlSettings) -> None:
        target = make_target("tower", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[target])
        storage.write_error = RuntimeError("constraint violated")
        adapter = StubAdapter("stub", settings, {"tower": lambda t: [make_fetched(t, "c1", 1.0)]})

        result = asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        assert result.summaries[0].status == CrawlTargetState.FAILED
        assert storage.status_for(target.crawl_target_id) == [False]

    def test_slow_target_is_not_cancelled_by_a_sibling_failure(self, settings: CrawlSettings) -> None:
        slow = make_target("slow", adapter="slowkind")
        broken = make_target("broken", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[slow, broken])
        release = threading.Event()

        def slow_fetch(target: CrawlTargetData) -> list[FetchedUpdate]:
            release.wait(timeout=2)
            return [make_fetched(target, "s1", 1.0)]

        def broken_fetch(target: CrawlTargetData) -> list[FetchedUpdate]:
            try:
                raise AdapterFetchError("parse failed")
            finally:
                release.set()

        adapters = {
            "slowkind": StubAdapter("slowkind", settings, {"slow": slow_fetch}),
            "stub": StubAdapter("stub", settings, {"broken": broken_fetch}),
        }

        result = asyncio.run(_engine(settings, storage, adapters).run())

        statuses = {summary.name: summary.status for summary in result.summaries}
        assert statuses == {"slow": CrawlTargetState.SUCCEEDED, "broken": CrawlTargetState.FAILED}
        assert [record.origin_id for record in storage.inserts] == ["s1"]


# ---------------------------------------------------------------------------
# Pipeline behavior
# ---------------------------------------------------------------------------


class TestPipeline:
    def test_reconciles_against_stored_history(self, settings: CrawlSettings) -> None:
        target = make_target("S1", adapter="stub")
        existing = make_stored(target, "c10", 10.0, chapter_name="Ch.10")
        storage = InMemoryUpdateStorage(targets=[target], updates=[existing])
        adapter = StubAdapter(
            "stub",
            settings,
            {"S1": lambda t: [make_fetched(t, "c10", 10.04, chapter_name="Ch.10", observed_on=T1)]},
        )

        result = asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        summary = result.summaries[0]
        assert (summary.records_fetched, summary.inserted, summary.updated) == (1, 0, 1)
        assert storage.patches == [(existing.update_id, {"observed_on": T1})]
        assert storage.list_updates_calls == [target.crawl_target_id]
        payload = result.to_dict()
        assert (payload["targets"], payload["succeeded"], payload["failed"]) == (1, 1, 0)
        assert payload["summaries"][0]["crawl_target_id"] == str(target.crawl_target_id)

    def test_same_adapter_fetches_are_serialized(self, settings: CrawlSettings) -> None:
        targets = [make_target(f"series-{n}", adapter="stub") for n in range(6)]
        storage = InMemoryUpdateStorage(targets=targets)

        def fetch(target: CrawlTargetData) -> list[FetchedUpdate]:
            threading.Event().wait(0.005)
            return [make_fetched(target, "c1", 1.0)]

        adapter = StubAdapter("stub", settings, {target.name: fetch for target in targets})

        result = asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        assert len(result.succeeded) == 6
        assert adapter.peak_active == 1
        assert adapter.calls == [target.name for target in targets]

    def test_only_latest_chapter_is_reconciled(self, settings: CrawlSettings) -> None:
        target = make_target("tower", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[target])
        adapter = StubAdapter(
            "stub",
            settings,
            {"tower": lambda t: [make_fetched(t, f"c{n}", float(n)) for n in (3, 5, 4)]},
        )

        asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        assert [record.origin_id for record in storage.inserts] == ["c5"]

    def test_filters_targets_by_name_and_adapter(self, settings: CrawlSettings) -> None:
        first = make_target("first", adapter="stub")
        second = make_target("second", adapter="stub")
        disabled = make_target("third", adapter="stub", enabled=False)
        storage = InMemoryUpdateStorage(targets=[first, second, disabled])
        adapter = StubAdapter("stub", settings, {name: lambda t: [] for name in ("first", "second", "third")})
        engine = _engine(settings, storage, {"stub": adapter})

        result = asyncio.run(engine.run(targets=[" second "], adapters=["STUB"]))

        assert [summary.name for summary in result.summaries] == ["second"]
        assert adapter.calls == ["second"]

    def test_empty_target_list_completes(self, settings: CrawlSettings) -> None:
        result = asyncio.run(_engine(settings, InMemoryUpdateStorage(), {}).run())
        assert result.summaries == []
        assert result.finished_at == NOW


# ---------------------------------------------------------------------------
# Run-fatal errors
# ---------------------------------------------------------------------------


class TestRunFatal:
    def test_listing_failure_propagates(self, settings: CrawlSettings) -> None:
        storage = InMemoryUpdateStorage()
        storage.list_error = ConnectionError("database unreachable")

        with pytest.raises(ConnectionError):
            asyncio.run(_engine(settings, storage, {}).run())
        assert storage.statuses == []

    def test_every_failure_is_logged_and_marked_before_a_mark_error_propagates(
        self,
        settings: CrawlSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        first = make_target("a", adapter="tapas")
        second = make_target("b", adapter="tapas")
        storage = InMemoryUpdateStorage(targets=[first, second])
        storage.status_errors[first.crawl_target_id] = ConnectionError("status write lost")

        with caplog.at_level(logging.ERROR, logger="chapterwatch.crawling.engine"):
            with pytest.raises(ConnectionError, match="status write lost"):
                asyncio.run(_engine(settings, storage, {}).run())

        assert storage.status_for(second.crawl_target_id) == [False]
        failed_events = [record for record in caplog.records if "crawl_target_failed" in record.getMessage()]
        assert len(failed_events) == 2
        assert '"crawl_target": "a"' in failed_events[0].getMessage()
        assert '"crawl_target": "b"' in failed_events[1].getMessage()

    def test_failure_log_lines_carry_the_traceback(
        self,
        settings: CrawlSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        target = make_target("tower", adapter="stub")
        storage = InMemoryUpdateStorage(targets=[target])
        adapter = StubAdapter("stub", settings, {"tower": _raise(AdapterFetchError("upstream 503"))})

        with caplog.at_level(logging.ERROR, logger="chapterwatch.crawling.engine"):
            asyncio.run(_engine(settings, storage, {"stub": adapter}).run())

        (record,) = [record for record in caplog.records if "crawl_target_failed" in record.getMessage()]
        assert record.exc_info is not None
        assert record.exc_info[0] is AdapterFetchError
        assert "upstream 503" in caplog.text
        assert "Traceback" in caplog.text
