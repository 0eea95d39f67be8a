"""
tests/test_scheduler.py
"""

from __future__ import annotations

import logging

import pytest
from apscheduler.triggers.cron import CronTrigger

from chapterwatch.config import CrawlSettings
from chapterwatch.scheduler import jobs


class TestBuildScheduler:
    def test_registers_single_crawl_job(self) -> None:
        scheduler = jobs.build_scheduler(CrawlSettings(schedule_cron="15 */2 * * *"))

        job = scheduler.get_job("crawl_updates")

        assert job is not None
        assert isinstance(job.trigger, CronTrigger)
        assert "minute='15'" in str(job.trigger)
        assert job.max_instances == 1
        assert job.coalesce is True
        assert len(scheduler.get_jobs()) == 1
        assert scheduler.running is False


class TestRunCrawlUpdates:
    def test_failed_batch_is_logged_not_raised(
        self,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        class ExplodingService:
            def __init__(self, **kwargs: object) -> None:
                pass

            async def crawl(self) -> None:
                raise ConnectionError("database unreachable")

        monkeypatch.setattr(jobs, "ChapterCrawlService", ExplodingService)

        with caplog.at_level(logging.ERROR, logger=jobs.__name__):
            jobs.run_crawl_updates(CrawlSettings())

        assert "database unreachable" in caplog.text
