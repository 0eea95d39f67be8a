"""
chapterwatch/scheduler/jobs.py

APScheduler-based periodic chapter crawl.

Schedule
--------
  crawl_updates: cron expression from ``CRAWL_SCHEDULE_CRON`` (UTC),
                 every 30 minutes by default.

Each trigger runs one full batch. A failed batch is logged and the scheduler
keeps running; the next trigger is the next attempt.
"""

from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from chapterwatch.config import CrawlSettings, get_crawl_settings
from chapterwatch.services.crawl_service import ChapterCrawlService

logger = logging.getLogger(__name__)


def run_crawl_updates(settings: CrawlSettings | None = None) -> None:
    """
    Run one crawl batch on a fresh event loop.
    """
    logger.info("Scheduler: crawl_updates starting")
    try:
        result = asyncio.run(ChapterCrawlService(settings=settings).crawl())
    except Exception as exc:  # noqa: BLE001
        logger.error("Scheduler: crawl_updates failed: %s", exc)
        return
    logger.info(
        "Scheduler: crawl_updates complete targets=%s succeeded=%s failed=%s",
        len(result.summaries),
        len(result.succeeded),
        len(result.failed),
    )


def build_scheduler(settings: CrawlSettings | None = None) -> BlockingScheduler:
    """
    Build the crawl scheduler.

    Returns a configured but *not yet started* ``BlockingScheduler``; the
    caller's ``.start()`` blocks until shutdown.
    """
    settings = settings or get_crawl_settings()
    scheduler = BlockingScheduler(timezone="UTC")

    scheduler.add_job(
        run_crawl_updates,
        trigger=CronTrigger.from_crontab(settings.schedule_cron, timezone="UTC"),
        kwargs={"settings": settings},
        id="crawl_updates",
        name="Chapter update crawl",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=600,
    )

    return scheduler
