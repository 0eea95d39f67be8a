"""
Run one chapter crawl batch (or the periodic scheduler) from CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from chapterwatch.config import get_crawl_settings
from chapterwatch.scheduler.jobs import build_scheduler
from chapterwatch.services.crawl_service import ChapterCrawlService


def _configure_logging() -> None:
    """
    Configure root logging once for the crawl process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl tracked series for new chapters.")
    parser.add_argument(
        "--target",
        dest="targets",
        action="append",
        default=None,
        help="Crawl target name to include (repeatable). Defaults to every enabled target.",
    )
    parser.add_argument(
        "--adapter",
        dest="adapters",
        action="append",
        default=None,
        help="Adapter kind to include (repeatable), e.g. webtoon or mangadex.",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Run forever, crawling on CRAWL_SCHEDULE_CRON instead of once.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging()
    settings = get_crawl_settings()

    if args.schedule:
        scheduler = build_scheduler(settings)
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            scheduler.shutdown(wait=False)
        return 0

    service = ChapterCrawlService(settings=settings)
    result = asyncio.run(service.crawl(targets=args.targets, adapters=args.adapters))
    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
