"""
Base adapter abstraction for chapter sources.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

import requests

from chapterwatch.config import CrawlSettings
from chapterwatch.crawling.errors import AdapterFetchError
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.precision import precision_round
from chapterwatch.crawling.types import CrawlTargetData, FetchedUpdate

logger = logging.getLogger(__name__)


class CrawlerAdapter(ABC):
    """
    Fetches the chapter releases currently listed by one kind of source.

    Adapters are synchronous and make one request per page with no retries;
    the batch runner executes them in worker threads behind a per-kind queue.
    """

    kind: str = "base"

    def __init__(
        self,
        *,
        settings: CrawlSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.request_headers = {"User-Agent": settings.user_agent}

    def fetch(self, target: CrawlTargetData, *, only_latest: bool = True) -> list[FetchedUpdate]:
        updates = self.fetch_updates(target)
        if only_latest:
            updates = self.latest_only(updates, precision=self.settings.chapter_precision)
        log_event(
            logger,
            logging.INFO,
            "adapter_fetch_completed",
            adapter=self.kind,
            crawl_target=target.name,
            records=len(updates),
            only_latest=only_latest,
        )
        return updates

    @abstractmethod
    def fetch_updates(self, target: CrawlTargetData) -> list[FetchedUpdate]:
        """
        Return every chapter release the source currently lists for ``target``.
        """

    @staticmethod
    def latest_only(updates: Sequence[FetchedUpdate], *, precision: int) -> list[FetchedUpdate]:
        """
        Keep the release(s) carrying the highest chapter number.
        """

        if not updates:
            return []
        highest = max(precision_round(update.chapter, precision) for update in updates)
        return [
            update
            for update in updates
            if precision_round(update.chapter, precision) == highest
        ]

    def _get(self, url: str, *, params: dict[str, object] | None = None) -> requests.Response:
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.request_headers,
                timeout=self.settings.timeout_seconds,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise AdapterFetchError(f"{self.kind} request failed url={url}: {exc}") from exc
        return response
