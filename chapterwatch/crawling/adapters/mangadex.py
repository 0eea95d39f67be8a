"""
Adapter for the MangaDex chapter feed API.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from chapterwatch.crawling.adapters.base import CrawlerAdapter
from chapterwatch.crawling.errors import AdapterFetchError, CrawlConfigurationError
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.types import CrawlTargetData, FetchedUpdate
from chapterwatch.schemas.mangadex import MangadexChapter, MangadexFeedResponse

logger = logging.getLogger(__name__)

MANGA_ID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


class MangadexAdapter(CrawlerAdapter):
    """
    Reads ``/manga/{id}/feed`` ordered by chapter, newest first.

    ``target_url`` is either the bare manga UUID or a title URL containing it.
    """

    kind = "mangadex"

    def fetch_updates(self, target: CrawlTargetData) -> list[FetchedUpdate]:
        manga_id = self.manga_id(target)
        response = self._get(
            f"{self.settings.mangadex_base_url}/manga/{manga_id}/feed",
            params={
                "translatedLanguage[]": [self.settings.mangadex_language],
                "order[chapter]": "desc",
                "limit": self.settings.mangadex_feed_limit,
            },
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise AdapterFetchError(
                f"MangaDex returned a non-JSON body for crawl target '{target.name}'."
            ) from exc
        return self.parse_feed(payload, target=target, observed_at=datetime.now(timezone.utc))

    @staticmethod
    def manga_id(target: CrawlTargetData) -> str:
        match = MANGA_ID_RE.search(target.target_url)
        if match is None:
            raise CrawlConfigurationError(
                f"Crawl target '{target.name}' has no MangaDex manga id in "
                f"target_url='{target.target_url}'."
            )
        return match.group(0).lower()

    def parse_feed(
        self,
        payload: Any,
        *,
        target: CrawlTargetData,
        observed_at: datetime,
    ) -> list[FetchedUpdate]:
        try:
            feed = MangadexFeedResponse.model_validate(payload)
        except ValidationError as exc:
            raise AdapterFetchError(
                f"Unexpected MangaDex feed payload for crawl target '{target.name}': {exc}"
            ) from exc
        if feed.result != "ok":
            raise AdapterFetchError(
                f"MangaDex feed result='{feed.result}' for crawl target '{target.name}'."
            )

        updates: list[FetchedUpdate] = []
        for entry in feed.data:
            chapter = self._chapter_number(entry)
            if chapter is None:
                log_event(
                    logger,
                    logging.DEBUG,
                    "mangadex_chapter_skipped",
                    crawl_target=target.name,
                    origin_id=entry.id,
                    chapter=entry.attributes.chapter,
                )
                continue
            updates.append(
                FetchedUpdate(
                    crawl_target_id=target.crawl_target_id,
                    origin_id=entry.id,
                    chapter=chapter,
                    chapter_name=self._chapter_name(entry),
                    observed_on=observed_at,
                )
            )
        return updates

    @staticmethod
    def _chapter_number(entry: MangadexChapter) -> float | None:
        raw = (entry.attributes.chapter or "").strip()
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError:
            return None

    @staticmethod
    def _chapter_name(entry: MangadexChapter) -> str:
        label = f"Ch. {entry.attributes.chapter.strip()}" if entry.attributes.chapter else "Ch."
        title = (entry.attributes.title or "").strip()
        return f"{label} - {title}" if title else label
