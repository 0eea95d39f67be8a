"""
Adapter for WEBTOON series episode lists.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup, Tag

from chapterwatch.crawling.adapters.base import CrawlerAdapter
from chapterwatch.crawling.errors import AdapterFetchError
from chapterwatch.crawling.logging_utils import log_event
from chapterwatch.crawling.types import CrawlTargetData, FetchedUpdate

logger = logging.getLogger(__name__)

EPISODE_NUMBER_RE = re.compile(r"#\s*(\d+(?:\.\d+)?)")


class WebtoonAdapter(CrawlerAdapter):
    """
    Parses the ``li._episodeItem`` rows of a series list page.

    ``target_url`` is the list page, e.g.
    ``https://www.webtoons.com/en/fantasy/tower-of-god/list?title_no=95``.
    """

    kind = "webtoon"

    def fetch_updates(self, target: CrawlTargetData) -> list[FetchedUpdate]:
        response = self._get(target.target_url)
        return self.parse_episode_list(
            response.text,
            target=target,
            observed_at=datetime.now(timezone.utc),
        )

    def parse_episode_list(
        self,
        html: str,
        *,
        target: CrawlTargetData,
        observed_at: datetime,
    ) -> list[FetchedUpdate]:
        soup = BeautifulSoup(html, "html.parser")
        items = soup.select("li._episodeItem")
        if not items:
            raise AdapterFetchError(
                f"No episodes found on webtoon list page for crawl target '{target.name}'."
            )

        updates: list[FetchedUpdate] = []
        for item in items:
            origin_id = str(item.get("data-episode-no") or "").strip()
            chapter = self._episode_number(item, fallback=origin_id)
            if not origin_id or chapter is None:
                log_event(
                    logger,
                    logging.WARNING,
                    "webtoon_episode_skipped",
                    crawl_target=target.name,
                    origin_id=origin_id or None,
                )
                continue

            updates.append(
                FetchedUpdate(
                    crawl_target_id=target.crawl_target_id,
                    origin_id=origin_id,
                    chapter=chapter,
                    chapter_name=self._text(item, "span.subj") or None,
                    observed_on=observed_at,
                )
            )
        return updates

    @staticmethod
    def _text(item: Tag, selector: str) -> str:
        node = item.select_one(selector)
        if node is None:
            return ""
        return " ".join(node.get_text(" ", strip=True).split())

    def _episode_number(self, item: Tag, *, fallback: str) -> float | None:
        match = EPISODE_NUMBER_RE.search(self._text(item, "span.tx"))
        raw = match.group(1) if match else fallback
        try:
            return float(raw)
        except (TypeError, ValueError):
            return None
