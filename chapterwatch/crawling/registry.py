"""
Adapter registry and per-target fetch dispatch.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

import requests

from chapterwatch.config import CrawlSettings
from chapterwatch.crawling.adapters import CrawlerAdapter, MangadexAdapter, WebtoonAdapter
from chapterwatch.crawling.errors import UnknownAdapterError
from chapterwatch.crawling.types import CrawlTargetData, FetchedUpdate

FetchOperation = Callable[[], list[FetchedUpdate]]


class AdapterRegistry:
    """
    Maps a crawl target's adapter kind to the adapter that fetches it.
    """

    def __init__(
        self,
        *,
        settings: CrawlSettings,
        session: requests.Session | None = None,
        registrations: Mapping[str, CrawlerAdapter] | None = None,
    ) -> None:
        self._owns_session = session is None
        shared_session = session or requests.Session()
        self._session = shared_session
        builtins: dict[str, CrawlerAdapter] = {
            WebtoonAdapter.kind: WebtoonAdapter(settings=settings, session=shared_session),
            MangadexAdapter.kind: MangadexAdapter(settings=settings, session=shared_session),
        }
        if registrations:
            builtins.update(
                {kind.strip().lower(): adapter for kind, adapter in registrations.items()}
            )
        self._adapters = builtins

    def close(self) -> None:
        """
        Close the HTTP session when this registry created it.
        """

        if self._owns_session:
            self._session.close()

    def register(self, *, kind: str, adapter: CrawlerAdapter) -> None:
        self._adapters[kind.strip().lower()] = adapter

    def kinds(self) -> list[str]:
        return sorted(self._adapters)

    def resolve(self, target: CrawlTargetData) -> CrawlerAdapter:
        adapter = self._adapters.get((target.adapter or "").strip().lower())
        if adapter is None:
            allowed = ", ".join(self.kinds())
            raise UnknownAdapterError(
                f"Unknown adapter '{target.adapter}' found for crawl target '{target.name}'. "
                f"Allowed adapters: {allowed}."
            )
        return adapter

    def dispatch(self, target: CrawlTargetData, *, only_latest: bool = True) -> FetchOperation:
        """
        Return a deferred fetch for ``target``; nothing is requested until it is called.

        Raises UnknownAdapterError right away when the target's adapter kind
        has no registration.
        """

        adapter = self.resolve(target)

        def fetch() -> list[FetchedUpdate]:
            return adapter.fetch(target, only_latest=only_latest)

        return fetch
