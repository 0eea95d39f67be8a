"""
chapterwatch/config.py

Application-level configuration helpers for the crawl runner.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class CrawlSettings:
    """
    Runtime settings for one crawl batch.
    """

    chapter_precision: int = 1
    fetch_concurrency: int = 1
    write_concurrency: int = 50
    only_latest: bool = True
    timeout_seconds: float = 15.0
    user_agent: str = "ChapterWatchBot/1.0 (+https://example.com/bot)"
    mangadex_base_url: str = "https://api.mangadex.org"
    mangadex_language: str = "en"
    mangadex_feed_limit: int = 100
    schedule_cron: str = "*/30 * * * *"


@lru_cache(maxsize=1)
def get_crawl_settings() -> CrawlSettings:
    """
    Return cached crawl settings from environment variables.
    """

    return CrawlSettings(
        chapter_precision=max(0, _get_int_env("CRAWL_CHAPTER_PRECISION", 1)),
        fetch_concurrency=max(1, _get_int_env("CRAWL_FETCH_CONCURRENCY", 1)),
        write_concurrency=max(1, _get_int_env("CRAWL_WRITE_CONCURRENCY", 50)),
        only_latest=_get_bool_env("CRAWL_ONLY_LATEST", True),
        timeout_seconds=max(1.0, _get_float_env("CRAWL_TIMEOUT_SECONDS", 15.0)),
        user_agent=_get_str_env(
            "CRAWL_USER_AGENT",
            "ChapterWatchBot/1.0 (+https://example.com/bot)",
        ),
        mangadex_base_url=_get_str_env("MANGADEX_API_BASE_URL", "https://api.mangadex.org").rstrip("/"),
        mangadex_language=_get_str_env("MANGADEX_LANGUAGE", "en"),
        mangadex_feed_limit=min(500, max(1, _get_int_env("MANGADEX_FEED_LIMIT", 100))),
        schedule_cron=_get_str_env("CRAWL_SCHEDULE_CRON", "*/30 * * * *"),
    )
