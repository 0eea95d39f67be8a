"""
Shared fixtures for crawl tests.
"""

from __future__ import annotations

import pytest

from chapterwatch.config import CrawlSettings


@pytest.fixture()
def settings() -> CrawlSettings:
    return CrawlSettings()
