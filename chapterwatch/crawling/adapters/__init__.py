"""
Built-in chapter source adapters.
"""

from chapterwatch.crawling.adapters.base import CrawlerAdapter
from chapterwatch.crawling.adapters.mangadex import MangadexAdapter
from chapterwatch.crawling.adapters.webtoon import WebtoonAdapter

__all__ = ["CrawlerAdapter", "MangadexAdapter", "WebtoonAdapter"]
