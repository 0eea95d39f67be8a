"""
chapterwatch/schemas package marker.
"""

from chapterwatch.schemas.mangadex import (
    MangadexChapter,
    MangadexChapterAttributes,
    MangadexFeedResponse,
)

__all__ = [
    "MangadexChapter",
    "MangadexChapterAttributes",
    "MangadexFeedResponse",
]
