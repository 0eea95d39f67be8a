"""
chapterwatch/schemas/mangadex.py

Validation schemas for the MangaDex chapter feed API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MangadexChapterAttributes(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    volume: str | None = None
    chapter: str | None = None
    title: str | None = None
    translated_language: str | None = Field(default=None, alias="translatedLanguage")


class MangadexChapter(BaseModel):
    """
    One chapter entry from ``GET /manga/{id}/feed``.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str = "chapter"
    attributes: MangadexChapterAttributes


class MangadexFeedResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: str
    data: list[MangadexChapter] = Field(default_factory=list)
    limit: int | None = None
    offset: int | None = None
    total: int | None = None
