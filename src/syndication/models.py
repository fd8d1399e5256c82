"""Feed policy and feed item models for the syndication pipeline."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RSSFeed(BaseModel):
    """Per-source syndication policy, supplied by the caller."""

    id: str
    url: str
    name: str = ""
    is_active: bool = True
    auto_publish: bool = False
    enable_ai_analysis: bool = False
    minimum_quality_score: int | None = None
    include_keywords: list[str] = Field(default_factory=list)
    exclude_keywords: list[str] = Field(default_factory=list)
    category_id: str | None = None
    tags: list[str] = Field(default_factory=list)


class FeedItem(BaseModel):
    """A normalized entry from an RSS/Atom feed."""

    guid: str
    title: str
    description: str = ""
    link: str = ""
    published_at: datetime
    author: str | None = None
    categories: list[str] = Field(default_factory=list)
    content: str | None = None
    fingerprint: str


class SyncReport(BaseModel):
    """Outcome of syncing one feed into a repository."""

    feed_id: str
    processed: int = 0
    saved: int = 0
    duplicates: int = 0
    content_ids: list[str] = Field(default_factory=list)
    error: str | None = None
