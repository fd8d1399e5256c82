"""Content domain models — pure Pydantic v2 data types.

These models represent the canonical content lifecycle: from draft
through approval and publication to the archive.  Every publishable
unit (manually authored or syndicated from a feed) is a ``Content``
record carrying its body in three derived renditions, SEO fields,
reading metrics and an optional scoring analysis.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from contentkit.seo.models import SEOAnalysis

EXCERPT_MAX_LENGTH = 300
SEO_TITLE_MAX_LENGTH = 60
SEO_DESCRIPTION_MIN_LENGTH = 120
SEO_DESCRIPTION_MAX_LENGTH = 160
SLUG_MAX_LENGTH = 60


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ContentStatus(StrEnum):
    """Lifecycle status of a content record."""

    DRAFT = "draft"
    APPROVED = "approved"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ContentType(StrEnum):
    """Category of content."""

    ARTICLE = "article"
    PAGE = "page"
    LEGAL = "legal"
    SYNDICATED = "syndicated"
    AI_GENERATED = "ai_generated"


class ContentSource(StrEnum):
    """Where a content record came from."""

    MANUAL = "manual"
    RSS_FEED = "rss_feed"
    AI_GENERATED = "ai_generated"
    SYNDICATED = "syndicated"
    IMPORTED = "imported"


class BodyFormat(StrEnum):
    """Authoring format of ``ContentBody.raw``."""

    HTML = "html"
    MARKDOWN = "markdown"


class ContentBody(BaseModel):
    """Body renditions. ``html`` and ``plain_text`` are derived from ``raw``."""

    raw: str = ""
    html: str = ""
    plain_text: str = ""
    structured: dict[str, object] | None = None
    format: BodyFormat = BodyFormat.HTML


class ContentCategory(BaseModel):
    id: str
    name: str
    slug: str


class ContentTag(BaseModel):
    id: str
    name: str
    slug: str


class ContentAuthor(BaseModel):
    id: str
    name: str = ""


class SyndicationData(BaseModel):
    """Provenance of content imported from a feed."""

    source_url: str
    source_name: str
    source_type: Literal["rss", "api", "manual"] = "rss"
    original_published_at: datetime | None = None
    last_synced_at: datetime = Field(default_factory=_utcnow)
    feed_id: str | None = None
    fingerprint: str


class AISuggestion(BaseModel):
    type: Literal["seo", "readability", "content", "structure"]
    priority: Literal["low", "medium", "high"]
    title: str
    description: str
    actionable: bool = True


class ContentAIAnalysis(BaseModel):
    """Scores and extracted signals layered onto a content record.

    ``seo_score`` is computed independently of ``seo.score``; the two
    use different weightings.
    """

    quality_score: int = Field(ge=0, le=100)
    readability_score: int = Field(ge=0, le=100)
    seo_score: int = Field(ge=0, le=100)
    sentiment: Literal["positive", "negative", "neutral"] = "neutral"
    topics: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    suggestions: list[AISuggestion] = Field(default_factory=list)
    summary: str = ""
    generated_at: datetime = Field(default_factory=_utcnow)
    seo: SEOAnalysis | None = None


class ContentVersion(BaseModel):
    """Immutable snapshot of a record taken before an update."""

    id: str
    content_id: str
    version: int
    title: str
    body: ContentBody
    changes: str = ""
    created_by: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class Content(BaseModel):
    """Canonical publishable unit, manual or syndicated."""

    id: str
    slug: str
    title: str
    description: str = ""
    excerpt: str = ""

    type: ContentType = ContentType.ARTICLE
    status: ContentStatus = ContentStatus.DRAFT
    source: ContentSource = ContentSource.MANUAL

    published_at: datetime | None = None
    scheduled_at: datetime | None = None

    seo_title: str = ""
    seo_description: str = ""
    seo_keywords: list[str] = Field(default_factory=list)

    featured_image: str | None = None

    categories: list[ContentCategory] = Field(default_factory=list)
    tags: list[ContentTag] = Field(default_factory=list)
    authors: list[ContentAuthor] = Field(default_factory=list)

    reading_time: int = 0
    word_count: int = 0

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    version: int = Field(default=1, ge=1)
    parent_id: str | None = None

    ai_analysis: ContentAIAnalysis | None = None
    syndication_data: SyndicationData | None = None

    body: ContentBody = Field(default_factory=ContentBody)
    versions: list[ContentVersion] = Field(default_factory=list)

    @property
    def fingerprint(self) -> str | None:
        return self.syndication_data.fingerprint if self.syndication_data else None


class ContentFormData(BaseModel):
    """Input for creating a record."""

    title: str
    slug: str = ""
    description: str = ""
    body: str = ""
    body_format: BodyFormat = BodyFormat.HTML
    type: ContentType = ContentType.ARTICLE
    status: ContentStatus = ContentStatus.DRAFT
    category_ids: list[str] = Field(default_factory=list)
    tag_ids: list[str] = Field(default_factory=list)
    author_ids: list[str] = Field(default_factory=list)
    featured_image: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: list[str] | None = None
    scheduled_at: datetime | None = None


class ContentUpdate(BaseModel):
    """Partial update; only fields explicitly set to a non-null value apply."""

    title: str | None = None
    slug: str | None = None
    description: str | None = None
    body: str | None = None
    body_format: BodyFormat | None = None
    status: ContentStatus | None = None
    scheduled_at: datetime | None = None
    featured_image: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: list[str] | None = None

    def changed_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ContentPage(BaseModel):
    """One page of a content listing."""

    data: list[Content] = Field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0
