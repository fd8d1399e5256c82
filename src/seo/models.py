"""SEO analysis result types."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class CheckStatus(StrEnum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class Impact(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecommendationType(StrEnum):
    TITLE = "title"
    DESCRIPTION = "description"
    KEYWORDS = "keywords"
    HEADINGS = "headings"
    IMAGES = "images"
    LINKS = "links"


class SEOCheck(BaseModel):
    """Outcome of one SEO rule."""

    name: str
    status: CheckStatus
    message: str
    impact: Impact


class SEORecommendation(BaseModel):
    """Actionable fix derived from a failing or warning check."""

    type: RecommendationType
    priority: Impact
    title: str
    description: str
    current_value: str | None = None
    suggested_value: str | None = None


class SEOAnalysis(BaseModel):
    """Result of one analyzer run. Not persisted on its own."""

    score: int = Field(ge=0, le=100)
    checks: list[SEOCheck] = Field(default_factory=list)
    recommendations: list[SEORecommendation] = Field(default_factory=list)
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
