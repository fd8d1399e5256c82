"""SEO analysis: rule checks, scoring and slug/title/description helpers."""

from contentkit.seo.models import (
    CheckStatus,
    Impact,
    RecommendationType,
    SEOAnalysis,
    SEOCheck,
    SEORecommendation,
)

__all__ = [
    "CheckStatus",
    "Impact",
    "RecommendationType",
    "SEOAnalysis",
    "SEOCheck",
    "SEORecommendation",
]
