"""Rule-based SEO analysis of content records.

Each check group inspects one aspect of a record (title, meta
description, headings, length, images, links, keyword usage,
readability) and returns zero or more ``SEOCheck`` results.  The
aggregate score is a weighted average over all emitted checks.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from contentkit.content.models import Content
from contentkit.content.text import average_sentence_length
from contentkit.seo.models import (
    CheckStatus,
    Impact,
    RecommendationType,
    SEOAnalysis,
    SEOCheck,
    SEORecommendation,
)

logger = logging.getLogger(__name__)

IMPACT_WEIGHTS: dict[Impact, int] = {Impact.LOW: 1, Impact.MEDIUM: 2, Impact.HIGH: 3}
OUTCOME_VALUES: dict[CheckStatus, int] = {
    CheckStatus.PASS: 100,
    CheckStatus.WARNING: 50,
    CheckStatus.FAIL: 0,
}

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 160
MIN_WORD_COUNT = 300
COMPREHENSIVE_WORD_COUNT = 2000
MAX_WORDS_PER_SENTENCE = 20
# Below this many words a sentence-length verdict is not meaningful
READABILITY_MIN_WORDS = 50

GENERIC_TITLE_MARKERS = ("untitled", "new post")

# Check names that have a recommendation template
TITLE_TOO_SHORT = "Title Length (Too Short)"
MISSING_DESCRIPTION = "Meta Description"
MISSING_KEYWORDS = "Focus Keywords"

_EXTERNAL_PREFIXES = ("http://", "https://", "//")
_NON_NAVIGATIONAL_PREFIXES = ("mailto:", "tel:", "javascript:", "#")


def _check(name: str, status: CheckStatus, message: str, impact: Impact) -> SEOCheck:
    return SEOCheck(name=name, status=status, message=message, impact=impact)


class SEOAnalyzer:
    """Runs every check group over a record and aggregates the result."""

    def analyze(self, content: Content) -> SEOAnalysis:
        checks = self.run_checks(content)
        return SEOAnalysis(
            score=self.calculate_score(checks),
            checks=checks,
            recommendations=self.generate_recommendations(content, checks),
        )

    def run_checks(self, content: Content) -> list[SEOCheck]:
        soup = BeautifulSoup(content.body.html or "", "html.parser")
        checks: list[SEOCheck] = []
        checks.extend(self.check_title(content))
        checks.extend(self.check_meta_description(content))
        checks.extend(self.check_heading_structure(soup))
        checks.extend(self.check_content_length(content))
        checks.extend(self.check_images(soup))
        checks.extend(self.check_links(soup))
        checks.extend(self.check_keyword_usage(content))
        checks.extend(self.check_readability(content))
        logger.debug("Ran %d SEO checks for %s", len(checks), content.id)
        return checks

    # ── Check groups ─────────────────────────────────────────────

    @staticmethod
    def check_title(content: Content) -> list[SEOCheck]:
        title = content.seo_title or content.title
        checks: list[SEOCheck] = []

        if len(title) < TITLE_MIN_LENGTH:
            checks.append(_check(
                TITLE_TOO_SHORT,
                CheckStatus.WARNING,
                "Title is shorter than 30 characters. Consider making it more descriptive.",
                Impact.MEDIUM,
            ))
        elif len(title) > TITLE_MAX_LENGTH:
            checks.append(_check(
                "Title Length (Too Long)",
                CheckStatus.WARNING,
                "Title is longer than 60 characters. It may be truncated in search results.",
                Impact.HIGH,
            ))
        else:
            checks.append(_check(
                "Title Length",
                CheckStatus.PASS,
                "Title length is optimized for search engines.",
                Impact.HIGH,
            ))

        lowered = title.lower()
        if any(marker in lowered for marker in GENERIC_TITLE_MARKERS):
            checks.append(_check(
                "Title Uniqueness",
                CheckStatus.FAIL,
                "Title appears to be generic. Use a unique, descriptive title.",
                Impact.HIGH,
            ))
        return checks

    @staticmethod
    def check_meta_description(content: Content) -> list[SEOCheck]:
        description = (content.seo_description or content.description or "").strip()

        if not description:
            return [_check(
                MISSING_DESCRIPTION,
                CheckStatus.FAIL,
                "No meta description found. Add one to improve search engine visibility.",
                Impact.HIGH,
            )]
        if len(description) < DESCRIPTION_MIN_LENGTH:
            return [_check(
                "Meta Description Length (Too Short)",
                CheckStatus.WARNING,
                "Meta description is shorter than 120 characters. Consider expanding it.",
                Impact.MEDIUM,
            )]
        if len(description) > DESCRIPTION_MAX_LENGTH:
            return [_check(
                "Meta Description Length (Too Long)",
                CheckStatus.WARNING,
                "Meta description is longer than 160 characters. It may be truncated.",
                Impact.MEDIUM,
            )]
        return [_check(
            "Meta Description Length",
            CheckStatus.PASS,
            "Meta description length is optimized.",
            Impact.HIGH,
        )]

    @staticmethod
    def check_heading_structure(soup: BeautifulSoup) -> list[SEOCheck]:
        checks: list[SEOCheck] = []
        headings = soup.find_all(re.compile(r"^h[1-6]$"))
        h1_count = sum(1 for h in headings if h.name == "h1")

        if h1_count == 0:
            checks.append(_check(
                "H1 Heading",
                CheckStatus.WARNING,
                "No H1 heading found. Consider adding one for better structure.",
                Impact.MEDIUM,
            ))
        elif h1_count > 1:
            checks.append(_check(
                "Multiple H1 Headings",
                CheckStatus.WARNING,
                f"{h1_count} H1 headings found. Use only one H1 per page.",
                Impact.MEDIUM,
            ))
        else:
            checks.append(_check(
                "H1 Heading",
                CheckStatus.PASS,
                "Proper H1 heading structure.",
                Impact.MEDIUM,
            ))

        if headings:
            levels = [int(h.name[1]) for h in headings]
            skips = any(cur > prev + 1 for prev, cur in zip(levels, levels[1:]))
            if skips:
                checks.append(_check(
                    "Heading Hierarchy",
                    CheckStatus.WARNING,
                    "Heading hierarchy skips levels. Ensure proper nesting.",
                    Impact.LOW,
                ))
            else:
                checks.append(_check(
                    "Heading Hierarchy",
                    CheckStatus.PASS,
                    "Heading hierarchy follows proper structure.",
                    Impact.LOW,
                ))
        return checks

    @staticmethod
    def check_content_length(content: Content) -> list[SEOCheck]:
        if content.word_count < MIN_WORD_COUNT:
            return [_check(
                "Content Length",
                CheckStatus.WARNING,
                "Content is shorter than 300 words. Consider adding more detailed information.",
                Impact.MEDIUM,
            )]
        if content.word_count > COMPREHENSIVE_WORD_COUNT:
            message = "Content length is comprehensive and valuable for readers."
        else:
            message = "Content length is appropriate for the topic."
        return [_check("Content Length", CheckStatus.PASS, message, Impact.LOW)]

    @staticmethod
    def check_images(soup: BeautifulSoup) -> list[SEOCheck]:
        images = soup.find_all("img")
        if not images:
            return [_check(
                "Images",
                CheckStatus.WARNING,
                "No images found. Consider adding relevant images to enhance content.",
                Impact.LOW,
            )]

        missing_alt = sum(1 for img in images if not (img.get("alt") or "").strip())
        if missing_alt:
            return [_check(
                "Image Alt Text",
                CheckStatus.FAIL,
                f"{missing_alt} image(s) missing alt text. "
                "Add descriptive alt text for accessibility.",
                Impact.MEDIUM,
            )]
        return [_check(
            "Image Alt Text",
            CheckStatus.PASS,
            "All images have appropriate alt text.",
            Impact.MEDIUM,
        )]

    @staticmethod
    def check_links(soup: BeautifulSoup) -> list[SEOCheck]:
        links = soup.find_all("a", href=True)
        if not links:
            return [_check(
                "Links",
                CheckStatus.WARNING,
                "No links found. Consider adding relevant internal or external links.",
                Impact.LOW,
            )]

        internal = external = 0
        for link in links:
            href = link["href"].strip()
            lowered = href.lower()
            if not href or lowered.startswith(_NON_NAVIGATIONAL_PREFIXES):
                continue
            if lowered.startswith(_EXTERNAL_PREFIXES):
                external += 1
            else:
                internal += 1

        checks: list[SEOCheck] = []
        if internal:
            checks.append(_check(
                "Internal Links",
                CheckStatus.PASS,
                f"Found {internal} internal link(s). Good for site navigation.",
                Impact.LOW,
            ))
        else:
            checks.append(_check(
                "Internal Links",
                CheckStatus.WARNING,
                "No internal links found. Consider linking to related content.",
                Impact.LOW,
            ))
        if external:
            checks.append(_check(
                "External Links",
                CheckStatus.PASS,
                f"Found {external} external link(s). Good for providing additional resources.",
                Impact.LOW,
            ))
        return checks

    @staticmethod
    def check_keyword_usage(content: Content) -> list[SEOCheck]:
        keywords = [k.lower() for k in content.seo_keywords if k.strip()]
        if not keywords:
            return [_check(
                MISSING_KEYWORDS,
                CheckStatus.WARNING,
                "No focus keywords defined. Add target keywords for better optimization.",
                Impact.MEDIUM,
            )]

        title = content.title.lower()
        text = content.body.plain_text.lower()
        in_title = sum(1 for k in keywords if k in title)
        in_text = sum(1 for k in keywords if k in text)

        checks: list[SEOCheck] = []
        if in_title:
            checks.append(_check(
                "Keywords in Title",
                CheckStatus.PASS,
                f"{in_title} keyword(s) found in title.",
                Impact.HIGH,
            ))
        else:
            checks.append(_check(
                "Keywords in Title",
                CheckStatus.WARNING,
                "No focus keywords found in title. Consider including primary keywords.",
                Impact.HIGH,
            ))
        if in_text:
            checks.append(_check(
                "Keywords in Content",
                CheckStatus.PASS,
                f"{in_text} keyword(s) found in content.",
                Impact.MEDIUM,
            ))
        else:
            checks.append(_check(
                "Keywords in Content",
                CheckStatus.WARNING,
                "No focus keywords found in content. Ensure natural keyword usage.",
                Impact.MEDIUM,
            ))
        return checks

    @staticmethod
    def check_readability(content: Content) -> list[SEOCheck]:
        """Sentence-length verdict, warning or pass.

        Bodies under 50 words yield no check at all, so short drafts are
        neither credited nor penalised for readability.
        """
        if content.word_count < READABILITY_MIN_WORDS:
            return []
        avg = average_sentence_length(content.body.plain_text, content.word_count)
        if avg > MAX_WORDS_PER_SENTENCE:
            return [_check(
                "Sentence Length",
                CheckStatus.WARNING,
                "Average sentence length is high. "
                "Consider using shorter sentences for better readability.",
                Impact.MEDIUM,
            )]
        return [_check(
            "Sentence Length",
            CheckStatus.PASS,
            "Sentence length is appropriate for readability.",
            Impact.MEDIUM,
        )]

    # ── Aggregation ──────────────────────────────────────────────

    @staticmethod
    def calculate_score(checks: list[SEOCheck]) -> int:
        """Weighted-average percentage of check outcomes."""
        if not checks:
            return 0
        earned = sum(IMPACT_WEIGHTS[c.impact] * OUTCOME_VALUES[c.status] for c in checks)
        possible = sum(IMPACT_WEIGHTS[c.impact] * 100 for c in checks)
        return round(earned / possible * 100)

    def generate_recommendations(
        self, content: Content, checks: list[SEOCheck]
    ) -> list[SEORecommendation]:
        recommendations: list[SEORecommendation] = []
        for check in checks:
            if check.status == CheckStatus.PASS:
                continue
            recommendation = self._recommendation_for(check, content)
            if recommendation is not None:
                recommendations.append(recommendation)
        return recommendations

    @staticmethod
    def _recommendation_for(check: SEOCheck, content: Content) -> SEORecommendation | None:
        if check.name == TITLE_TOO_SHORT:
            return SEORecommendation(
                type=RecommendationType.TITLE,
                priority=check.impact,
                title="Expand Title",
                description="Make your title more descriptive and informative",
                current_value=content.title,
                suggested_value=f"{content.title} - [Add descriptive keywords]",
            )
        if check.name == MISSING_DESCRIPTION and check.status == CheckStatus.FAIL:
            return SEORecommendation(
                type=RecommendationType.DESCRIPTION,
                priority=check.impact,
                title="Add Meta Description",
                description="Create a compelling meta description to improve click-through rates",
                current_value=content.seo_description,
                suggested_value=(
                    content.description[:DESCRIPTION_MAX_LENGTH]
                    if content.description
                    else "Create a compelling description..."
                ),
            )
        if check.name == MISSING_KEYWORDS:
            return SEORecommendation(
                type=RecommendationType.KEYWORDS,
                priority=check.impact,
                title="Define Focus Keywords",
                description="Add target keywords to optimize content for search engines",
                current_value=", ".join(content.seo_keywords),
                suggested_value="Add 2-3 relevant keywords",
            )
        return None
