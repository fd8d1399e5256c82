"""Deterministic content scoring.

``ContentScorer`` produces the quality, readability and SEO sub-scores
plus sentiment, topics, keywords and a summary.  These are heuristics
over the record itself, distinct from the weighted ``SEOAnalysis.score``.
Both the content manager and the syndication service score through
this class so manual and syndicated content are comparable.
"""

from __future__ import annotations

import re
from collections import Counter

from contentkit.content.models import AISuggestion, Content, ContentAIAnalysis
from contentkit.content.text import average_sentence_length, split_sentences
from contentkit.seo.models import RecommendationType, SEOAnalysis

SUMMARY_MAX_LENGTH = 200
TOPIC_COUNT = 5
KEYWORD_COUNT = 3

POSITIVE_WORDS = frozenset({"good", "great", "excellent", "amazing", "fantastic", "wonderful"})
NEGATIVE_WORDS = frozenset({"bad", "terrible", "awful", "horrible", "disappointing", "poor"})

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "this", "that", "these", "those", "from", "into", "than", "then",
        "there", "their", "they", "them", "what", "when", "where", "which",
        "while", "about", "also", "just", "more", "most", "some", "such",
        "only", "other", "your", "very", "over",
    }
)

_SUGGESTION_TYPES: dict[RecommendationType, str] = {
    RecommendationType.TITLE: "seo",
    RecommendationType.DESCRIPTION: "seo",
    RecommendationType.KEYWORDS: "seo",
    RecommendationType.HEADINGS: "structure",
    RecommendationType.IMAGES: "content",
    RecommendationType.LINKS: "content",
}


class ContentScorer:
    """Rule-based scoring strategy for content records."""

    def score(self, content: Content, seo: SEOAnalysis | None = None) -> ContentAIAnalysis:
        """Build the full analysis for ``content``.

        Args:
            content: Record with derived body renditions already populated.
            seo: Optional analyzer result to embed; its recommendations
                become suggestions.
        """
        text = content.body.plain_text
        topics = self.extract_topics(text)
        return ContentAIAnalysis(
            quality_score=self.quality_score(content),
            readability_score=self.readability_score(content),
            seo_score=self.seo_score(content),
            sentiment=self.sentiment(text),
            topics=topics,
            keywords=topics[:KEYWORD_COUNT],
            suggestions=self.suggestions(seo) if seo is not None else [],
            summary=self.summary(text),
            seo=seo,
        )

    # ── Sub-scores ───────────────────────────────────────────────

    @staticmethod
    def quality_score(content: Content) -> int:
        score = 50
        html = content.body.html

        if content.word_count > 300:
            score += 15
        if content.word_count > 800:
            score += 10
        if content.word_count > 1500:
            score += 5

        if content.seo_title and content.seo_title != content.title:
            score += 10
        if content.seo_description:
            score += 10
        if content.seo_keywords:
            score += 10

        if content.featured_image:
            score += 10
        if "<img" in html:
            score += 5

        if "<h2" in html or "<h3" in html:
            score += 5
        if "<ul" in html or "<ol" in html:
            score += 5

        return min(100, score)

    @staticmethod
    def readability_score(content: Content) -> int:
        avg = average_sentence_length(content.body.plain_text, content.word_count)
        score = 100
        if avg > 20:
            score -= 20
        if avg > 30:
            score -= 20
        if content.word_count < 100:
            score -= 30
        return max(0, score)

    @staticmethod
    def seo_score(content: Content) -> int:
        score = 50
        if 30 <= len(content.seo_title) <= 60:
            score += 15
        if 120 <= len(content.seo_description) <= 160:
            score += 15
        if content.seo_keywords:
            score += 10
        if len(content.seo_keywords) >= 3:
            score += 10
        if content.word_count >= 300:
            score += 10
        if content.word_count >= 1000:
            score += 5
        return min(100, score)

    # ── Text signals ─────────────────────────────────────────────

    @staticmethod
    def sentiment(text: str) -> str:
        words = set(re.findall(r"[a-z']+", text.lower()))
        positive = len(words & POSITIVE_WORDS)
        negative = len(words & NEGATIVE_WORDS)
        if positive > negative:
            return "positive"
        if negative > positive:
            return "negative"
        return "neutral"

    @staticmethod
    def extract_topics(text: str, limit: int = TOPIC_COUNT) -> list[str]:
        """Most frequent non-stopword words longer than three characters."""
        words = re.split(r"\W+", text.lower())
        counts = Counter(w for w in words if len(w) > 3 and w not in STOPWORDS)
        return [word for word, _ in counts.most_common(limit)]

    @staticmethod
    def summary(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
        """Greedy concatenation of leading sentences within ``max_length``."""
        sentences = split_sentences(text)
        if not sentences:
            return ""
        summary = sentences[0]
        for sentence in sentences[1:]:
            if len(summary) + len(sentence) + 2 > max_length:
                break
            summary = f"{summary}. {sentence}"
        if len(summary) < len(text.strip()):
            summary += "..."
        return summary

    @staticmethod
    def suggestions(seo: SEOAnalysis) -> list[AISuggestion]:
        return [
            AISuggestion(
                type=_SUGGESTION_TYPES.get(rec.type, "seo"),
                priority=rec.priority.value,
                title=rec.title,
                description=rec.description,
            )
            for rec in seo.recommendations
        ]
