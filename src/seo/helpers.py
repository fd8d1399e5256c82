"""Slug, meta title and meta description generators.

All three are idempotent: feeding an output back in returns it
unchanged.  None of them exceeds its length cap.
"""

from __future__ import annotations

import re

from slugify import slugify

from contentkit.content.models import (
    SEO_DESCRIPTION_MAX_LENGTH,
    SEO_DESCRIPTION_MIN_LENGTH,
    SEO_TITLE_MAX_LENGTH,
    SLUG_MAX_LENGTH,
)


def generate_seo_slug(title: str, keywords: list[str] | None = None) -> str:
    """URL-safe slug of ``title``, led by the primary keyword when missing."""
    slug = slugify(title, max_length=SLUG_MAX_LENGTH, word_boundary=True)
    if keywords:
        primary = slugify(keywords[0], max_length=SLUG_MAX_LENGTH, word_boundary=True)
        if primary and primary not in slug:
            slug = f"{primary}-{slugify(title)}" if slug else primary
    return slugify(slug, max_length=SLUG_MAX_LENGTH, word_boundary=True)


def generate_seo_title(
    title: str,
    keywords: list[str] | None = None,
    site_name: str | None = None,
) -> str:
    """Meta title: primary keyword prefixed if absent, site name if it fits."""
    seo_title = title.strip()

    if keywords and keywords[0].strip():
        primary = keywords[0].strip()
        # Only the part that survives truncation counts as containing it
        if primary.lower() not in seo_title[:SEO_TITLE_MAX_LENGTH].lower():
            seo_title = f"{primary} - {seo_title}" if seo_title else primary

    if site_name:
        suffix = f" | {site_name}"
        if not seo_title.endswith(suffix) and len(seo_title) + len(suffix) <= SEO_TITLE_MAX_LENGTH:
            seo_title = f"{seo_title}{suffix}"

    return seo_title[:SEO_TITLE_MAX_LENGTH].rstrip()


def generate_seo_description(content: str, keywords: list[str] | None = None) -> str:
    """Meta description from body text, at most 160 characters.

    Truncated text backs off to a word boundary when that still leaves
    at least 120 characters.  The primary keyword is prepended when it
    is missing and there is room.
    """
    description = re.sub(r"\s+", " ", content).strip()

    if len(description) > SEO_DESCRIPTION_MAX_LENGTH:
        description = description[:SEO_DESCRIPTION_MAX_LENGTH]
        last_space = description.rfind(" ")
        if last_space > SEO_DESCRIPTION_MIN_LENGTH:
            description = description[:last_space]
        description = description.rstrip()

    if keywords and keywords[0].strip():
        primary = keywords[0].strip()
        if primary.lower() not in description.lower():
            if len(description) + len(primary) + 10 <= SEO_DESCRIPTION_MAX_LENGTH:
                description = f"{primary}: {description}" if description else primary

    return description
