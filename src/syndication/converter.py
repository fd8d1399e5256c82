"""Feed item filtering and conversion into content records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from slugify import slugify

from contentkit.content.html import (
    html_to_markdown,
    html_to_plain_text,
    sanitize_html,
    truncate_text,
)
from contentkit.content.identity import content_id_from_fingerprint, id_from_string
from contentkit.content.models import (
    EXCERPT_MAX_LENGTH,
    SEO_DESCRIPTION_MAX_LENGTH,
    SEO_TITLE_MAX_LENGTH,
    SLUG_MAX_LENGTH,
    BodyFormat,
    Content,
    ContentAuthor,
    ContentBody,
    ContentCategory,
    ContentSource,
    ContentStatus,
    ContentTag,
    ContentType,
    SyndicationData,
)
from contentkit.content.text import count_words, reading_time
from contentkit.errors import ConversionError
from contentkit.syndication.models import FeedItem, RSSFeed

logger = logging.getLogger(__name__)

SYNDICATED_CATEGORY_NAME = "Syndicated"
SYNDICATED_CATEGORY_SLUG = "syndicated"


def should_process(item: FeedItem, feed: RSSFeed) -> bool:
    """Apply the feed's include/exclude keyword filters to ``item``.

    Matching is a case-insensitive substring test over the item's
    content, falling back to its description.
    """
    text = (item.content or item.description).lower()

    if feed.include_keywords and not any(kw.lower() in text for kw in feed.include_keywords):
        return False
    if feed.exclude_keywords and any(kw.lower() in text for kw in feed.exclude_keywords):
        return False
    return True


def convert_item(item: FeedItem, feed: RSSFeed) -> Content:
    """Build a syndicated content record from a feed item.

    Raises:
        ConversionError: Sanitizing or deriving the body failed.
    """
    try:
        return _convert(item, feed)
    except Exception as exc:
        raise ConversionError(item.guid, exc) from exc


def _convert(item: FeedItem, feed: RSSFeed) -> Content:
    html = sanitize_html(item.content or item.description)
    plain_text = html_to_plain_text(html)
    word_count = count_words(plain_text)
    summary = truncate_text(plain_text, SEO_DESCRIPTION_MAX_LENGTH)
    now = datetime.now(tz=UTC)
    content_id = content_id_from_fingerprint(item.fingerprint)

    categories = []
    if feed.category_id:
        categories.append(ContentCategory(
            id=feed.category_id,
            name=SYNDICATED_CATEGORY_NAME,
            slug=SYNDICATED_CATEGORY_SLUG,
        ))

    return Content(
        id=content_id,
        slug=slugify(item.title, max_length=SLUG_MAX_LENGTH, word_boundary=True) or content_id,
        title=item.title,
        description=summary,
        excerpt=truncate_text(plain_text, EXCERPT_MAX_LENGTH),
        type=ContentType.SYNDICATED,
        status=ContentStatus.PUBLISHED if feed.auto_publish else ContentStatus.DRAFT,
        source=ContentSource.RSS_FEED,
        published_at=item.published_at if feed.auto_publish else None,
        seo_title=item.title[:SEO_TITLE_MAX_LENGTH],
        seo_description=summary,
        categories=categories,
        tags=[ContentTag(id=id_from_string(tag), name=tag, slug=slugify(tag)) for tag in feed.tags],
        authors=[ContentAuthor(id=id_from_string(item.author), name=item.author)] if item.author else [],
        reading_time=reading_time(word_count),
        word_count=word_count,
        created_at=now,
        updated_at=now,
        version=1,
        syndication_data=SyndicationData(
            source_url=item.link,
            source_name=feed.name,
            source_type="rss",
            original_published_at=item.published_at,
            last_synced_at=now,
            feed_id=feed.id,
            fingerprint=item.fingerprint,
        ),
        body=ContentBody(
            raw=html_to_markdown(html),
            html=html,
            plain_text=plain_text,
            format=BodyFormat.MARKDOWN,
        ),
    )
