"""Tests for feed item filtering and conversion."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from contentkit.content.identity import compute_fingerprint, id_from_string
from contentkit.content.models import BodyFormat, ContentSource, ContentStatus, ContentType
from contentkit.errors import ConversionError
from contentkit.syndication.converter import convert_item, should_process
from contentkit.syndication.models import FeedItem, RSSFeed

PUBLISHED = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def _make_item(
    title: str = "Testing Python Code",
    content: str | None = "<p>Learn how to test <strong>Python</strong> code.</p>",
    description: str = "Learn how to test Python code.",
    **kwargs: object,
) -> FeedItem:
    link = str(kwargs.pop("link", "https://example.com/testing"))
    return FeedItem(
        guid=link,
        title=title,
        description=description,
        link=link,
        published_at=PUBLISHED,
        content=content,
        fingerprint=compute_fingerprint(title, link, "2024-01-01"),
        **kwargs,  # type: ignore[arg-type]
    )


def _make_feed(**kwargs: object) -> RSSFeed:
    return RSSFeed(id="feed-1", url="https://example.com/feed.xml", name="Example", **kwargs)  # type: ignore[arg-type]


class TestShouldProcess:
    def test_no_filters(self):
        assert should_process(_make_item(), _make_feed())

    def test_include_matches_case_insensitive(self):
        assert should_process(_make_item(), _make_feed(include_keywords=["PYTHON"]))

    def test_include_without_match(self):
        assert not should_process(_make_item(), _make_feed(include_keywords=["rust", "go "]))

    def test_exclude_match(self):
        assert not should_process(_make_item(), _make_feed(exclude_keywords=["test"]))

    def test_exclude_wins_over_include(self):
        feed = _make_feed(include_keywords=["python"], exclude_keywords=["code"])
        assert not should_process(_make_item(), feed)

    def test_falls_back_to_description(self):
        item = _make_item(content=None, description="Only the description mentions Rust")
        assert should_process(item, _make_feed(include_keywords=["rust"]))


class TestConvertItem:
    def test_identity_and_provenance(self):
        item = _make_item()
        content = convert_item(item, _make_feed())

        assert content.id == f"syndicated_{item.fingerprint[:12]}"
        assert content.type == ContentType.SYNDICATED
        assert content.source == ContentSource.RSS_FEED
        assert content.version == 1
        assert content.syndication_data is not None
        assert content.syndication_data.fingerprint == item.fingerprint
        assert content.syndication_data.feed_id == "feed-1"
        assert content.syndication_data.source_name == "Example"
        assert content.syndication_data.source_url == "https://example.com/testing"
        assert content.syndication_data.original_published_at == PUBLISHED

    def test_body_renditions(self):
        content = convert_item(_make_item(), _make_feed())

        assert content.body.html == "<p>Learn how to test <strong>Python</strong> code.</p>"
        assert content.body.plain_text == "Learn how to test Python code."
        assert content.body.raw == "Learn how to test **Python** code."
        assert content.body.format == BodyFormat.MARKDOWN
        assert content.word_count == 6
        assert content.reading_time == 1

    def test_sanitizes_scripts(self):
        item = _make_item(content="<p>ok</p><script>steal()</script><iframe src='x'></iframe>")
        content = convert_item(item, _make_feed())
        assert content.body.html == "<p>ok</p>"
        assert "steal" not in content.body.plain_text

    def test_uses_description_without_content(self):
        item = _make_item(content=None, description="Plain description text")
        content = convert_item(item, _make_feed())
        assert content.body.plain_text == "Plain description text"

    def test_seo_fields(self):
        long_text = "<p>" + "lorem ipsum " * 60 + "</p>"
        content = convert_item(_make_item(title="T" * 80, content=long_text), _make_feed())

        assert content.slug == "t" * 60
        assert len(content.seo_title) == 60
        assert len(content.description) <= 160
        assert content.seo_description == content.description
        assert len(content.excerpt) <= 300

    def test_draft_without_auto_publish(self):
        content = convert_item(_make_item(), _make_feed())
        assert content.status == ContentStatus.DRAFT
        assert content.published_at is None

    def test_auto_publish(self):
        content = convert_item(_make_item(), _make_feed(auto_publish=True))
        assert content.status == ContentStatus.PUBLISHED
        assert content.published_at == PUBLISHED

    def test_category_tags_and_author(self):
        feed = _make_feed(category_id="cat-1", tags=["Python", "Dev Tools"])
        content = convert_item(_make_item(author="Jane Doe"), feed)

        assert [(c.id, c.name, c.slug) for c in content.categories] == [
            ("cat-1", "Syndicated", "syndicated"),
        ]
        assert [(t.id, t.slug) for t in content.tags] == [
            (id_from_string("Python"), "python"),
            (id_from_string("Dev Tools"), "dev-tools"),
        ]
        assert [(a.id, a.name) for a in content.authors] == [(id_from_string("Jane Doe"), "Jane Doe")]

    def test_no_category_or_author(self):
        content = convert_item(_make_item(), _make_feed())
        assert content.categories == []
        assert content.authors == []

    def test_failure_wrapped(self):
        item = _make_item()
        with patch("contentkit.syndication.converter.sanitize_html", side_effect=ValueError("bad html")):
            with pytest.raises(ConversionError) as exc_info:
                convert_item(item, _make_feed())
        assert exc_info.value.guid == item.guid
        assert isinstance(exc_info.value.cause, ValueError)
