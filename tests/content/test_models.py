"""Tests for content domain models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from contentkit.content.models import (
    BodyFormat,
    Content,
    ContentAIAnalysis,
    ContentBody,
    ContentStatus,
    ContentType,
    ContentUpdate,
    SyndicationData,
)


class TestContentStatus:
    def test_all_values(self):
        values = {s.value for s in ContentStatus}
        assert values == {"draft", "approved", "published", "archived"}

    def test_string_comparison(self):
        assert ContentStatus.PUBLISHED == "published"


class TestContentType:
    def test_all_values(self):
        values = {t.value for t in ContentType}
        assert values == {"article", "page", "legal", "syndicated", "ai_generated"}


class TestContent:
    def test_defaults(self):
        content = Content(id="content_1", slug="hello", title="Hello")
        assert content.status == ContentStatus.DRAFT
        assert content.version == 1
        assert content.body == ContentBody()
        assert content.body.format == BodyFormat.HTML
        assert content.published_at is None
        assert content.versions == []

    def test_version_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            Content(id="c", slug="s", title="t", version=0)

    def test_fingerprint_none_for_manual(self):
        assert Content(id="c", slug="s", title="t").fingerprint is None

    def test_fingerprint_from_syndication_data(self):
        content = Content(
            id="syndicated_abc",
            slug="s",
            title="t",
            syndication_data=SyndicationData(
                source_url="https://x.com/p1",
                source_name="X",
                fingerprint="abc123",
            ),
        )
        assert content.fingerprint == "abc123"

    def test_json_round_trip_keeps_enums(self):
        content = Content(
            id="c",
            slug="s",
            title="t",
            status=ContentStatus.PUBLISHED,
            published_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        restored = Content.model_validate_json(content.model_dump_json())
        assert restored.status is ContentStatus.PUBLISHED
        assert restored.published_at == datetime(2024, 1, 1, tzinfo=UTC)


class TestContentAIAnalysis:
    def test_scores_bounded(self):
        with pytest.raises(PydanticValidationError):
            ContentAIAnalysis(quality_score=101, readability_score=50, seo_score=50)
        with pytest.raises(PydanticValidationError):
            ContentAIAnalysis(quality_score=50, readability_score=-1, seo_score=50)


class TestContentUpdate:
    def test_changed_fields_only_explicit(self):
        update = ContentUpdate(title="New")
        assert update.changed_fields() == {"title": "New"}

    def test_changed_fields_ignores_none(self):
        update = ContentUpdate(title=None, body="<p>x</p>")
        assert update.changed_fields() == {"body": "<p>x</p>"}

    def test_empty_update(self):
        assert ContentUpdate().changed_fields() == {}
