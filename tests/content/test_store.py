"""Tests for JsonContentStore — JSON-backed content repository."""

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from contentkit.content.models import (
    Content,
    ContentBody,
    ContentStatus,
    ContentType,
    ContentVersion,
    SyndicationData,
)
from contentkit.content.store import STORE_FILENAME, JsonContentStore
from contentkit.errors import ConflictError


def _make_record(
    content_id: str = "content_1",
    title: str = "Test Post",
    status: ContentStatus = ContentStatus.DRAFT,
    content_type: ContentType = ContentType.ARTICLE,
    **kwargs: object,
) -> Content:
    """Helper to build a Content record with sensible defaults."""
    return Content(
        id=content_id,
        slug=content_id.replace("_", "-"),
        title=title,
        status=status,
        type=content_type,
        created_at=datetime.now(tz=UTC),
        **kwargs,  # type: ignore[arg-type]
    )


def _syndicated(content_id: str, fingerprint: str, feed_id: str) -> Content:
    return _make_record(
        content_id,
        content_type=ContentType.SYNDICATED,
        syndication_data=SyndicationData(
            source_url=f"https://example.com/{content_id}",
            source_name="Example",
            feed_id=feed_id,
            fingerprint=fingerprint,
        ),
    )


class TestSave:
    def test_creates_record(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record()))

        fetched = asyncio.run(store.get("content_1"))
        assert fetched is not None
        assert fetched.title == "Test Post"

    def test_overwrites_existing(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record(title="Version 1")))
        asyncio.run(store.save(_make_record(title="Version 2")))

        records = asyncio.run(store.list())
        assert len(records) == 1
        assert records[0].title == "Version 2"

    def test_persists_to_disk(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record()))

        store_path = tmp_path / STORE_FILENAME
        assert store_path.exists()
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert len(data["records"]) == 1
        assert data["records"][0]["id"] == "content_1"

    def test_expected_version_match(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record()))
        asyncio.run(store.save(_make_record(title="Next", version=2), expected_version=1))

        fetched = asyncio.run(store.get("content_1"))
        assert fetched is not None
        assert fetched.version == 2

    def test_expected_version_conflict(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record(version=3)))

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(store.save(_make_record(title="Stale", version=2), expected_version=1))
        assert exc_info.value.actual == 3

        fetched = asyncio.run(store.get("content_1"))
        assert fetched is not None
        assert fetched.title == "Test Post"

    def test_stored_copy_is_isolated(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        record = _make_record()
        asyncio.run(store.save(record))
        record.title = "Mutated after save"

        fetched = asyncio.run(store.get("content_1"))
        assert fetched is not None
        assert fetched.title == "Test Post"


class TestGet:
    def test_returns_none_for_missing(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        assert asyncio.run(store.get("nonexistent")) is None

    def test_exists(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record()))
        assert store.exists("content_1")
        assert not store.exists("content_2")


class TestList:
    def test_filter_by_status(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record("content_1")))
        asyncio.run(store.save(_make_record(
            "content_2",
            status=ContentStatus.PUBLISHED,
            published_at=datetime.now(tz=UTC),
        )))

        drafts = asyncio.run(store.list(status=ContentStatus.DRAFT))
        assert [r.id for r in drafts] == ["content_1"]

    def test_filter_by_type(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record("content_1")))
        asyncio.run(store.save(_make_record("content_2", content_type=ContentType.PAGE)))

        pages = asyncio.run(store.list(content_type=ContentType.PAGE))
        assert [r.id for r in pages] == ["content_2"]


class TestDelete:
    def test_delete_existing(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_make_record()))
        assert asyncio.run(store.delete("content_1")) is True
        assert asyncio.run(store.get("content_1")) is None

    def test_delete_missing(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        assert asyncio.run(store.delete("nope")) is False


class TestFingerprints:
    def test_all_feeds(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_syndicated("syndicated_a", "fp-a", "feed-1")))
        asyncio.run(store.save(_syndicated("syndicated_b", "fp-b", "feed-2")))
        asyncio.run(store.save(_make_record("content_manual")))

        assert asyncio.run(store.list_fingerprints()) == {"fp-a", "fp-b"}

    def test_per_feed(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        asyncio.run(store.save(_syndicated("syndicated_a", "fp-a", "feed-1")))
        asyncio.run(store.save(_syndicated("syndicated_b", "fp-b", "feed-2")))

        assert asyncio.run(store.list_fingerprints("feed-2")) == {"fp-b"}


class TestVersions:
    def test_append_and_list(self, tmp_path: Path):
        store = JsonContentStore(tmp_path)
        for n in (1, 2):
            asyncio.run(store.append_version("content_1", ContentVersion(
                id=f"version_{n}",
                content_id="content_1",
                version=n,
                title=f"Title {n}",
                body=ContentBody(raw="x"),
            )))

        versions = asyncio.run(store.list_versions("content_1"))
        assert [v.version for v in versions] == [1, 2]
        assert asyncio.run(store.list_versions("other")) == []


class TestPersistence:
    def test_reload_from_disk(self, tmp_path: Path):
        store1 = JsonContentStore(tmp_path)
        asyncio.run(store1.save(_make_record(title="Persisted")))

        store2 = JsonContentStore(tmp_path)
        fetched = asyncio.run(store2.get("content_1"))
        assert fetched is not None
        assert fetched.title == "Persisted"

    def test_corrupt_file_starts_fresh(self, tmp_path: Path):
        (tmp_path / STORE_FILENAME).write_text("{not valid json", encoding="utf-8")
        store = JsonContentStore(tmp_path)
        assert asyncio.run(store.list()) == []

    def test_creates_parent_directory(self, tmp_path: Path):
        store = JsonContentStore(tmp_path / "nested" / "dir")
        asyncio.run(store.save(_make_record()))
        assert store.path.exists()
