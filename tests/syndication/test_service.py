"""Tests for the syndication orchestrator."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from contentkit.analytics import AnalyticsProvider
from contentkit.content.identity import compute_fingerprint
from contentkit.content.models import Content
from contentkit.content.store import JsonContentStore
from contentkit.errors import ConversionError, FeedFetchError
from contentkit.syndication.converter import convert_item
from contentkit.syndication.models import FeedItem, RSSFeed
from contentkit.syndication.service import SyndicationService


def _make_item(title: str, link: str | None = None, body: str = "<p>Some text about python.</p>") -> FeedItem:
    link = link or f"https://example.com/{title.lower().replace(' ', '-')}"
    return FeedItem(
        guid=link,
        title=title,
        description="",
        link=link,
        published_at=datetime(2024, 1, 1, tzinfo=UTC),
        content=body,
        fingerprint=compute_fingerprint(title, link, "2024-01-01"),
    )


def _make_feed(feed_id: str, **kwargs: object) -> RSSFeed:
    return RSSFeed(id=feed_id, url=f"https://{feed_id}.example.com/rss", name=feed_id, **kwargs)  # type: ignore[arg-type]


class FakeFetcher:
    """Serves canned items per URL and records call ordering."""

    def __init__(self, feeds: dict[str, list[FeedItem] | Exception]) -> None:
        self._feeds = feeds
        self.events: list[str] = []

    async def fetch_feed(self, url: str) -> list[FeedItem]:
        self.events.append(f"start:{url}")
        await asyncio.sleep(0)
        self.events.append(f"end:{url}")
        result = self._feeds[url]
        if isinstance(result, Exception):
            raise result
        return result


def _service(feeds: dict[str, list[FeedItem] | Exception], **kwargs: object) -> tuple[SyndicationService, FakeFetcher]:
    fetcher = FakeFetcher(feeds)
    return SyndicationService(fetcher, **kwargs), fetcher  # type: ignore[arg-type]


class TestProcessFeedItems:
    def test_converts_in_order(self):
        service, _ = _service({})
        items = [_make_item("One"), _make_item("Two"), _make_item("Three")]
        result = asyncio.run(service.process_feed_items(items, _make_feed("a")))
        assert [c.title for c in result] == ["One", "Two", "Three"]

    def test_applies_keyword_filter(self):
        service, _ = _service({})
        items = [_make_item("Keep"), _make_item("Drop", body="<p>all about rust</p>")]
        result = asyncio.run(service.process_feed_items(items, _make_feed("a", include_keywords=["python"])))
        assert [c.title for c in result] == ["Keep"]

    def test_no_scoring_unless_both_flags(self):
        service, _ = _service({})
        items = [_make_item("One")]
        result = asyncio.run(service.process_feed_items(items, _make_feed("a", enable_ai_analysis=True)))
        assert result[0].ai_analysis is None

        result = asyncio.run(service.process_feed_items(items, _make_feed("a"), ai_analysis_enabled=True))
        assert result[0].ai_analysis is None

    def test_scores_when_enabled(self):
        service, _ = _service({})
        feed = _make_feed("a", enable_ai_analysis=True)
        [content] = asyncio.run(service.process_feed_items([_make_item("One")], feed, True))
        assert content.ai_analysis is not None
        assert content.ai_analysis.seo is not None
        assert 0 <= content.ai_analysis.seo.score <= 100

    def test_quality_gate(self):
        service, _ = _service({})
        items = [_make_item("Short")]

        strict = _make_feed("a", enable_ai_analysis=True, minimum_quality_score=90)
        assert asyncio.run(service.process_feed_items(items, strict, True)) == []

        lenient = _make_feed("a", enable_ai_analysis=True, minimum_quality_score=50)
        assert len(asyncio.run(service.process_feed_items(items, lenient, True))) == 1

    def test_failing_item_skipped(self):
        service, _ = _service({})
        items = [_make_item("One"), _make_item("Broken"), _make_item("Three")]

        def flaky(item: FeedItem, feed: RSSFeed) -> Content:
            if item.title == "Broken":
                raise ConversionError(item.guid, "bad markup")
            return convert_item(item, feed)

        with patch("contentkit.syndication.service.convert_item", side_effect=flaky):
            result = asyncio.run(service.process_feed_items(items, _make_feed("a")))
        assert [c.title for c in result] == ["One", "Three"]


class TestDeduplicateContent:
    def _convert(self, *items: FeedItem) -> list[Content]:
        feed = _make_feed("a")
        return [convert_item(i, feed) for i in items]

    def test_same_identity_collapses(self):
        first = _make_item("Post", link="https://x.com/p1", body="<p>one</p>")
        second = _make_item("Post", link="https://x.com/p1", body="<p>two</p>")
        contents = self._convert(first, second)

        assert contents[0].id == contents[1].id
        result = SyndicationService.deduplicate_content(contents, set())
        assert len(result) == 1
        assert result[0].body.plain_text == "one"

    def test_filters_existing(self):
        contents = self._convert(_make_item("One"), _make_item("Two"))
        existing = {contents[0].fingerprint}
        result = SyndicationService.deduplicate_content(contents, existing)
        assert [c.title for c in result] == ["Two"]

    def test_second_pass_removes_everything(self):
        contents = self._convert(_make_item("One"), _make_item("Two"))
        first = SyndicationService.deduplicate_content(contents, set())
        fingerprints = {c.fingerprint for c in first}
        assert SyndicationService.deduplicate_content(contents, fingerprints) == []

    def test_does_not_mutate_existing(self):
        contents = self._convert(_make_item("One"))
        existing: set[str] = set()
        SyndicationService.deduplicate_content(contents, existing)
        assert existing == set()

    def test_manual_content_kept(self):
        manual = Content(id="content_1", slug="manual", title="Manual")
        assert SyndicationService.deduplicate_content([manual, manual], set()) == [manual, manual]


class TestProcessFeedsInBatch:
    def test_failing_feed_yields_empty(self):
        feeds = [_make_feed("feedA"), _make_feed("feedB"), _make_feed("feedC")]
        service, _ = _service({
            feeds[0].url: [_make_item("A1"), _make_item("A2")],
            feeds[1].url: FeedFetchError(feeds[1].url, "boom"),
            feeds[2].url: [_make_item("C1")],
        })

        results = asyncio.run(service.process_feeds_in_batch(feeds, True, 2))

        assert set(results) == {"feedA", "feedB", "feedC"}
        assert [c.title for c in results["feedA"]] == ["A1", "A2"]
        assert results["feedB"] == []
        assert [c.title for c in results["feedC"]] == ["C1"]

    def test_batches_run_sequentially(self):
        feeds = [_make_feed(f"f{n}") for n in range(3)]
        service, fetcher = _service({f.url: [] for f in feeds})

        asyncio.run(service.process_feeds_in_batch(feeds, max_concurrent=2))

        events = fetcher.events
        third_start = events.index(f"start:{feeds[2].url}")
        assert third_start > events.index(f"end:{feeds[0].url}")
        assert third_start > events.index(f"end:{feeds[1].url}")
        # feeds inside one batch overlap
        assert events.index(f"start:{feeds[1].url}") < events.index(f"end:{feeds[0].url}")

    def test_inactive_feed_not_fetched(self):
        feed = _make_feed("off", is_active=False)
        service, fetcher = _service({})
        results = asyncio.run(service.process_feeds_in_batch([feed]))
        assert results == {"off": []}
        assert fetcher.events == []

    def test_rejects_non_positive_concurrency(self):
        with pytest.raises(ValueError):
            SyndicationService(FakeFetcher({}), max_concurrent=0)  # type: ignore[arg-type]

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_batch_size(self, size: int):
        feeds = [_make_feed(f"f{n}") for n in range(3)]
        service, fetcher = _service({f.url: [] for f in feeds})
        with pytest.raises(ValueError):
            asyncio.run(service.process_feeds_in_batch(feeds, False, size))
        assert fetcher.events == []


class TestSyncFeeds:
    def test_saves_new_and_skips_known(self, tmp_path: Path):
        feed = _make_feed("feedA")
        items = [_make_item("One"), _make_item("Two")]
        provider = MagicMock(spec=AnalyticsProvider)
        provider.name = "mock"
        service, _ = _service({feed.url: items}, providers=[provider])
        store = JsonContentStore(tmp_path)

        first = asyncio.run(service.sync_feeds([feed], store))
        assert first["feedA"].saved == 2
        assert first["feedA"].duplicates == 0
        assert len(asyncio.run(store.list())) == 2

        second = asyncio.run(service.sync_feeds([feed], store))
        assert second["feedA"].processed == 2
        assert second["feedA"].saved == 0
        assert second["feedA"].duplicates == 2
        assert provider.track.call_count == 2

    def test_failing_feed_reported_empty(self, tmp_path: Path):
        good, bad = _make_feed("good"), _make_feed("bad")
        service, _ = _service({
            good.url: [_make_item("One")],
            bad.url: FeedFetchError(bad.url, "timeout"),
        })
        reports = asyncio.run(service.sync_feeds([good, bad], JsonContentStore(tmp_path)))
        assert reports["good"].saved == 1
        assert reports["bad"].processed == 0
        assert reports["bad"].saved == 0
        assert reports["bad"].error is not None
        assert "timeout" in reports["bad"].error
        assert reports["good"].error is None

    def test_inactive_feed_has_no_error(self, tmp_path: Path):
        feed = _make_feed("off", is_active=False)
        service, _ = _service({})
        reports = asyncio.run(service.sync_feeds([feed], JsonContentStore(tmp_path)))
        assert reports["off"].processed == 0
        assert reports["off"].error is None
