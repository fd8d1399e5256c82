"""Syndication orchestration: fetch, filter, convert, score and dedup.

Feeds are processed in fixed-size batches. Feeds inside a batch run
concurrently; batch N+1 starts only once every feed of batch N has
settled. A failing feed yields an empty result and never aborts its
siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from contentkit.analytics import AnalyticsProvider, track_event
from contentkit.content.models import Content
from contentkit.content.store import ContentRepository
from contentkit.seo.analyzer import SEOAnalyzer
from contentkit.seo.scoring import ContentScorer
from contentkit.syndication.converter import convert_item, should_process
from contentkit.syndication.fetcher import FeedFetcher
from contentkit.syndication.models import FeedItem, RSSFeed, SyncReport

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 3


class SyndicationService:
    """Turns RSS feeds into syndicated content records."""

    def __init__(
        self,
        fetcher: FeedFetcher | None = None,
        *,
        analyzer: SEOAnalyzer | None = None,
        scorer: ContentScorer | None = None,
        providers: Sequence[AnalyticsProvider] = (),
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._fetcher = fetcher or FeedFetcher()
        self._analyzer = analyzer or SEOAnalyzer()
        self._scorer = scorer or ContentScorer()
        self._providers = list(providers)
        self._max_concurrent = max_concurrent

    async def fetch_feed(self, url: str) -> list[FeedItem]:
        return await self._fetcher.fetch_feed(url)

    async def process_feed_items(
        self,
        items: Iterable[FeedItem],
        feed: RSSFeed,
        ai_analysis_enabled: bool = False,
    ) -> list[Content]:
        """Filter, convert and optionally score items in feed order.

        Scoring runs only when both ``ai_analysis_enabled`` and the
        feed's ``enable_ai_analysis`` are set; items scoring below the
        feed's ``minimum_quality_score`` are dropped. A failing item is
        logged and skipped.
        """
        processed: list[Content] = []
        for item in items:
            try:
                if not should_process(item, feed):
                    logger.debug("Skipping %s: keyword filter", item.guid)
                    continue

                content = convert_item(item, feed)

                if ai_analysis_enabled and feed.enable_ai_analysis:
                    seo = self._analyzer.analyze(content)
                    content.ai_analysis = self._scorer.score(content, seo)
                    minimum = feed.minimum_quality_score
                    if minimum and content.ai_analysis.quality_score < minimum:
                        logger.info(
                            "Dropping %s: quality %d below %d",
                            item.guid, content.ai_analysis.quality_score, minimum,
                        )
                        continue

                processed.append(content)
            except Exception:
                logger.warning("Failed to process feed item %s", item.guid, exc_info=True)
        return processed

    @staticmethod
    def deduplicate_content(
        new_content: Iterable[Content], existing_fingerprints: set[str]
    ) -> list[Content]:
        """Drop records whose fingerprint is already known.

        Repeats inside ``new_content`` collapse to their first
        occurrence. Records without a fingerprint are always kept.
        ``existing_fingerprints`` is not modified.
        """
        seen = set(existing_fingerprints)
        unique: list[Content] = []
        for content in new_content:
            fingerprint = content.fingerprint
            if fingerprint is None:
                unique.append(content)
                continue
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            unique.append(content)
        return unique

    async def process_feeds_in_batch(
        self,
        feeds: Sequence[RSSFeed],
        ai_analysis_enabled: bool = False,
        max_concurrent: int | None = None,
    ) -> dict[str, list[Content]]:
        """Process every feed; returns a map of feed id to its content."""
        outcomes = await self._run_batches(feeds, ai_analysis_enabled, max_concurrent)
        return {feed_id: content for feed_id, (content, _) in outcomes.items()}

    async def _run_batches(
        self,
        feeds: Sequence[RSSFeed],
        ai_analysis_enabled: bool,
        max_concurrent: int | None,
    ) -> dict[str, tuple[list[Content], str | None]]:
        size = self._max_concurrent if max_concurrent is None else max_concurrent
        if size < 1:
            raise ValueError("max_concurrent must be at least 1")
        results: dict[str, tuple[list[Content], str | None]] = {}
        for start in range(0, len(feeds), size):
            batch = feeds[start:start + size]
            outcomes = await asyncio.gather(
                *(self._process_feed(feed, ai_analysis_enabled) for feed in batch)
            )
            for feed, outcome in zip(batch, outcomes, strict=True):
                results[feed.id] = outcome
        return results

    async def _process_feed(
        self, feed: RSSFeed, ai_analysis_enabled: bool
    ) -> tuple[list[Content], str | None]:
        if not feed.is_active:
            logger.debug("Feed %s is inactive", feed.id)
            return [], None
        try:
            items = await self.fetch_feed(feed.url)
            return await self.process_feed_items(items, feed, ai_analysis_enabled), None
        except Exception as exc:
            logger.warning("Failed to process feed %s", feed.id, exc_info=True)
            return [], str(exc)

    async def sync_feeds(
        self,
        feeds: Sequence[RSSFeed],
        repository: ContentRepository,
        ai_analysis_enabled: bool = False,
    ) -> dict[str, SyncReport]:
        """Process ``feeds`` and persist new content into ``repository``.

        Returns one report per feed. Save failures are recorded on the
        report and do not stop the remaining records.
        """
        batch = await self._run_batches(feeds, ai_analysis_enabled, None)
        reports: dict[str, SyncReport] = {}

        for feed in feeds:
            content, fetch_error = batch.get(feed.id, ([], None))
            report = SyncReport(feed_id=feed.id, processed=len(content), error=fetch_error)
            try:
                existing = await repository.list_fingerprints(feed.id)
            except Exception as exc:
                logger.warning("Could not load fingerprints for %s", feed.id, exc_info=True)
                report.error = str(exc)
                reports[feed.id] = report
                continue

            fresh = self.deduplicate_content(content, existing)
            report.duplicates = len(content) - len(fresh)
            for record in fresh:
                try:
                    await repository.save(record)
                except Exception as exc:
                    logger.warning("Failed to save %s", record.id, exc_info=True)
                    report.error = str(exc)
                    continue
                report.saved += 1
                report.content_ids.append(record.id)

            logger.info(
                "Feed %s: %d processed, %d saved, %d duplicate(s)",
                feed.id, report.processed, report.saved, report.duplicates,
            )
            track_event(
                self._providers,
                "feed_synced",
                {"feed_id": feed.id, "saved": report.saved, "duplicates": report.duplicates},
            )
            reports[feed.id] = report
        return reports
