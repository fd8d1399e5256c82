"""RSS/Atom feed fetcher."""

from __future__ import annotations

import logging
from calendar import timegm
from datetime import UTC, datetime

import feedparser
import httpx

from contentkit.content.html import html_to_plain_text
from contentkit.content.identity import compute_fingerprint
from contentkit.errors import FeedFetchError
from contentkit.syndication.models import FeedItem

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ITEMS = 50
USER_AGENT = "contentkit-syndication/0.1 (+https://github.com/contentkit)"


class FeedFetcher:
    """Downloads a feed over HTTP and normalizes its entries.

    Pass ``client`` to share a connection pool (or a mock transport);
    otherwise a short-lived client is opened per fetch.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_items: int = DEFAULT_MAX_ITEMS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_items = max_items
        self._client = client

    async def fetch_feed(self, url: str) -> list[FeedItem]:
        """Fetch and parse ``url`` into feed items, in feed order.

        Raises:
            FeedFetchError: Network failure, HTTP error status or a
                document that is not a parseable feed.
        """
        try:
            document = await self._download(url)
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch RSS feed %s: %s", url, exc)
            raise FeedFetchError(url, exc) from exc

        feed = feedparser.parse(document)
        if feed.bozo and not feed.entries:
            cause = feed.get("bozo_exception") or "unparseable feed"
            logger.warning("Feed error for %s: %s", url, cause)
            raise FeedFetchError(url, cause)

        items = [self.entry_to_item(entry) for entry in feed.entries[: self._max_items]]
        logger.info("Parsed %d items from %s", len(items), url)
        return items

    async def _download(self, url: str) -> bytes:
        if self._client is not None:
            response = await self._client.get(url)
        else:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(url)
        response.raise_for_status()
        return response.content

    @staticmethod
    def entry_to_item(entry: feedparser.FeedParserDict) -> FeedItem:
        """Convert a feedparser entry to a FeedItem."""
        raw_title = entry.get("title", "")
        link = entry.get("link", "")
        published_raw = entry.get("published") or entry.get("updated") or ""

        summary = entry.get("summary", "")
        encoded = _extract_content(entry)
        description = html_to_plain_text(summary or encoded) or summary or ""

        author = entry.get("author") or None
        categories = [t.get("term", "") for t in entry.get("tags", []) if t.get("term")]

        return FeedItem(
            guid=entry.get("id") or link or "",
            title=raw_title or "Untitled",
            description=description,
            link=link,
            published_at=_parse_date(entry) or datetime.now(tz=UTC),
            author=author,
            categories=categories,
            content=encoded or summary or description or None,
            fingerprint=compute_fingerprint(raw_title, link, published_raw),
        )


async def fetch_feed(url: str, *, timeout: float = DEFAULT_TIMEOUT) -> list[FeedItem]:
    """Fetch a single feed with a one-off client."""
    return await FeedFetcher(timeout=timeout).fetch_feed(url)


def _extract_content(entry: feedparser.FeedParserDict) -> str:
    """Longest full-content block of an entry (``content:encoded``)."""
    content_list = entry.get("content", [])
    if not content_list:
        return ""
    best = max(content_list, key=lambda c: len(c.get("value", "")))
    return best.get("value", "")


def _parse_date(entry: feedparser.FeedParserDict) -> datetime | None:
    """Parse the published date from a feed entry."""
    for field in ("published_parsed", "updated_parsed"):
        time_struct = entry.get(field)
        if time_struct:
            try:
                return datetime.fromtimestamp(timegm(time_struct), tz=UTC)
            except (ValueError, OverflowError):
                continue
    return None
