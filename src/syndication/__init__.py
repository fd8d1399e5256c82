"""RSS syndication: fetch feeds, convert entries, dedup and persist."""

from contentkit.syndication.converter import convert_item, should_process
from contentkit.syndication.fetcher import FeedFetcher, fetch_feed
from contentkit.syndication.models import FeedItem, RSSFeed, SyncReport
from contentkit.syndication.service import SyndicationService

__all__ = [
    "FeedFetcher",
    "FeedItem",
    "RSSFeed",
    "SyncReport",
    "SyndicationService",
    "convert_item",
    "fetch_feed",
    "should_process",
]
