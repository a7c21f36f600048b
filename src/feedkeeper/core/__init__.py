"""核心业务逻辑."""

from feedkeeper.core.catalog import DEFAULT_FEEDS, FeedInfo
from feedkeeper.core.exporter import ExportService
from feedkeeper.core.feed_parser import ParsedArticle, ParsedFeed, parse_feed
from feedkeeper.core.importer import ImportService, MergeResult, parse_opml
from feedkeeper.core.store import LibraryStore
from feedkeeper.core.sync import AddFeedsResult, FeedRefreshResult, FeedService

__all__ = [
    "DEFAULT_FEEDS",
    "AddFeedsResult",
    "ExportService",
    "FeedInfo",
    "FeedRefreshResult",
    "FeedService",
    "ImportService",
    "LibraryStore",
    "MergeResult",
    "ParsedArticle",
    "ParsedFeed",
    "parse_feed",
    "parse_opml",
]
