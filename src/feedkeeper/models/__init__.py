"""数据模型."""

from feedkeeper.models.article import Article
from feedkeeper.models.database import get_session, init_db
from feedkeeper.models.export import (
    EXPORT_VERSION,
    ExportableFeed,
    ExportableFolder,
    ExportableReadingList,
    LibraryExport,
    OPMLDocument,
    OPMLFeed,
    OPMLFolder,
)
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ArticleReadingListLink, ReadingList
from feedkeeper.models.sync import SyncStatus

__all__ = [
    "EXPORT_VERSION",
    "Article",
    "ArticleReadingListLink",
    "ExportableFeed",
    "ExportableFolder",
    "ExportableReadingList",
    "Feed",
    "Folder",
    "LibraryExport",
    "OPMLDocument",
    "OPMLFeed",
    "OPMLFolder",
    "ReadingList",
    "SyncStatus",
    "get_session",
    "init_db",
]
