"""导入/导出数据结构."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from feedkeeper.utils.dates import as_utc

if TYPE_CHECKING:
    from feedkeeper.models.feed import Feed
    from feedkeeper.models.folder import Folder
    from feedkeeper.models.reading_list import ReadingList

# 当前支持的备份文件版本
EXPORT_VERSION = 1


class _WireModel(BaseModel):
    """导出文件字段使用 camelCase."""

    model_config = ConfigDict(populate_by_name=True)


class ExportableFolder(_WireModel):
    """可导出的文件夹."""

    id: str
    name: str
    order: int = 0
    icon: str = "folder"

    @classmethod
    def from_model(cls, folder: "Folder") -> "ExportableFolder":
        return cls(id=folder.id, name=folder.name, order=folder.order, icon=folder.icon)


class ExportableFeed(_WireModel):
    """可导出的订阅源，通过 folderID 引用文件夹."""

    id: str
    title: str
    feed_description: str = Field(default="", alias="feedDescription")
    url: str
    website_url: str | None = Field(default=None, alias="websiteURL")
    icon_url: str | None = Field(default=None, alias="iconURL")
    folder_id: str | None = Field(default=None, alias="folderID")

    @classmethod
    def from_model(cls, feed: "Feed") -> "ExportableFeed":
        return cls(
            id=feed.id,
            title=feed.title,
            feed_description=feed.description,
            url=feed.url,
            website_url=feed.website_url,
            icon_url=feed.icon_url,
            folder_id=feed.folder_id,
        )


class ExportableReadingList(_WireModel):
    """可导出的阅读列表."""

    id: str
    name: str
    icon: str = "bookmark"
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_model(cls, reading_list: "ReadingList") -> "ExportableReadingList":
        return cls(
            id=reading_list.id,
            name=reading_list.name,
            icon=reading_list.icon,
            created_at=as_utc(reading_list.created_at).replace(microsecond=0),
        )


class LibraryExport(_WireModel):
    """JSON 备份文件根结构."""

    version: int = EXPORT_VERSION
    exported_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc).replace(microsecond=0),
        alias="exportedAt",
    )
    folders: list[ExportableFolder] = Field(default_factory=list)
    feeds: list[ExportableFeed] = Field(default_factory=list)
    reading_lists: list[ExportableReadingList] = Field(
        default_factory=list, alias="readingLists"
    )


@dataclass
class OPMLFeed:
    """OPML 中的订阅源."""

    title: str
    feed_url: str
    website_url: str | None = None
    description: str | None = None
    folder_name: str | None = None


@dataclass
class OPMLFolder:
    """OPML 中的文件夹（按名称识别）."""

    name: str
    feeds: list[OPMLFeed] = field(default_factory=list)


@dataclass
class OPMLDocument:
    """OPML 解析结果：文件夹 + 顶层订阅源."""

    folders: list[OPMLFolder] = field(default_factory=list)
    feeds: list[OPMLFeed] = field(default_factory=list)

    @property
    def feed_count(self) -> int:
        return len(self.feeds) + sum(len(folder.feeds) for folder in self.folders)
