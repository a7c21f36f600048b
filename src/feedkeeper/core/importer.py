"""
资料库导入与合并.

两种合并方式遵循同一原则：只新增、不覆盖，重复项计数而不报错。

- JSON 备份：文件夹按 id、订阅源按 URL、阅读列表按 id 去重
- OPML：文件夹按名称（区分大小写）、订阅源按 URL 去重
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from lxml import etree
from pydantic import ValidationError
from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedkeeper.models.export import (
    EXPORT_VERSION,
    LibraryExport,
    OPMLDocument,
    OPMLFeed,
    OPMLFolder,
)
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ReadingList
from feedkeeper.utils.dates import as_utc

logger = logging.getLogger(__name__)

# OPML 文件夹缺少 text 属性时使用的名称
DEFAULT_FOLDER_NAME = "未命名文件夹"


class LibraryImportError(Exception):
    """导入错误."""


class FileReadFailedError(LibraryImportError):
    """读取文件失败."""


class InvalidFormatError(LibraryImportError):
    """文件格式无法识别."""


class DecodingFailedError(LibraryImportError):
    """JSON 备份解码失败."""


class UnsupportedVersionError(LibraryImportError):
    """备份文件版本不受支持."""

    def __init__(self, version: int) -> None:
        super().__init__(f"不支持的备份文件版本: {version}")
        self.version = version


class XMLParsingFailedError(LibraryImportError):
    """OPML 不是合法的 XML."""


@dataclass
class MergeResult:
    """合并结果统计."""

    folders_imported: int = 0
    feeds_imported: int = 0
    reading_lists_imported: int = 0
    duplicates_skipped: int = 0

    @property
    def total_imported(self) -> int:
        return self.folders_imported + self.feeds_imported + self.reading_lists_imported


def parse_opml(data: bytes | str) -> OPMLDocument:
    """
    解析 OPML 文档.

    body 下 type="rss" 的顶层 outline 为无文件夹的订阅源，其余顶层 outline
    视为文件夹，其直接子 outline 中带 xmlUrl 的为订阅源。没有订阅源的文件夹被丢弃。

    Raises:
        XMLParsingFailedError: XML 格式错误
        InvalidFormatError: 缺少 <body>
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
    )
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        msg = f"OPML 解析失败: {e}"
        raise XMLParsingFailedError(msg) from e

    body = root if root.tag == "body" else root.find(".//body")
    if body is None:
        msg = "OPML 缺少 <body> 元素"
        raise InvalidFormatError(msg)

    document = OPMLDocument()
    for outline in body.findall("outline"):
        if outline.get("type") == "rss":
            feed = _parse_feed_outline(outline, folder_name=None)
            if feed is not None:
                document.feeds.append(feed)
            continue

        name = outline.get("text") or DEFAULT_FOLDER_NAME
        feeds = [
            feed
            for nested in outline.findall("outline")
            if (feed := _parse_feed_outline(nested, folder_name=name)) is not None
        ]
        if feeds:
            document.folders.append(OPMLFolder(name=name, feeds=feeds))

    return document


def _parse_feed_outline(
    outline: etree._Element, folder_name: str | None
) -> OPMLFeed | None:
    feed_url = outline.get("xmlUrl")
    if not feed_url:
        return None

    return OPMLFeed(
        title=outline.get("text") or feed_url,
        feed_url=feed_url,
        website_url=outline.get("htmlUrl"),
        description=outline.get("description"),
        folder_name=folder_name,
    )


class ImportService:
    """导入服务."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def import_file(self, path: str | Path) -> MergeResult:
        """按扩展名导入 JSON 备份或 OPML 文件."""
        path = Path(path)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            msg = f"读取文件失败: {path} ({e})"
            raise FileReadFailedError(msg) from e

        suffix = path.suffix.lower()
        if suffix == ".json":
            return await self.import_json(data)
        if suffix in (".opml", ".xml"):
            return await self.import_opml(data)

        msg = f"不支持的文件类型: {path.name}"
        raise InvalidFormatError(msg)

    async def import_json(self, data: bytes | str) -> MergeResult:
        """导入 JSON 备份."""
        try:
            export = LibraryExport.model_validate_json(data)
        except ValidationError as e:
            msg = f"备份文件解码失败: {e}"
            raise DecodingFailedError(msg) from e

        return await self.merge_export(export)

    async def import_opml(self, data: bytes | str) -> MergeResult:
        """导入 OPML 文件."""
        document = parse_opml(data)
        return await self.merge_opml(document)

    async def merge_export(self, export: LibraryExport) -> MergeResult:
        """
        将 JSON 备份合并到当前资料库.

        Raises:
            UnsupportedVersionError: 备份版本不是 EXPORT_VERSION（不写入任何数据）
        """
        if export.version != EXPORT_VERSION:
            raise UnsupportedVersionError(export.version)

        result = MergeResult()

        feed_urls = await self._scalars(select(Feed.url))
        feed_ids = await self._scalars(select(Feed.id))
        folder_ids = await self._scalars(select(Folder.id))
        reading_list_ids = await self._scalars(select(ReadingList.id))

        # 备份中的文件夹 id -> 资料库中的文件夹 id
        folder_mapping: dict[str, str] = {}

        for item in export.folders:
            folder_mapping[item.id] = item.id
            if item.id in folder_ids:
                result.duplicates_skipped += 1
                continue

            self.session.add(
                Folder(id=item.id, name=item.name, order=item.order, icon=item.icon)
            )
            folder_ids.add(item.id)
            result.folders_imported += 1

        # 先写入文件夹，Feed 的外键依赖它们
        await self.session.flush()

        for item in export.feeds:
            if item.url in feed_urls:
                result.duplicates_skipped += 1
                continue

            # URL 不同但 id 冲突时分配新 id
            feed_id = item.id if item.id not in feed_ids else str(uuid4())
            self.session.add(
                Feed(
                    id=feed_id,
                    title=item.title,
                    description=item.feed_description,
                    url=item.url,
                    website_url=item.website_url,
                    icon_url=item.icon_url,
                    folder_id=folder_mapping.get(item.folder_id or ""),
                )
            )
            feed_urls.add(item.url)
            feed_ids.add(feed_id)
            result.feeds_imported += 1

        for item in export.reading_lists:
            if item.id in reading_list_ids:
                result.duplicates_skipped += 1
                continue

            self.session.add(
                ReadingList(
                    id=item.id,
                    name=item.name,
                    icon=item.icon,
                    created_at=as_utc(item.created_at),
                )
            )
            reading_list_ids.add(item.id)
            result.reading_lists_imported += 1

        await self._commit()
        logger.info(
            f"JSON 导入完成: 文件夹={result.folders_imported}, "
            f"Feed={result.feeds_imported}, 阅读列表={result.reading_lists_imported}, "
            f"重复={result.duplicates_skipped}"
        )
        return result

    async def merge_opml(self, document: OPMLDocument) -> MergeResult:
        """将 OPML 合并到当前资料库."""
        result = MergeResult()

        feed_urls = await self._scalars(select(Feed.url))
        existing_folders = (
            await self.session.execute(select(Folder).order_by(Folder.order.asc()))
        ).scalars().all()

        folders_by_name: dict[str, Folder] = {}
        for folder in existing_folders:
            folders_by_name.setdefault(folder.name, folder)

        for opml_folder in document.folders:
            folder = folders_by_name.get(opml_folder.name)
            if folder is None:
                folder = Folder(
                    name=opml_folder.name,
                    order=len(existing_folders) + result.folders_imported,
                )
                self.session.add(folder)
                folders_by_name[folder.name] = folder
                result.folders_imported += 1
                await self.session.flush()

            for opml_feed in opml_folder.feeds:
                self._add_opml_feed(opml_feed, folder.id, feed_urls, result)

        for opml_feed in document.feeds:
            self._add_opml_feed(opml_feed, None, feed_urls, result)

        await self._commit()
        logger.info(
            f"OPML 导入完成: 文件夹={result.folders_imported}, "
            f"Feed={result.feeds_imported}, 重复={result.duplicates_skipped}"
        )
        return result

    def _add_opml_feed(
        self,
        opml_feed: OPMLFeed,
        folder_id: str | None,
        feed_urls: set[str],
        result: MergeResult,
    ) -> None:
        if opml_feed.feed_url in feed_urls:
            result.duplicates_skipped += 1
            return

        self.session.add(
            Feed(
                title=opml_feed.title,
                description=opml_feed.description or "",
                url=opml_feed.feed_url,
                website_url=opml_feed.website_url,
                folder_id=folder_id,
            )
        )
        feed_urls.add(opml_feed.feed_url)
        result.feeds_imported += 1

    async def _scalars(self, stmt: Select) -> set[str]:
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
