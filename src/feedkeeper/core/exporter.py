"""资料库导出：JSON 备份、OPML 订阅列表、文章 Markdown."""

import asyncio
import json
import logging
import os
import tempfile
from collections import defaultdict
from datetime import date
from pathlib import Path
from xml.sax.saxutils import escape

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.core.store import LibraryStore
from feedkeeper.models.article import Article
from feedkeeper.models.export import (
    ExportableFeed,
    ExportableFolder,
    ExportableReadingList,
    LibraryExport,
)
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.utils.dates import format_long_date, format_rfc822, utcnow
from feedkeeper.utils.html_parser import clean_text, sanitize_filename

logger = logging.getLogger(__name__)

OPML_TITLE = "FeedKeeper Subscriptions"
OPML_DOCS = "https://opml.org/spec2.opml"

# 属性值中需要转义的字符（& < > 由 escape 默认处理）
_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


class ExportError(Exception):
    """导出错误."""


class EncodingFailedError(ExportError):
    """序列化失败."""


class FileWriteFailedError(ExportError):
    """写入文件失败."""


def xml_escape(value: str) -> str:
    """转义 XML 属性值."""
    return escape(value, _ATTR_ENTITIES)


def build_opml(folders: list[Folder], feeds: list[Feed]) -> str:
    """
    生成 OPML 2.0 文档.

    无文件夹的 Feed 在前（按标题排序），之后按 order 输出文件夹及其 Feed。
    """
    feeds_by_folder: dict[str | None, list[Feed]] = defaultdict(list)
    for feed in feeds:
        feeds_by_folder[feed.folder_id].append(feed)

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<opml version="2.0">',
        "  <head>",
        f"    <title>{xml_escape(OPML_TITLE)}</title>",
        f"    <dateCreated>{format_rfc822(utcnow())}</dateCreated>",
        f"    <docs>{OPML_DOCS}</docs>",
        "  </head>",
        "  <body>",
    ]

    for feed in sorted(feeds_by_folder.get(None, []), key=lambda f: f.title):
        lines.append(_feed_outline(feed, indent=2))

    for folder in sorted(folders, key=lambda f: f.order):
        lines.append(f'    <outline text="{xml_escape(folder.name)}">')
        for feed in sorted(feeds_by_folder.get(folder.id, []), key=lambda f: f.title):
            lines.append(_feed_outline(feed, indent=3))
        lines.append("    </outline>")

    lines.append("  </body>")
    lines.append("</opml>")
    return "\n".join(lines) + "\n"


def _feed_outline(feed: Feed, indent: int) -> str:
    attrs = [
        f'text="{xml_escape(feed.title)}"',
        'type="rss"',
        f'xmlUrl="{xml_escape(feed.url)}"',
    ]
    if feed.website_url:
        attrs.append(f'htmlUrl="{xml_escape(feed.website_url)}"')
    if feed.description:
        attrs.append(f'description="{xml_escape(feed.description)}"')
    return "  " * indent + f"<outline {' '.join(attrs)}/>"


def build_article_markdown(article: Article, feed: Feed | None = None) -> str:
    """生成文章 Markdown（正文转为纯文本）."""
    parts = [f"# {article.display_title}\n\n"]

    if article.author:
        parts.append(f"**Author:** {article.author}\n\n")
    if feed is not None:
        parts.append(f"**Source:** {feed.title}\n\n")
    parts.append(f"**Date:** {format_long_date(article.published_date)}\n\n")
    parts.append(f"**URL:** [{article.url}]({article.url})\n\n")
    parts.append("---\n\n")

    parts.append(clean_text(article.content or article.summary))
    return "".join(parts)


def write_atomic(path: Path, content: str) -> None:
    """先写入同目录临时文件再替换，避免留下半个文件."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ExportService:
    """导出服务."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.store = LibraryStore(session)

    async def build_export(self) -> LibraryExport:
        """读取整个资料库生成备份结构."""
        folders = await self.store.list_folders()
        feeds = await self.store.list_feeds()
        reading_lists = await self.store.list_reading_lists()

        return LibraryExport(
            folders=[ExportableFolder.from_model(folder) for folder in folders],
            feeds=[ExportableFeed.from_model(feed) for feed in feeds],
            reading_lists=[
                ExportableReadingList.from_model(item) for item in reading_lists
            ],
        )

    async def export_json(self) -> str:
        """导出 JSON 备份（缩进 2，键排序）."""
        export = await self.build_export()
        try:
            data = export.model_dump(mode="json", by_alias=True)
            return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)
        except (TypeError, ValueError, ValidationError) as e:
            msg = f"备份序列化失败: {e}"
            raise EncodingFailedError(msg) from e

    async def export_opml(self) -> str:
        """导出 OPML 订阅列表."""
        folders = await self.store.list_folders()
        feeds = await self.store.list_feeds()
        return build_opml(folders, feeds)

    async def article_markdown(self, article: Article) -> str:
        """导出单篇文章为 Markdown."""
        feed = await self.store.get_feed(article.feed_id) if article.feed_id else None
        return build_article_markdown(article, feed)

    async def save_json(self, path: str | Path) -> Path:
        content = await self.export_json()
        return await self._save(path, content)

    async def save_opml(self, path: str | Path) -> Path:
        content = await self.export_opml()
        return await self._save(path, content)

    async def save_article_markdown(self, article: Article, path: str | Path) -> Path:
        content = await self.article_markdown(article)
        return await self._save(path, content)

    async def _save(self, path: str | Path, content: str) -> Path:
        path = Path(path)
        try:
            await asyncio.to_thread(write_atomic, path, content)
        except OSError as e:
            msg = f"写入文件失败: {path} ({e})"
            raise FileWriteFailedError(msg) from e

        logger.info(f"已导出: {path}")
        return path


def suggested_filename(kind: str, article: Article | None = None) -> str:
    """
    导出文件的默认文件名.

    Args:
        kind: json | opml | markdown
        article: kind 为 markdown 时必填
    """
    if kind == "markdown":
        if article is None:
            msg = "导出 Markdown 需要指定文章"
            raise ValueError(msg)
        return f"{sanitize_filename(article.display_title) or 'article'}.md"
    if kind in ("json", "opml"):
        return f"FeedKeeper-Export-{date.today().isoformat()}.{kind}"

    msg = f"未知的导出类型: {kind}"
    raise ValueError(msg)
