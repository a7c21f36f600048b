"""测试资料库导出."""

import json
from datetime import date, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from lxml import etree
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.core.exporter import (
    OPML_TITLE,
    ExportService,
    FileWriteFailedError,
    build_article_markdown,
    build_opml,
    suggested_filename,
    xml_escape,
)
from feedkeeper.core.importer import parse_opml
from feedkeeper.models.article import Article
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ReadingList


class TestBuildOPML:
    """测试 OPML 生成."""

    def test_layout(self) -> None:
        folders = [
            Folder(id="f-2", name="Second", order=1),
            Folder(id="f-1", name="First", order=0),
        ]
        feeds = [
            Feed(title="Zeta", url="https://z.example.com/rss"),
            Feed(title="Alpha", url="https://a.example.com/rss"),
            Feed(
                title="In Second",
                url="https://s.example.com/rss",
                website_url="https://s.example.com",
                description="Desc",
                folder_id="f-2",
            ),
            Feed(title="In First", url="https://f.example.com/rss", folder_id="f-1"),
        ]

        opml = build_opml(folders, feeds)
        lines = opml.splitlines()

        assert lines[0] == '<?xml version="1.0" encoding="UTF-8"?>'
        assert f"<title>{OPML_TITLE}</title>" in opml
        assert opml.endswith("</opml>\n")

        body = lines[lines.index("  <body>") + 1 : lines.index("  </body>")]
        assert body == [
            '    <outline text="Alpha" type="rss" xmlUrl="https://a.example.com/rss"/>',
            '    <outline text="Zeta" type="rss" xmlUrl="https://z.example.com/rss"/>',
            '    <outline text="First">',
            '      <outline text="In First" type="rss" xmlUrl="https://f.example.com/rss"/>',
            "    </outline>",
            '    <outline text="Second">',
            '      <outline text="In Second" type="rss" xmlUrl="https://s.example.com/rss"'
            ' htmlUrl="https://s.example.com" description="Desc"/>',
            "    </outline>",
        ]

    def test_escapes_attributes(self) -> None:
        feeds = [
            Feed(
                title="""Tom & Jerry's <"best">""",
                url="https://example.com/rss?a=1&b=2",
            )
        ]
        opml = build_opml([], feeds)

        assert (
            'text="Tom &amp; Jerry&apos;s &lt;&quot;best&quot;&gt;"' in opml
        )
        assert 'xmlUrl="https://example.com/rss?a=1&amp;b=2"' in opml
        # 输出是合法的 XML
        etree.fromstring(opml.encode("utf-8"))

    def test_xml_escape(self) -> None:
        assert xml_escape("""a&b<c>d"e'f""") == "a&amp;b&lt;c&gt;d&quot;e&apos;f"

    def test_parses_back(self) -> None:
        folders = [Folder(id="f-1", name="News & Views", order=0)]
        feeds = [
            Feed(title="Loose", url="https://l.example.com/rss"),
            Feed(title="Nested", url="https://n.example.com/rss", folder_id="f-1"),
        ]

        document = parse_opml(build_opml(folders, feeds))

        assert [f.feed_url for f in document.feeds] == ["https://l.example.com/rss"]
        assert [f.name for f in document.folders] == ["News & Views"]
        assert document.folders[0].feeds[0].title == "Nested"


class TestArticleMarkdown:
    """测试文章 Markdown."""

    def test_full(self) -> None:
        feed = Feed(title="Example Blog", url="https://example.com/feed.xml")
        article = Article(
            title="Caf&eacute; &amp; more",
            content="<p>Hello <b>world</b> &amp; friends</p>",
            summary="ignored",
            url="https://example.com/posts/1",
            author="Alice",
            published_date=datetime(2006, 1, 2, 15, 4, 5),
        )

        assert build_article_markdown(article, feed) == (
            "# Café & more\n\n"
            "**Author:** Alice\n\n"
            "**Source:** Example Blog\n\n"
            "**Date:** January 2, 2006\n\n"
            "**URL:** [https://example.com/posts/1](https://example.com/posts/1)\n\n"
            "---\n\n"
            "Hello world & friends"
        )

    def test_minimal_uses_summary(self) -> None:
        article = Article(
            title="Plain",
            summary="<p>Only summary</p>",
            url="https://example.com/p",
            published_date=datetime(2024, 12, 25),
        )

        markdown = build_article_markdown(article)

        assert "**Author:**" not in markdown
        assert "**Source:**" not in markdown
        assert "**Date:** December 25, 2024\n\n" in markdown
        assert markdown.endswith("---\n\nOnly summary")


class TestExportService:
    """测试导出服务."""

    @pytest_asyncio.fixture
    async def library(
        self,
        async_session: AsyncSession,
        sample_feed: Feed,
        sample_reading_list: ReadingList,
    ) -> None:
        async_session.add(
            Feed(id="feed-002", title="Loose", url="https://loose.example.com/rss")
        )
        await async_session.commit()

    async def test_export_json(self, async_session: AsyncSession, library: None) -> None:
        content = await ExportService(async_session).export_json()
        data = json.loads(content)

        assert data["version"] == 1
        assert list(data) == sorted(data)
        assert data["folders"] == [
            {"icon": "folder", "id": "folder-001", "name": "Tech", "order": 0}
        ]
        feeds = {feed["id"]: feed for feed in data["feeds"]}
        assert feeds["feed-001"] == {
            "feedDescription": "",
            "folderID": "folder-001",
            "iconURL": None,
            "id": "feed-001",
            "title": "Example Blog",
            "url": "https://example.com/feed.xml",
            "websiteURL": "https://example.com",
        }
        assert feeds["feed-002"]["folderID"] is None
        assert data["readingLists"] == [
            {
                "createdAt": "2024-05-01T08:00:00Z",
                "icon": "bookmark",
                "id": "list-001",
                "name": "Later",
            }
        ]
        assert '\n  "feeds": [' in content

    async def test_export_opml(self, async_session: AsyncSession, library: None) -> None:
        opml = await ExportService(async_session).export_opml()

        document = parse_opml(opml)
        assert [f.feed_url for f in document.feeds] == ["https://loose.example.com/rss"]
        assert [f.name for f in document.folders] == ["Tech"]

    async def test_article_markdown_includes_source(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        markdown = await ExportService(async_session).article_markdown(sample_articles[2])

        assert markdown.startswith("# Recent unread\n\n**Author:** Alice\n\n")
        assert "**Source:** Example Blog\n\n" in markdown
        assert markdown.endswith("Recent content")

    async def test_save_files(
        self,
        async_session: AsyncSession,
        library: None,
        sample_articles: list[Article],
        tmp_path: Path,
    ) -> None:
        service = ExportService(async_session)

        json_path = await service.save_json(tmp_path / "backup.json")
        opml_path = await service.save_opml(tmp_path / "subs.opml")
        md_path = await service.save_article_markdown(
            sample_articles[0], tmp_path / "article.md"
        )

        assert json.loads(json_path.read_text(encoding="utf-8"))["version"] == 1
        assert opml_path.read_text(encoding="utf-8").startswith("<?xml")
        assert md_path.read_text(encoding="utf-8").startswith("# Old & read\n\n")
        # 不留下临时文件
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "article.md",
            "backup.json",
            "subs.opml",
        ]

    async def test_save_to_missing_directory(
        self, async_session: AsyncSession, tmp_path: Path
    ) -> None:
        with pytest.raises(FileWriteFailedError):
            await ExportService(async_session).save_opml(tmp_path / "missing" / "subs.opml")


class TestSuggestedFilename:
    """测试默认文件名."""

    def test_backup_names(self) -> None:
        today = date.today().isoformat()
        assert suggested_filename("json") == f"FeedKeeper-Export-{today}.json"
        assert suggested_filename("opml") == f"FeedKeeper-Export-{today}.opml"

    def test_markdown_name_is_sanitized(self) -> None:
        article = Article(title="What? A/B: test", url="https://example.com/1")
        assert suggested_filename("markdown", article) == "What- A-B- test.md"

    def test_markdown_requires_article(self) -> None:
        with pytest.raises(ValueError):
            suggested_filename("markdown")

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            suggested_filename("pdf")
