"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from feedkeeper.config import SyncOptions
from feedkeeper.fetcher.http import get_http_client
from feedkeeper.main import app
from feedkeeper.models.article import Article
from feedkeeper.models.database import (
    create_tables,
    enable_sqlite_foreign_keys,
    get_session,
)
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ReadingList

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com</link>
    <description>Posts about examples</description>
    <item>
      <title>First Post</title>
      <link>https://example.com/posts/1</link>
      <description>Summary of the first post</description>
      <dc:creator>Alice</dc:creator>
      <pubDate>Mon, 02 Jan 2006 15:04:05 +0000</pubDate>
    </item>
    <item>
      <title>Second Post</title>
      <link>https://example.com/posts/2</link>
      <content:encoded><![CDATA[<p>Full <b>body</b> of the second post</p>]]></content:encoded>
      <pubDate>Tue, 03 Jan 2006 10:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <subtitle>An Atom feed</subtitle>
  <link rel="self" href="https://atom.example.com/feed.xml"/>
  <link href="https://atom.example.com/"/>
  <entry>
    <title>Atom Entry</title>
    <link rel="alternate" href="https://atom.example.com/entries/1"/>
    <id>urn:uuid:1</id>
    <updated>2024-03-01T12:30:00Z</updated>
    <summary>Entry summary</summary>
    <author><name>Bob</name></author>
  </entry>
</feed>
"""

Routes = dict[str, httpx.Response | bytes | str | Exception]


def build_mock_client(routes: Routes) -> httpx.AsyncClient:
    """
    创建使用 MockTransport 的客户端.

    routes 在每次请求时读取，测试中修改它即可模拟上游变化。
    未登记的 URL 返回 404。
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, request=request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, content=route, request=request)

    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        follow_redirects=True,
    )


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def sync_options() -> SyncOptions:
    return SyncOptions(
        max_articles_per_feed=500,
        cleanup_old_articles_days=30,
        fetch_concurrency=2,
    )


@pytest.fixture
def routes() -> Routes:
    return {}


@pytest_asyncio.fixture
async def http_client(routes: Routes) -> AsyncGenerator[httpx.AsyncClient, None]:
    client = build_mock_client(routes)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """内存数据库（所有会话共享同一连接）."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    await create_tables(engine)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """创建测试用的数据库会话."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def sample_folder(async_session: AsyncSession) -> Folder:
    folder = Folder(id="folder-001", name="Tech", order=0)
    async_session.add(folder)
    await async_session.commit()
    return folder


@pytest_asyncio.fixture
async def sample_feed(async_session: AsyncSession, sample_folder: Folder) -> Feed:
    """创建测试用的 Feed."""
    feed = Feed(
        id="feed-001",
        title="Example Blog",
        url="https://example.com/feed.xml",
        website_url="https://example.com",
        folder_id=sample_folder.id,
    )
    async_session.add(feed)
    await async_session.commit()
    return feed


@pytest_asyncio.fixture
async def sample_articles(
    async_session: AsyncSession, sample_feed: Feed
) -> list[Article]:
    """创建测试用的文章列表."""
    articles = [
        Article(
            id="article-001",
            feed_id=sample_feed.id,
            title="Old &amp; read",
            summary="<p>Old summary</p>",
            url="https://example.com/posts/old",
            published_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
            is_read=True,
        ),
        Article(
            id="article-002",
            feed_id=sample_feed.id,
            title="Old but starred",
            url="https://example.com/posts/starred",
            published_date=datetime(2020, 1, 2, tzinfo=timezone.utc),
            is_read=True,
            is_starred=True,
        ),
        Article(
            id="article-003",
            feed_id=sample_feed.id,
            title="Recent unread",
            content="<p>Recent <i>content</i></p>",
            url="https://example.com/posts/recent",
            author="Alice",
        ),
    ]
    async_session.add_all(articles)
    await async_session.commit()
    return articles


@pytest_asyncio.fixture
async def sample_reading_list(async_session: AsyncSession) -> ReadingList:
    reading_list = ReadingList(
        id="list-001",
        name="Later",
        created_at=datetime(2024, 5, 1, 8, 0, 0, tzinfo=timezone.utc),
    )
    async_session.add(reading_list)
    await async_session.commit()
    return reading_list


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
) -> AsyncGenerator[AsyncClient, None]:
    """API 测试客户端（数据库与网络均被替换）."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def override_get_http_client() -> httpx.AsyncClient:
        return http_client

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_http_client] = override_get_http_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
