"""测试资料库存储层."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedkeeper.core.store import LibraryStore
from feedkeeper.models.article import Article
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ArticleReadingListLink, ReadingList


async def article_ids(session: AsyncSession) -> set[str]:
    result = await session.execute(select(Article.id))
    return set(result.scalars().all())


class TestQueries:
    """测试查询."""

    async def test_feed_by_url(
        self, async_session: AsyncSession, sample_feed: Feed
    ) -> None:
        store = LibraryStore(async_session)
        found = await store.feed_by_url("https://example.com/feed.xml")
        assert found is not None
        assert found.id == sample_feed.id
        assert await store.feed_by_url("https://other.example.com/") is None

    async def test_article_urls_for_feed(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        urls = await LibraryStore(async_session).article_urls_for_feed("feed-001")
        assert urls == {a.url for a in sample_articles}

    async def test_list_articles_newest_first(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        articles, total = await LibraryStore(async_session).list_articles()
        assert total == 3
        assert [a.id for a in articles] == ["article-003", "article-002", "article-001"]

    async def test_list_articles_filters(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        store = LibraryStore(async_session)

        unread, total = await store.list_articles(filter_by="unread")
        assert total == 1
        assert unread[0].id == "article-003"

        starred, _ = await store.list_articles(filter_by="starred")
        assert [a.id for a in starred] == ["article-002"]

        in_folder, total = await store.list_articles(folder_id="folder-001")
        assert total == 3

    async def test_list_articles_pagination(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        page, total = await LibraryStore(async_session).list_articles(page=2, limit=2)
        assert total == 3
        assert [a.id for a in page] == ["article-001"]

    async def test_list_reading_list_articles(
        self,
        async_session: AsyncSession,
        sample_articles: list[Article],
        sample_reading_list: ReadingList,
    ) -> None:
        store = LibraryStore(async_session)
        await store.add_to_reading_list(sample_articles[2], sample_reading_list)

        articles, total = await store.list_articles(reading_list_id="list-001")
        assert total == 1
        assert articles[0].id == "article-003"


class TestUserActions:
    """测试已读/收藏/归档."""

    async def test_mark_all_read(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        store = LibraryStore(async_session)
        assert await store.mark_all_read("feed-001") == 1
        assert await store.count_articles("feed-001", unread_only=True) == 0

    async def test_toggles(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        store = LibraryStore(async_session)
        article = sample_articles[2]

        await store.mark_read(article)
        await store.set_starred(article, True)
        await store.set_archived(article, True)

        archived, _ = await store.list_articles(filter_by="archived")
        assert [a.id for a in archived] == ["article-003"]
        assert article.is_read and article.is_starred

    async def test_reading_list_membership(
        self,
        async_session: AsyncSession,
        sample_articles: list[Article],
        sample_reading_list: ReadingList,
    ) -> None:
        store = LibraryStore(async_session)
        article = sample_articles[0]

        assert await store.add_to_reading_list(article, sample_reading_list) is True
        assert await store.add_to_reading_list(article, sample_reading_list) is False
        assert await store.remove_from_reading_list(article, sample_reading_list)
        assert not await store.remove_from_reading_list(article, sample_reading_list)


class TestDeletes:
    """测试删除的级联语义."""

    async def test_delete_feed_removes_articles_and_links(
        self,
        async_session: AsyncSession,
        sample_articles: list[Article],
        sample_reading_list: ReadingList,
    ) -> None:
        store = LibraryStore(async_session)
        await store.add_to_reading_list(sample_articles[0], sample_reading_list)
        feed = await store.get_feed("feed-001")
        assert feed is not None

        deleted = await store.delete_feed(feed)

        assert deleted == 3
        assert await article_ids(async_session) == set()
        links = await async_session.execute(select(ArticleReadingListLink))
        assert links.scalars().all() == []
        # 阅读列表本身保留
        assert await store.list_reading_lists() != []

    async def test_delete_folder_keeps_feeds(
        self, async_session: AsyncSession, sample_feed: Feed, sample_folder: Folder
    ) -> None:
        store = LibraryStore(async_session)
        moved = await store.delete_folder(sample_folder)

        assert moved == 1
        assert await store.list_folders() == []
        feeds = await store.list_feeds()
        assert [f.id for f in feeds] == ["feed-001"]
        assert feeds[0].folder_id is None

    async def test_delete_reading_list_keeps_articles(
        self,
        async_session: AsyncSession,
        sample_articles: list[Article],
        sample_reading_list: ReadingList,
    ) -> None:
        store = LibraryStore(async_session)
        await store.add_to_reading_list(sample_articles[0], sample_reading_list)

        await store.delete_reading_list(sample_reading_list)

        assert await store.list_reading_lists() == []
        assert len(await article_ids(async_session)) == 3
