"""测试数据库初始化."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from feedkeeper.models.article import Article
from feedkeeper.models.database import (
    async_session_maker,
    close_db,
    get_session,
    init_db,
)
from feedkeeper.models.feed import Feed


async def test_requires_init() -> None:
    with pytest.raises(RuntimeError):
        async_session_maker()


async def test_init_and_close(tmp_path: Path) -> None:
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'library.db'}")
    try:
        async with async_session_maker()() as session:
            session.add(Feed(title="Stored", url="https://example.com/rss"))
            await session.commit()

        sessions = get_session()
        session = await anext(sessions)
        foreign_keys = (await session.execute(text("PRAGMA foreign_keys"))).scalar()
        stored = (await session.execute(text("SELECT title FROM feeds"))).scalar()
        await sessions.aclose()

        assert foreign_keys == 1
        assert stored == "Stored"
    finally:
        await close_db()

    with pytest.raises(RuntimeError):
        async_session_maker()


class TestUTCDateTime:
    """测试时间列的存取."""

    async def test_round_trip_is_aware_utc(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        shanghai = timezone(timedelta(hours=8))
        async with session_factory() as session:
            session.add(
                Feed(
                    id="feed-tz",
                    title="TZ",
                    url="https://tz.example.com/rss",
                    last_fetched=datetime(2024, 3, 1, 20, 0, tzinfo=shanghai),
                    # naive 值视为 UTC
                    last_successful_fetch=datetime(2024, 3, 1, 12, 0),
                )
            )
            await session.commit()

        async with session_factory() as session:
            feed = await session.get(Feed, "feed-tz")
            raw = (
                await session.execute(
                    text("SELECT last_fetched FROM feeds WHERE id = 'feed-tz'")
                )
            ).scalar()

        assert feed is not None
        assert feed.last_fetched == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert feed.last_fetched.tzinfo == timezone.utc
        assert feed.last_successful_fetch == datetime(
            2024, 3, 1, 12, 0, tzinfo=timezone.utc
        )
        assert feed.created_at.tzinfo == timezone.utc
        # 数据库中保存的是不带偏移量的 UTC 时间
        assert str(raw).startswith("2024-03-01 12:00:00")

    async def test_filters_compare_in_utc(
        self, async_session: AsyncSession, sample_articles: list[Article]
    ) -> None:
        cutoff = datetime(2020, 1, 2, 7, 0, tzinfo=timezone(timedelta(hours=8)))
        result = await async_session.execute(
            select(Article.id).where(Article.published_date < cutoff)
        )
        # 本地 07:00 (+08:00) 即 UTC 前一天 23:00
        assert list(result.scalars().all()) == ["article-001"]
