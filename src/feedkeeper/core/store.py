"""
资料库存储层.

所有对 Folder / Feed / Article / ReadingList 的读写都通过同一个 AsyncSession
完成，调用方负责保证同一时刻只有一个写操作。
"""

import logging
from datetime import datetime

from sqlalchemy import delete, exists, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from feedkeeper.models.article import Article
from feedkeeper.models.feed import Feed
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ArticleReadingListLink, ReadingList

logger = logging.getLogger(__name__)


class LibraryStore:
    """资料库仓储."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # 基本操作

    def add(self, entity: SQLModel) -> None:
        self.session.add(entity)

    async def commit(self) -> None:
        await self.session.commit()

    # 查询

    async def list_folders(self) -> list[Folder]:
        stmt = select(Folder).order_by(Folder.order.asc(), Folder.name.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_feeds(self, folder_id: str | None = None) -> list[Feed]:
        stmt = select(Feed)
        if folder_id is not None:
            stmt = stmt.where(Feed.folder_id == folder_id)
        result = await self.session.execute(stmt.order_by(Feed.title.asc()))
        return list(result.scalars().all())

    async def list_reading_lists(self) -> list[ReadingList]:
        stmt = select(ReadingList).order_by(ReadingList.created_at.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_folder(self, folder_id: str) -> Folder | None:
        return await self.session.get(Folder, folder_id)

    async def get_feed(self, feed_id: str) -> Feed | None:
        return await self.session.get(Feed, feed_id)

    async def get_article(self, article_id: str) -> Article | None:
        return await self.session.get(Article, article_id)

    async def get_reading_list(self, reading_list_id: str) -> ReadingList | None:
        return await self.session.get(ReadingList, reading_list_id)

    async def feed_by_url(self, url: str) -> Feed | None:
        stmt = select(Feed).where(Feed.url == url).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def article_urls_for_feed(self, feed_id: str) -> set[str]:
        """获取 Feed 已有文章的 URL（去重键）."""
        stmt = select(Article.url).where(Article.feed_id == feed_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def count_articles(self, feed_id: str, unread_only: bool = False) -> int:
        stmt = select(func.count()).select_from(Article).where(
            Article.feed_id == feed_id
        )
        if unread_only:
            stmt = stmt.where(Article.is_read == False)  # noqa: E712
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_articles(
        self,
        feed_id: str | None = None,
        folder_id: str | None = None,
        reading_list_id: str | None = None,
        filter_by: str = "all",
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Article], int]:
        """
        分页查询文章，按发布时间倒序.

        Args:
            filter_by: unread | starred | archived | all
        """
        stmt = select(Article)
        if feed_id:
            stmt = stmt.where(Article.feed_id == feed_id)
        if folder_id:
            stmt = stmt.where(
                Article.feed_id.in_(select(Feed.id).where(Feed.folder_id == folder_id))
            )
        if reading_list_id:
            stmt = stmt.where(
                Article.id.in_(
                    select(ArticleReadingListLink.article_id).where(
                        ArticleReadingListLink.reading_list_id == reading_list_id
                    )
                )
            )

        if filter_by == "unread":
            stmt = stmt.where(Article.is_read == False)  # noqa: E712
        elif filter_by == "starred":
            stmt = stmt.where(Article.is_starred == True)  # noqa: E712
        elif filter_by == "archived":
            stmt = stmt.where(Article.is_archived == True)  # noqa: E712

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = int((await self.session.execute(count_stmt)).scalar_one())

        stmt = (
            stmt.order_by(Article.published_date.desc(), Article.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    # 用户操作

    async def mark_read(self, article: Article, read: bool = True) -> Article:
        article.is_read = read
        await self.session.commit()
        return article

    async def set_starred(self, article: Article, starred: bool) -> Article:
        article.is_starred = starred
        await self.session.commit()
        return article

    async def set_archived(self, article: Article, archived: bool) -> Article:
        article.is_archived = archived
        await self.session.commit()
        return article

    async def mark_all_read(self, feed_id: str | None = None) -> int:
        """将文章全部标记为已读，返回更新数量."""
        stmt = update(Article).where(Article.is_read == False)  # noqa: E712
        if feed_id:
            stmt = stmt.where(Article.feed_id == feed_id)
        result = await self.session.execute(stmt.values(is_read=True))
        await self.session.commit()
        return result.rowcount or 0

    async def add_to_reading_list(
        self, article: Article, reading_list: ReadingList
    ) -> bool:
        """加入阅读列表，已存在时返回 False."""
        link = await self.session.get(
            ArticleReadingListLink, (article.id, reading_list.id)
        )
        if link is not None:
            return False

        self.session.add(
            ArticleReadingListLink(
                article_id=article.id, reading_list_id=reading_list.id
            )
        )
        await self.session.commit()
        return True

    async def remove_from_reading_list(
        self, article: Article, reading_list: ReadingList
    ) -> bool:
        link = await self.session.get(
            ArticleReadingListLink, (article.id, reading_list.id)
        )
        if link is None:
            return False

        await self.session.delete(link)
        await self.session.commit()
        return True

    # 删除

    async def delete_feed(self, feed: Feed) -> int:
        """删除 Feed 及其全部文章，返回删除的文章数."""
        article_ids = select(Article.id).where(Article.feed_id == feed.id)
        await self.session.execute(
            delete(ArticleReadingListLink).where(
                ArticleReadingListLink.article_id.in_(article_ids)
            )
        )
        result = await self.session.execute(
            delete(Article).where(Article.feed_id == feed.id)
        )
        await self.session.delete(feed)
        await self.session.commit()

        count = result.rowcount or 0
        logger.info(f"已删除 Feed: {feed.title}（{count} 篇文章）")
        return count

    async def delete_folder(self, folder: Folder) -> int:
        """删除文件夹，其中的 Feed 移出文件夹而不删除."""
        result = await self.session.execute(
            update(Feed).where(Feed.folder_id == folder.id).values(folder_id=None)
        )
        await self.session.delete(folder)
        await self.session.commit()
        return result.rowcount or 0

    async def delete_reading_list(self, reading_list: ReadingList) -> None:
        """删除阅读列表，文章本身保留."""
        await self.session.execute(
            delete(ArticleReadingListLink).where(
                ArticleReadingListLink.reading_list_id == reading_list.id
            )
        )
        await self.session.delete(reading_list)
        await self.session.commit()

    async def delete_articles_older_than(self, cutoff: datetime) -> int:
        """删除早于 cutoff 的已读文章（收藏、归档、阅读列表中的文章保留）."""
        in_reading_list = exists().where(
            ArticleReadingListLink.article_id == Article.id
        )
        stmt = delete(Article).where(
            Article.published_date < cutoff,
            Article.is_read == True,  # noqa: E712
            Article.is_starred == False,  # noqa: E712
            Article.is_archived == False,  # noqa: E712
            ~in_reading_list,
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
