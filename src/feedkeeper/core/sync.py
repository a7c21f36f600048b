"""Feed 同步服务 - 抓取、解析并写入订阅源."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.config import SyncOptions, get_settings
from feedkeeper.core.catalog import starter_feeds
from feedkeeper.core.feed_parser import (
    FeedParseError,
    ParsedArticle,
    ParsedFeed,
    parse_feed,
)
from feedkeeper.core.store import LibraryStore
from feedkeeper.fetcher.discovery import candidate_feed_urls, find_advertised_feed
from feedkeeper.fetcher.http import (
    InvalidURLError,
    create_http_client,
    decode_body,
    validate_http_url,
)
from feedkeeper.models.article import Article
from feedkeeper.models.feed import Feed
from feedkeeper.models.sync import SyncStatus
from feedkeeper.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class FeedServiceError(Exception):
    """Feed 同步错误."""


class InvalidResponseError(FeedServiceError):
    """服务器返回非 2xx 状态或请求失败."""


class DuplicateFeedError(FeedServiceError):
    """该 URL 已订阅."""


# 单个 Feed 刷新时可恢复的错误，记录为健康状态而不向上抛出
REFRESH_ERRORS = (InvalidURLError, FeedServiceError, FeedParseError)


@dataclass
class FeedRefreshResult:
    """单个 Feed 的刷新结果."""

    feed_id: str
    new_articles: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class AddFeedsResult:
    """批量订阅结果."""

    added: list[Feed] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


@dataclass
class _FetchOutcome:
    feed: Feed
    parsed: ParsedFeed | None = None
    error: Exception | None = None


class FeedService:
    """Feed 同步服务."""

    def __init__(
        self,
        session: AsyncSession,
        client: httpx.AsyncClient | None = None,
        options: SyncOptions | None = None,
    ) -> None:
        self.session = session
        self.store = LibraryStore(session)
        self.options = options or get_settings().sync_options()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_http_client(
                get_settings(), timeout=self.options.request_timeout_seconds
            )
        return self._client

    async def close(self) -> None:
        """关闭自行创建的 HTTP 客户端."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FeedService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def fetch_feed(self, url: str) -> ParsedFeed:
        """
        下载并解析 Feed.

        Raises:
            InvalidURLError: URL 无效
            InvalidResponseError: 请求失败或返回非 2xx
            FeedParseError: XML 解析失败
        """
        target = validate_http_url(url)
        try:
            response = await self.client.get(target)
        except httpx.HTTPError as e:
            msg = f"请求 Feed 失败: {url} ({e})"
            raise InvalidResponseError(msg) from e

        if not response.is_success:
            msg = f"请求 Feed 失败: {url} 返回 {response.status_code}"
            raise InvalidResponseError(msg)

        return await asyncio.to_thread(parse_feed, response.content)

    async def add_feed(self, url: str, folder_id: str | None = None) -> Feed:
        """
        订阅新的 Feed.

        Args:
            url: Feed URL
            folder_id: 所属文件夹

        Returns:
            新建的 Feed（文章已一并写入）
        """
        url = url.strip()
        if await self.store.feed_by_url(url) is not None:
            msg = f"Feed 已存在: {url}"
            raise DuplicateFeedError(msg)

        parsed = await self.fetch_feed(url)

        now = utcnow()
        feed = Feed(
            title=parsed.title or url,
            description=parsed.description,
            url=url,
            website_url=parsed.link or None,
            folder_id=folder_id,
            last_fetched=now,
            last_successful_fetch=now,
        )
        self.session.add(feed)
        await self.session.flush()

        articles = [
            self._build_article(feed, item)
            for item in self._select_new(parsed.articles, set())
        ]
        self.session.add_all(articles)
        await self.session.commit()

        logger.info(f"已添加 Feed: {feed.title}（{len(articles)} 篇文章）")
        return feed

    async def add_feeds(
        self, urls: list[str], folder_id: str | None = None
    ) -> AddFeedsResult:
        """
        批量订阅 Feed.

        单个 URL 失败（无效、已订阅、请求或解析失败）只记录到 failures，
        其余 URL 继续添加。
        """
        result = AddFeedsResult()
        for url in urls:
            try:
                feed = await self.add_feed(url, folder_id=folder_id)
            except REFRESH_ERRORS as e:
                logger.warning(f"添加 Feed 失败: {url} - {e}")
                result.failures[url] = str(e)
            else:
                result.added.append(feed)
        return result

    async def seed_default_feeds(self) -> AddFeedsResult:
        """订阅库为空时添加入门 Feed，否则什么也不做."""
        if await self.store.list_feeds():
            return AddFeedsResult()

        logger.info("订阅库为空，正在添加默认 Feed")
        return await self.add_feeds([feed.url for feed in starter_feeds()])

    async def refresh_feed(self, feed: Feed) -> FeedRefreshResult:
        """
        刷新单个 Feed，只追加新文章.

        失败不会抛出，而是累加 consecutive_failures 并记录 last_error。
        """
        try:
            parsed = await self.fetch_feed(feed.url)
        except REFRESH_ERRORS as e:
            return await self._record_failure(feed, e)

        return await self._apply(feed, parsed)

    async def refresh_all_feeds(self, feeds: list[Feed] | None = None) -> SyncStatus:
        """
        刷新全部（或指定的）Feed.

        抓取与解析最多并发 fetch_concurrency 个，写入由单个消费者按完成顺序
        逐个执行。某个 Feed 失败不影响其他 Feed。
        """
        sync_type = "all" if feeds is None else "selected"
        if feeds is None:
            feeds = await self.store.list_feeds()

        sync_status = SyncStatus(
            sync_type=sync_type,
            status="running",
            feeds_total=len(feeds),
        )
        self.session.add(sync_status)
        await self.session.commit()

        targets = [(feed, feed.url) for feed in feeds]
        logger.info(f"开始刷新 {len(targets)} 个 Feed")

        queue: asyncio.Queue[_FetchOutcome] = asyncio.Queue()
        semaphore = asyncio.Semaphore(max(1, self.options.fetch_concurrency))
        results: list[FeedRefreshResult] = []

        async def fetch_one(feed: Feed, url: str) -> None:
            async with semaphore:
                try:
                    parsed = await self.fetch_feed(url)
                except REFRESH_ERRORS as e:
                    await queue.put(_FetchOutcome(feed, error=e))
                except Exception as e:
                    logger.exception(f"刷新 Feed 时发生未知错误: {url}")
                    await queue.put(_FetchOutcome(feed, error=e))
                else:
                    await queue.put(_FetchOutcome(feed, parsed=parsed))

        async def write_all() -> None:
            for _ in targets:
                outcome = await queue.get()
                results.append(await self._write(outcome))

        await asyncio.gather(
            write_all(),
            *(fetch_one(feed, url) for feed, url in targets),
        )

        failed = sum(1 for result in results if not result.success)
        sync_status.feeds_failed = failed
        sync_status.articles_added = sum(result.new_articles for result in results)
        if failed == 0:
            sync_status.status = "success"
        elif failed == len(results):
            sync_status.status = "failed"
            sync_status.error_message = results[-1].error
        else:
            sync_status.status = "partial"
        sync_status.completed_at = utcnow()
        await self.session.commit()

        logger.info(
            f"刷新完成: Feed={len(results)}, 失败={failed}, "
            f"新文章={sync_status.articles_added}"
        )
        return sync_status

    async def discover_feed(self, website_url: str) -> str | None:
        """
        根据网站地址查找 Feed.

        先查找网页 <link> 声明的 Feed，再依次探测常见路径。

        Returns:
            Feed URL，未找到时返回 None
        """
        target = validate_http_url(website_url)

        try:
            response = await self.client.get(target)
        except httpx.HTTPError as e:
            logger.warning(f"获取网页失败: {website_url} - {e}")
        else:
            html = decode_body(response.content)
            found = find_advertised_feed(html, str(response.url))
            if found:
                logger.info(f"发现 Feed: {found}")
                return found

        for candidate in candidate_feed_urls(website_url.strip()):
            try:
                await self.fetch_feed(candidate)
            except REFRESH_ERRORS:
                continue
            logger.info(f"探测到 Feed: {candidate}")
            return candidate

        return None

    async def cleanup_old_articles(self) -> int:
        """删除超过保留天数的已读文章，返回删除数量."""
        days = self.options.cleanup_old_articles_days
        if days <= 0:
            return 0

        cutoff = utcnow() - timedelta(days=days)
        count = await self.store.delete_articles_older_than(cutoff)
        logger.info(f"清理了 {count} 篇 {days} 天前的文章")
        return count

    async def _write(self, outcome: _FetchOutcome) -> FeedRefreshResult:
        if outcome.parsed is None:
            return await self._record_failure(outcome.feed, outcome.error)

        try:
            return await self._apply(outcome.feed, outcome.parsed)
        except SQLAlchemyError as e:
            logger.exception(f"写入 Feed 失败: {outcome.feed.url}")
            await self.session.rollback()
            await self.session.refresh(outcome.feed)
            return await self._record_failure(outcome.feed, e)

    async def _apply(self, feed: Feed, parsed: ParsedFeed) -> FeedRefreshResult:
        """写入一次成功的抓取结果."""
        # 旧数据可能缺少网站地址
        if feed.website_url is None and parsed.link:
            feed.website_url = parsed.link

        existing = await self.store.article_urls_for_feed(feed.id)
        articles = [
            self._build_article(feed, item)
            for item in self._select_new(parsed.articles, existing)
        ]
        self.session.add_all(articles)

        now = utcnow()
        feed.last_fetched = now
        feed.last_successful_fetch = now
        feed.consecutive_failures = 0
        feed.last_error = None
        await self.session.commit()

        if articles:
            logger.info(f"Feed 刷新: {feed.title} 新增 {len(articles)} 篇")
        return FeedRefreshResult(feed_id=feed.id, new_articles=len(articles))

    async def _record_failure(
        self, feed: Feed, error: Exception | None
    ) -> FeedRefreshResult:
        message = str(error) or type(error).__name__
        feed.consecutive_failures += 1
        feed.last_error = message
        await self.session.commit()

        logger.warning(
            f"Feed 刷新失败: {feed.title} ({feed.consecutive_failures} 次) - {message}"
        )
        return FeedRefreshResult(feed_id=feed.id, error=message)

    def _select_new(
        self, items: list[ParsedArticle], existing_urls: set[str]
    ) -> list[ParsedArticle]:
        """按 URL 去重，最新的优先，最多 max_articles_per_feed 篇."""
        seen = set(existing_urls)
        selected = []
        for item in items:
            if item.url in seen:
                continue
            seen.add(item.url)
            selected.append(item)

        limit = self.options.max_articles_per_feed
        if limit > 0 and len(selected) > limit:
            selected.sort(key=lambda item: as_utc(item.published_date), reverse=True)
            selected = selected[:limit]
        return selected

    @staticmethod
    def _build_article(feed: Feed, item: ParsedArticle) -> Article:
        return Article(
            feed_id=feed.id,
            title=item.title,
            summary=item.summary,
            content=item.content,
            url=item.url,
            external_url=item.external_url,
            author=item.author,
            published_date=as_utc(item.published_date),
        )
