"""Feed 订阅源 API."""

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.config import get_settings
from feedkeeper.core.catalog import categories, feeds_for
from feedkeeper.core.feed_parser import FeedParseError
from feedkeeper.core.store import LibraryStore
from feedkeeper.core.sync import (
    AddFeedsResult,
    DuplicateFeedError,
    FeedService,
    InvalidResponseError,
)
from feedkeeper.fetcher.http import InvalidURLError, get_http_client
from feedkeeper.models.database import get_session
from feedkeeper.models.feed import Feed

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


class AddFeedRequest(BaseModel):
    url: str
    folder_id: str | None = None


class AddCatalogFeedsRequest(BaseModel):
    urls: list[str]
    folder_id: str | None = None


def feed_to_dict(feed: Feed, unread_count: int | None = None) -> dict:
    """Feed 的 API 表示."""
    data = {
        "id": feed.id,
        "title": feed.title,
        "description": feed.description,
        "url": feed.url,
        "website_url": feed.website_url,
        "icon_url": feed.icon_url,
        "folder_id": feed.folder_id,
        "is_healthy": feed.is_healthy,
        "health_status": feed.health_status,
        "consecutive_failures": feed.consecutive_failures,
        "last_error": feed.last_error,
        "last_fetched": feed.last_fetched.isoformat() if feed.last_fetched else None,
        "last_successful_fetch": feed.last_successful_fetch.isoformat()
        if feed.last_successful_fetch
        else None,
    }
    if unread_count is not None:
        data["unread_count"] = unread_count
    return data


def add_feeds_to_dict(result: AddFeedsResult) -> dict:
    return {
        "added": [feed_to_dict(feed) for feed in result.added],
        "failures": result.failures,
    }


def _feed_service(session: AsyncSession, client: httpx.AsyncClient) -> FeedService:
    return FeedService(session, client=client, options=get_settings().sync_options())


@router.get("")
async def list_feeds(
    folder_id: str | None = Query(None, description="按文件夹筛选"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取订阅列表."""
    store = LibraryStore(session)
    feeds = await store.list_feeds(folder_id=folder_id)

    items = []
    for feed in feeds:
        unread = await store.count_articles(feed.id, unread_only=True)
        items.append(feed_to_dict(feed, unread_count=unread))

    return {"total": len(items), "items": items}


@router.post("", status_code=201)
async def add_feed(
    request: AddFeedRequest,
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """订阅新 Feed."""
    if request.folder_id:
        folder = await LibraryStore(session).get_folder(request.folder_id)
        if not folder:
            raise HTTPException(status_code=404, detail="文件夹不存在")

    service = _feed_service(session, client)
    try:
        feed = await service.add_feed(request.url, folder_id=request.folder_id)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DuplicateFeedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (InvalidResponseError, FeedParseError) as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    count = await LibraryStore(session).count_articles(feed.id)
    return {**feed_to_dict(feed), "articles": count}


@router.get("/discover")
async def discover_feed(
    url: str = Query(..., description="网站地址"),
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """根据网站地址查找 Feed."""
    service = _feed_service(session, client)
    try:
        feed_url = await service.discover_feed(url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return {"website_url": url, "feed_url": feed_url, "found": feed_url is not None}


@router.get("/catalog")
async def list_catalog() -> dict:
    """获取推荐订阅目录（按分类分组）."""
    return {
        "categories": [
            {
                "name": category,
                "feeds": [
                    {"title": feed.title, "url": feed.url}
                    for feed in feeds_for(category)
                ],
            }
            for category in categories()
        ]
    }


@router.post("/catalog")
async def add_catalog_feeds(
    request: AddCatalogFeedsRequest,
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """订阅目录中选中的 Feed，单个失败不影响其他."""
    if request.folder_id:
        folder = await LibraryStore(session).get_folder(request.folder_id)
        if not folder:
            raise HTTPException(status_code=404, detail="文件夹不存在")

    result = await _feed_service(session, client).add_feeds(
        request.urls, folder_id=request.folder_id
    )
    return add_feeds_to_dict(result)


@router.post("/seed")
async def seed_default_feeds(
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """订阅库为空时添加默认 Feed."""
    result = await _feed_service(session, client).seed_default_feeds()
    return add_feeds_to_dict(result)


@router.get("/{feed_id}")
async def get_feed(
    feed_id: str,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取 Feed 详情."""
    store = LibraryStore(session)
    feed = await store.get_feed(feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")

    return {
        **feed_to_dict(feed, unread_count=await store.count_articles(feed.id, True)),
        "total_articles": await store.count_articles(feed.id),
        "created_at": feed.created_at.isoformat(),
    }


@router.post("/{feed_id}/refresh")
async def refresh_feed(
    feed_id: str,
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """刷新单个 Feed."""
    feed = await LibraryStore(session).get_feed(feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")

    result = await _feed_service(session, client).refresh_feed(feed)
    return {
        "success": result.success,
        "new_articles": result.new_articles,
        "error": result.error,
        "feed": feed_to_dict(feed),
    }


@router.delete("/{feed_id}")
async def delete_feed(
    feed_id: str,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """删除 Feed 及其文章."""
    store = LibraryStore(session)
    feed = await store.get_feed(feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")

    deleted = await store.delete_feed(feed)
    return {"id": feed_id, "deleted_articles": deleted}
