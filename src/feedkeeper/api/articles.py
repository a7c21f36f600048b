"""文章 API."""

from typing import Literal

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.config import get_settings
from feedkeeper.core.exporter import ExportService, suggested_filename
from feedkeeper.core.store import LibraryStore
from feedkeeper.fetcher.extractor import (
    ArticleExtractor,
    FetchFailedError,
    ProxyLoginRequiredError,
)
from feedkeeper.fetcher.http import InvalidContentError, InvalidURLError, get_http_client
from feedkeeper.models.article import Article
from feedkeeper.models.database import get_session
from feedkeeper.utils.html_parser import html_to_text

router = APIRouter(prefix="/api/articles", tags=["articles"])


def article_to_dict(article: Article) -> dict:
    """文章列表项."""
    return {
        "id": article.id,
        "feed_id": article.feed_id,
        "title": article.display_title,
        "summary": article.plain_text_summary,
        "url": article.url,
        "external_url": article.external_url,
        "author": article.author,
        "published_date": article.published_date.isoformat(),
        "is_read": article.is_read,
        "is_starred": article.is_starred,
        "is_archived": article.is_archived,
    }


async def _get_article(store: LibraryStore, article_id: str) -> Article:
    article = await store.get_article(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="文章不存在")
    return article


@router.get("")
async def list_articles(
    filter: Literal["unread", "starred", "archived", "all"] = Query(
        "all", description="筛选条件"
    ),
    feed_id: str | None = Query(None, description="按 Feed 筛选"),
    folder_id: str | None = Query(None, description="按文件夹筛选"),
    reading_list_id: str | None = Query(None, description="按阅读列表筛选"),
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(50, ge=1, le=200, description="每页数量"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取文章列表（按发布时间倒序）."""
    articles, total = await LibraryStore(session).list_articles(
        feed_id=feed_id,
        folder_id=folder_id,
        reading_list_id=reading_list_id,
        filter_by=filter,
        page=page,
        limit=limit,
    )

    return {
        "total": total,
        "page": page,
        "limit": limit,
        "items": [article_to_dict(article) for article in articles],
    }


@router.get("/detail")
async def get_article(
    article_id: str = Query(..., description="文章 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取文章详情."""
    article = await _get_article(LibraryStore(session), article_id)

    return {
        **article_to_dict(article),
        "article_url": article.article_url,
        # RSS 原始 HTML
        "content": article.content,
        "summary_html": article.summary,
    }


@router.patch("/read")
async def mark_read(
    article_id: str = Query(..., description="文章 ID"),
    read: bool = Query(True, description="是否已读"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """标记文章已读/未读."""
    store = LibraryStore(session)
    article = await store.mark_read(await _get_article(store, article_id), read)
    return {"id": article_id, "is_read": article.is_read}


@router.post("/read-all")
async def mark_all_read(
    feed_id: str | None = Query(None, description="只标记该 Feed"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """全部标记为已读."""
    count = await LibraryStore(session).mark_all_read(feed_id)
    return {"updated": count}


@router.patch("/star")
async def toggle_star(
    article_id: str = Query(..., description="文章 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """切换收藏状态."""
    store = LibraryStore(session)
    article = await _get_article(store, article_id)
    await store.set_starred(article, not article.is_starred)
    return {"id": article_id, "is_starred": article.is_starred}


@router.patch("/archive")
async def toggle_archive(
    article_id: str = Query(..., description="文章 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """切换归档状态."""
    store = LibraryStore(session)
    article = await _get_article(store, article_id)
    await store.set_archived(article, not article.is_archived)
    return {"id": article_id, "is_archived": article.is_archived}


@router.post("/reading-list")
async def add_to_reading_list(
    article_id: str = Query(..., description="文章 ID"),
    reading_list_id: str = Query(..., description="阅读列表 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """加入阅读列表."""
    store = LibraryStore(session)
    article = await _get_article(store, article_id)
    reading_list = await store.get_reading_list(reading_list_id)
    if not reading_list:
        raise HTTPException(status_code=404, detail="阅读列表不存在")

    added = await store.add_to_reading_list(article, reading_list)
    return {"id": article_id, "reading_list_id": reading_list_id, "added": added}


@router.delete("/reading-list")
async def remove_from_reading_list(
    article_id: str = Query(..., description="文章 ID"),
    reading_list_id: str = Query(..., description="阅读列表 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """移出阅读列表."""
    store = LibraryStore(session)
    article = await _get_article(store, article_id)
    reading_list = await store.get_reading_list(reading_list_id)
    if not reading_list:
        raise HTTPException(status_code=404, detail="阅读列表不存在")

    removed = await store.remove_from_reading_list(article, reading_list)
    return {"id": article_id, "reading_list_id": reading_list_id, "removed": removed}


@router.post("/fetch-full")
async def fetch_full_content(
    article_id: str = Query(..., description="文章 ID"),
    via_proxy: bool = Query(False, description="通过机构代理抓取"),
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """抓取原文并提取正文（不保存）."""
    article = await _get_article(LibraryStore(session), article_id)

    extractor = ArticleExtractor(client=client, settings=get_settings())
    try:
        if via_proxy:
            content = await extractor.extract_via_proxy(article.article_url)
        else:
            content = await extractor.extract(article.article_url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ProxyLoginRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except (FetchFailedError, InvalidContentError) as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    if not content:
        return {"success": False, "error": "未能提取正文"}

    return {
        "success": True,
        "content": content,
        "text": html_to_text(content),
    }


@router.get("/markdown")
async def export_markdown(
    article_id: str = Query(..., description="文章 ID"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """导出文章为 Markdown."""
    article = await _get_article(LibraryStore(session), article_id)
    markdown = await ExportService(session).article_markdown(article)

    return {
        "filename": suggested_filename("markdown", article),
        "markdown": markdown,
    }
