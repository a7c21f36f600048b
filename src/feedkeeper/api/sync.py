"""同步 API."""

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedkeeper.config import get_settings
from feedkeeper.core.sync import FeedService
from feedkeeper.fetcher.http import get_http_client
from feedkeeper.models.database import get_session
from feedkeeper.models.sync import SyncStatus

router = APIRouter(prefix="/api/sync", tags=["sync"])


def status_to_dict(status: SyncStatus) -> dict:
    return {
        "id": status.id,
        "sync_type": status.sync_type,
        "status": status.status,
        "feeds_total": status.feeds_total,
        "feeds_failed": status.feeds_failed,
        "articles_added": status.articles_added,
        "error_message": status.error_message,
        "started_at": status.started_at.isoformat(),
        "completed_at": status.completed_at.isoformat()
        if status.completed_at
        else None,
    }


@router.post("")
async def trigger_sync(
    session: AsyncSession = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> dict:
    """刷新全部 Feed."""
    service = FeedService(session, client=client, options=get_settings().sync_options())
    sync_status = await service.refresh_all_feeds()

    return {
        "success": sync_status.status == "success",
        **status_to_dict(sync_status),
    }


@router.get("/status")
async def get_sync_status(
    limit: int = Query(5, ge=1, le=50, description="返回条数"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取最近同步状态."""
    stmt = (
        select(SyncStatus)
        .order_by(SyncStatus.started_at.desc(), SyncStatus.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    statuses = result.scalars().all()

    return {"items": [status_to_dict(s) for s in statuses]}
