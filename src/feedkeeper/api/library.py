"""资料库 API：文件夹、阅读列表、导入导出."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from feedkeeper.config import get_settings
from feedkeeper.core.exporter import ExportError, ExportService, suggested_filename
from feedkeeper.core.importer import ImportService, LibraryImportError
from feedkeeper.core.store import LibraryStore
from feedkeeper.core.sync import FeedService
from feedkeeper.models.database import get_session
from feedkeeper.models.folder import Folder
from feedkeeper.models.reading_list import ReadingList

router = APIRouter(prefix="/api/library", tags=["library"])


class FolderCreateRequest(BaseModel):
    name: str
    icon: str = "folder"


class ReadingListCreateRequest(BaseModel):
    name: str
    icon: str = "bookmark"


@router.get("/folders")
async def list_folders(
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取文件夹列表."""
    folders = await LibraryStore(session).list_folders()
    return {
        "items": [
            {"id": f.id, "name": f.name, "order": f.order, "icon": f.icon}
            for f in folders
        ]
    }


@router.post("/folders", status_code=201)
async def create_folder(
    request: FolderCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """新建文件夹（排在最后）."""
    store = LibraryStore(session)
    existing = await store.list_folders()
    folder = Folder(name=request.name, icon=request.icon, order=len(existing))
    store.add(folder)
    await store.commit()
    return {"id": folder.id, "name": folder.name, "order": folder.order, "icon": folder.icon}


@router.delete("/folders/{folder_id}")
async def delete_folder(
    folder_id: str,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """删除文件夹，其中的 Feed 保留."""
    store = LibraryStore(session)
    folder = await store.get_folder(folder_id)
    if not folder:
        raise HTTPException(status_code=404, detail="文件夹不存在")

    moved = await store.delete_folder(folder)
    return {"id": folder_id, "feeds_moved": moved}


@router.get("/reading-lists")
async def list_reading_lists(
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取阅读列表."""
    reading_lists = await LibraryStore(session).list_reading_lists()
    return {
        "items": [
            {
                "id": r.id,
                "name": r.name,
                "icon": r.icon,
                "created_at": r.created_at.isoformat(),
            }
            for r in reading_lists
        ]
    }


@router.post("/reading-lists", status_code=201)
async def create_reading_list(
    request: ReadingListCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """新建阅读列表."""
    store = LibraryStore(session)
    reading_list = ReadingList(name=request.name, icon=request.icon)
    store.add(reading_list)
    await store.commit()
    return {"id": reading_list.id, "name": reading_list.name, "icon": reading_list.icon}


@router.delete("/reading-lists/{reading_list_id}")
async def delete_reading_list(
    reading_list_id: str,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """删除阅读列表，文章保留."""
    store = LibraryStore(session)
    reading_list = await store.get_reading_list(reading_list_id)
    if not reading_list:
        raise HTTPException(status_code=404, detail="阅读列表不存在")

    await store.delete_reading_list(reading_list)
    return {"id": reading_list_id, "deleted": True}


@router.get("/export")
async def export_library(
    format: Literal["json", "opml"] = Query("json", description="导出格式"),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """导出资料库."""
    service = ExportService(session)
    try:
        if format == "json":
            content = await service.export_json()
            media_type = "application/json"
        else:
            content = await service.export_opml()
            media_type = "text/x-opml"
    except ExportError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    filename = suggested_filename(format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_library(
    request: Request,
    format: Literal["json", "opml"] = Query(..., description="文件格式"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """导入 JSON 备份或 OPML（请求体为文件内容），与现有数据合并."""
    data = await request.body()
    service = ImportService(session)
    try:
        if format == "json":
            result = await service.import_json(data)
        else:
            result = await service.import_opml(data)
    except LibraryImportError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return {
        "folders_imported": result.folders_imported,
        "feeds_imported": result.feeds_imported,
        "reading_lists_imported": result.reading_lists_imported,
        "duplicates_skipped": result.duplicates_skipped,
        "total_imported": result.total_imported,
    }


@router.post("/cleanup")
async def cleanup_articles(
    session: AsyncSession = Depends(get_session),
) -> dict:
    """清理过期的已读文章."""
    service = FeedService(session, options=get_settings().sync_options())
    deleted = await service.cleanup_old_articles()
    return {"deleted": deleted}
