"""FeedKeeper 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedkeeper.api import articles, feeds, library, sync
from feedkeeper.config import get_settings
from feedkeeper.fetcher.http import close_http_client, init_http_client
from feedkeeper.models.database import close_db, init_db

# 配置日志
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)
    init_http_client(app_settings)

    logger.info("FeedKeeper 启动完成！")
    yield

    logger.info("正在关闭...")
    await close_http_client()
    await close_db()
    logger.info("FeedKeeper 已关闭")


app = FastAPI(
    title="FeedKeeper",
    description="RSS/Atom 订阅同步与正文提取",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(feeds.router)
app.include_router(articles.router)
app.include_router(sync.router)
app.include_router(library.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedKeeper",
        "version": "0.1.0",
        "description": "RSS/Atom 订阅同步与正文提取",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedkeeper.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
