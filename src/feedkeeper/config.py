"""应用配置管理."""

from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Safari/605.1.15"
)


@dataclass(frozen=True)
class SyncOptions:
    """同步/合并调用使用的配置快照（按值传递）."""

    max_articles_per_feed: int = 500
    cleanup_old_articles_days: int = 30
    fetch_concurrency: int = 4
    request_timeout_seconds: float = 30.0


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 应用配置
    database_url: str = "sqlite+aiosqlite:///./feedkeeper.db"
    log_level: str = "INFO"

    # 网络配置
    request_timeout_seconds: float = 30.0
    user_agent: str = BROWSER_USER_AGENT
    # 机构代理前缀（EZProxy 形式，例如 https://proxy.example.edu/start?url=）
    proxy_base_url: str = ""

    # 同步配置
    refresh_concurrency: int = 4
    max_articles_per_feed: int = 500
    cleanup_old_articles_days: int = 30

    def sync_options(self) -> SyncOptions:
        """生成同步配置快照."""
        return SyncOptions(
            max_articles_per_feed=self.max_articles_per_feed,
            cleanup_old_articles_days=self.cleanup_old_articles_days,
            fetch_concurrency=max(1, self.refresh_concurrency),
            request_timeout_seconds=self.request_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
