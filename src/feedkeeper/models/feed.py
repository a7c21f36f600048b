"""Feed 订阅源模型."""

from datetime import datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from feedkeeper.models.types import UTCDateTime
from feedkeeper.utils.dates import as_utc, utcnow

# 连续失败达到该次数后视为不健康
UNHEALTHY_FAILURE_THRESHOLD = 3


class Feed(SQLModel, table=True):
    """RSS/Atom 订阅源."""

    __tablename__ = "feeds"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = Field(description="Feed 标题")
    description: str = Field(default="", description="Feed 描述")
    url: str = Field(index=True, description="Feed 抓取 URL（合并去重键）")
    website_url: str | None = Field(default=None, description="网站 URL")
    icon_url: str | None = Field(default=None, description="图标 URL")
    folder_id: str | None = Field(
        default=None,
        foreign_key="folders.id",
        ondelete="SET NULL",
        description="所属文件夹",
    )
    last_fetched: datetime | None = Field(
        default=None, sa_type=UTCDateTime, description="最近抓取时间"
    )
    last_successful_fetch: datetime | None = Field(
        default=None, sa_type=UTCDateTime, description="最近成功抓取时间"
    )
    last_error: str | None = Field(default=None, description="最近错误信息")
    consecutive_failures: int = Field(default=0, ge=0, description="连续失败次数")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @property
    def is_healthy(self) -> bool:
        """连续失败少于阈值即为健康."""
        return self.consecutive_failures < UNHEALTHY_FAILURE_THRESHOLD

    @property
    def health_status(self) -> str:
        """健康状态描述."""
        if self.last_error and not self.is_healthy:
            return f"Error: {self.last_error}"
        if self.last_successful_fetch is not None:
            return f"Updated {_relative_time(self.last_successful_fetch)}"
        return "Never updated"


def _relative_time(value: datetime) -> str:
    """相对时间（缩写形式），例如 5 min. ago."""
    seconds = int((utcnow() - as_utc(value)).total_seconds())
    if seconds < 60:
        return "now"
    if seconds < 3600:
        return f"{seconds // 60} min. ago"
    if seconds < 86400:
        return f"{seconds // 3600} hr. ago"
    return f"{seconds // 86400} days ago"
