"""SyncStatus 同步状态模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from feedkeeper.models.types import UTCDateTime
from feedkeeper.utils.dates import utcnow


class SyncStatus(SQLModel, table=True):
    """同步任务状态."""

    __tablename__ = "sync_status"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    sync_type: str = Field(description="同步类型: all|selected")
    status: str = Field(description="状态: running|success|partial|failed")
    feeds_total: int = Field(default=0, description="参与同步的 Feed 数")
    feeds_failed: int = Field(default=0, description="失败的 Feed 数")
    articles_added: int = Field(default=0, description="新增文章数")
    error_message: str | None = Field(default=None, description="错误信息")
    started_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    completed_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
