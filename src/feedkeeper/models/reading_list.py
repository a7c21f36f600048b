"""ReadingList 阅读列表模型."""

from datetime import datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from feedkeeper.models.types import UTCDateTime
from feedkeeper.utils.dates import utcnow


class ArticleReadingListLink(SQLModel, table=True):
    """文章与阅读列表的多对多关联."""

    __tablename__ = "article_reading_list"  # type: ignore[assignment]

    article_id: str = Field(
        foreign_key="articles.id", ondelete="CASCADE", primary_key=True
    )
    reading_list_id: str = Field(
        foreign_key="reading_lists.id", ondelete="CASCADE", primary_key=True
    )


class ReadingList(SQLModel, table=True):
    """用户阅读列表."""

    __tablename__ = "reading_lists"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(description="列表名称")
    icon: str = Field(default="bookmark", description="图标名")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
