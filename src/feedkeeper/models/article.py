"""Article 文章模型."""

from datetime import datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from feedkeeper.models.types import UTCDateTime
from feedkeeper.utils.dates import utcnow
from feedkeeper.utils.html_parser import clean_text, decode_entities


class Article(SQLModel, table=True):
    """订阅源中的一篇文章."""

    __tablename__ = "articles"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    feed_id: str | None = Field(
        default=None,
        foreign_key="feeds.id",
        ondelete="CASCADE",
        index=True,
        description="关联 Feed",
    )
    title: str = Field(description="标题")
    summary: str = Field(default="", description="摘要 HTML")
    content: str = Field(default="", description="正文 HTML")
    url: str = Field(index=True, description="文章链接（Feed 内去重键）")
    external_url: str | None = Field(
        default=None, description="外部链接（如 Reddit 链接帖）"
    )
    author: str | None = Field(default=None, description="作者")
    published_date: datetime = Field(
        default_factory=utcnow, sa_type=UTCDateTime, description="发布时间"
    )
    is_read: bool = Field(default=False, description="是否已读")
    is_starred: bool = Field(default=False, description="是否收藏")
    is_archived: bool = Field(default=False, description="是否归档")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @property
    def article_url(self) -> str:
        """抓取全文时使用的地址（优先外部链接）."""
        return self.external_url or self.url

    @property
    def display_title(self) -> str:
        """解码实体后的标题."""
        return decode_entities(self.title)

    @property
    def plain_text_summary(self) -> str:
        """去除标签并解码实体的摘要."""
        return clean_text(self.summary)
