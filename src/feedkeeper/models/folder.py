"""Folder 文件夹模型."""

from uuid import uuid4

from sqlmodel import Field, SQLModel


class Folder(SQLModel, table=True):
    """订阅源文件夹."""

    __tablename__ = "folders"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(description="文件夹名称")
    order: int = Field(default=0, description="排序键")
    icon: str = Field(default="folder", description="图标名")
