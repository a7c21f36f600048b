"""自定义列类型."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

from feedkeeper.utils.dates import as_naive_utc, as_utc


class UTCDateTime(TypeDecorator[datetime]):
    """
    UTC 时间列.

    写入时转换为 UTC 后去掉时区（SQLite 不保存偏移量），读取时重新附加 UTC，
    Python 侧始终是带时区的 UTC 时间。naive 值视为 UTC。
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        return as_naive_utc(value)

    def process_result_value(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        return as_utc(value)
