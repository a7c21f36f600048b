"""日期解析与格式化工具."""

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime

# 按顺序尝试的格式：RFC 822、ISO 8601（无小数秒）、ISO 8601（毫秒）
_DATE_FORMATS = (
    "%a, %d %b %Y %H:%M:%S %z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def utcnow() -> datetime:
    """当前 UTC 时间（带时区）."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """转换为带时区的 UTC 时间，naive 值视为 UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_naive_utc(value: datetime) -> datetime:
    """转换为 naive UTC 时间."""
    return as_utc(value).replace(tzinfo=None)


def parse_date(text: str | None) -> datetime | None:
    """
    解析 feed 中的日期字符串.

    依次尝试 RFC 822、ISO 8601（有/无毫秒），最后使用通用 ISO 8601 解析。
    全部失败时返回 None，不抛出异常。

    Returns:
        带时区的 UTC 时间，或 None
    """
    if not text:
        return None

    text = text.strip()
    if not text:
        return None

    for fmt in _DATE_FORMATS:
        try:
            return as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue

    try:
        return as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    # 宽松的 RFC 2822（例如 GMT 时区名、缺少星期）
    try:
        return as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def format_rfc822(value: datetime) -> str:
    """格式化为 RFC 822 日期（UTC，不受 locale 影响）."""
    return format_datetime(as_utc(value))


def format_long_date(value: datetime) -> str:
    """格式化为长日期，例如 January 2, 2006."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"
