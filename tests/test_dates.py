"""测试日期解析与格式化."""

from datetime import datetime, timedelta, timezone

import pytest

from feedkeeper.utils.dates import (
    as_naive_utc,
    as_utc,
    format_long_date,
    format_rfc822,
    parse_date,
)


class TestParseDate:
    """测试 parse_date."""

    def test_rfc822(self) -> None:
        result = parse_date("Mon, 02 Jan 2006 15:04:05 +0000")
        assert result == datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)

    def test_rfc822_with_offset_converted_to_utc(self) -> None:
        result = parse_date("Mon, 02 Jan 2006 15:04:05 +0200")
        assert result == datetime(2006, 1, 2, 13, 4, 5, tzinfo=timezone.utc)

    def test_iso8601_without_fraction(self) -> None:
        result = parse_date("2024-03-01T12:30:00Z")
        assert result == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)

    def test_iso8601_with_milliseconds(self) -> None:
        result = parse_date("2024-03-01T12:30:00.250+00:00")
        assert result == datetime(2024, 3, 1, 12, 30, 0, 250000, tzinfo=timezone.utc)

    def test_generic_iso8601_date_only(self) -> None:
        """通用 ISO 8601 兜底，naive 结果视为 UTC."""
        result = parse_date("2024-03-01")
        assert result == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_rfc2822_with_zone_name(self) -> None:
        result = parse_date("Tue, 03 Jan 2006 10:00:00 GMT")
        assert result == datetime(2006, 1, 3, 10, 0, tzinfo=timezone.utc)

    def test_result_is_timezone_aware(self) -> None:
        result = parse_date("2024-03-01T12:30:00+05:30")
        assert result is not None
        assert result.utcoffset() == timedelta(0)
        assert result.hour == 7

    def test_supported_formats_agree(self) -> None:
        """同一时刻的 RFC 822、ISO 8601、ISO 8601 毫秒写法解析结果一致."""
        results = {
            parse_date("Mon, 02 Jan 2006 15:04:05 +0000"),
            parse_date("2006-01-02T15:04:05Z"),
            parse_date("2006-01-02T15:04:05.000Z"),
        }
        assert results == {datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)}

    @pytest.mark.parametrize("text", [None, "", "   ", "yesterday", "32/13/2024"])
    def test_unparseable_returns_none(self, text: str | None) -> None:
        assert parse_date(text) is None


class TestConversions:
    """测试时区转换."""

    def test_as_utc_treats_naive_as_utc(self) -> None:
        naive = datetime(2024, 1, 1, 8, 0)
        assert as_utc(naive) == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_as_naive_utc(self) -> None:
        aware = datetime(2024, 1, 1, 8, 0, tzinfo=timezone(timedelta(hours=8)))
        assert as_naive_utc(aware) == datetime(2024, 1, 1, 0, 0)


class TestFormatting:
    """测试日期格式化."""

    def test_format_rfc822(self) -> None:
        value = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
        assert format_rfc822(value) == "Mon, 02 Jan 2006 15:04:05 +0000"

    def test_format_rfc822_converts_to_utc(self) -> None:
        value = datetime(2006, 1, 3, 1, 4, 5, tzinfo=timezone(timedelta(hours=10)))
        assert format_rfc822(value) == "Mon, 02 Jan 2006 15:04:05 +0000"
        # naive 值视为 UTC
        assert format_rfc822(datetime(2024, 7, 4, 9, 0)) == "Thu, 04 Jul 2024 09:00:00 +0000"

    def test_format_rfc822_round_trips(self) -> None:
        value = datetime(2023, 11, 30, 23, 59, 1, tzinfo=timezone.utc)
        assert parse_date(format_rfc822(value)) == value

    def test_format_long_date(self) -> None:
        assert format_long_date(datetime(2006, 1, 2)) == "January 2, 2006"
