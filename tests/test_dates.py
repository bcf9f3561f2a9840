"""Tests for openproject_dashboard.core.dates."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from openproject_dashboard.core.dates import (
    INVALID_DATE,
    NOT_SET,
    days_remaining,
    format_date,
    format_date_for_api,
    format_date_range,
    is_future_date,
    is_overdue,
    is_past_date,
    parse_date,
)

TODAY = date(2024, 6, 15)


class TestParseDate:
    def test_iso_date(self) -> None:
        assert parse_date("2024-06-14") == date(2024, 6, 14)

    def test_iso_datetime_keeps_day(self) -> None:
        assert parse_date("2024-06-14T23:30:00Z") == date(2024, 6, 14)

    def test_date_and_datetime_objects(self) -> None:
        assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)
        assert parse_date(datetime(2024, 1, 2, 15, 0)) == date(2024, 1, 2)

    @pytest.mark.parametrize("value", [None, "", "not-a-date", "2024-13-45"])
    def test_absent_or_malformed(self, value: str | None) -> None:
        assert parse_date(value) is None


class TestIsOverdue:
    def test_past_due_unfinished(self) -> None:
        assert is_overdue("2024-06-14", 50, today=TODAY) is True

    def test_due_today_is_not_overdue(self) -> None:
        assert is_overdue("2024-06-15", 0, today=TODAY) is False

    def test_completed_never_overdue(self) -> None:
        assert is_overdue("2020-01-01", 100, today=TODAY) is False

    def test_missing_due_date(self) -> None:
        assert is_overdue(None, 0, today=TODAY) is False

    def test_malformed_due_date_fails_safe(self) -> None:
        assert is_overdue("yesterday", 0, today=TODAY) is False

    def test_missing_percent_counts_as_zero(self) -> None:
        assert is_overdue("2024-06-01", None, today=TODAY) is True


class TestDaysRemaining:
    def test_future(self) -> None:
        assert days_remaining("2024-06-20", today=TODAY) == 5

    def test_past_is_negative(self) -> None:
        assert days_remaining("2024-06-10", today=TODAY) == -5

    def test_today(self) -> None:
        assert days_remaining("2024-06-15", today=TODAY) == 0

    def test_absent_or_malformed(self) -> None:
        assert days_remaining(None, today=TODAY) is None
        assert days_remaining("garbage", today=TODAY) is None


class TestPastFuture:
    def test_past(self) -> None:
        assert is_past_date("2024-06-14", today=TODAY) is True
        assert is_past_date("2024-06-15", today=TODAY) is False

    def test_future(self) -> None:
        assert is_future_date("2024-06-16", today=TODAY) is True
        assert is_future_date("2024-06-15", today=TODAY) is False

    def test_malformed_is_neither(self) -> None:
        assert is_past_date("nope", today=TODAY) is False
        assert is_future_date("nope", today=TODAY) is False


class TestFormatting:
    def test_format_date(self) -> None:
        assert format_date("2024-01-05") == "05 Jan 2024"

    def test_format_date_missing(self) -> None:
        assert format_date(None) == NOT_SET

    def test_format_date_invalid(self) -> None:
        assert format_date("31/31/2024") == INVALID_DATE

    def test_format_date_range(self) -> None:
        assert format_date_range("2024-06-01", None) == f"01 Jun 2024 - {NOT_SET}"

    def test_format_for_api(self) -> None:
        assert format_date_for_api(date(2024, 3, 7)) == "2024-03-07"
