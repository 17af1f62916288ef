# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for datetime helpers."""

from datetime import datetime, timedelta, timezone

from src.utils.datetime import add_years, ensure_utc, utc_now


class TestEnsureUtc:
    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_is_assumed_utc(self):
        assert ensure_utc(datetime(2025, 5, 1, 10, 0)) == datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        plus_three = timezone(timedelta(hours=3))
        result = ensure_utc(datetime(2025, 5, 1, 10, 0, tzinfo=plus_three))

        assert result == datetime(2025, 5, 1, 7, 0, tzinfo=timezone.utc)
        assert result.tzinfo is timezone.utc


class TestAddYears:
    def test_regular_day(self):
        assert add_years(datetime(2025, 3, 10, 8, 0), 1) == datetime(2026, 3, 10, 8, 0)

    def test_leap_day_clamped(self):
        assert add_years(datetime(2024, 2, 29), 1) == datetime(2025, 2, 28)

    def test_leap_day_kept_in_leap_year(self):
        assert add_years(datetime(2024, 2, 29), 4) == datetime(2028, 2, 29)


def test_utc_now_is_aware():
    assert utc_now().tzinfo is timezone.utc
