"""
Unit tests for calendar bucketing.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from mediawatch.core.buckets import assign_to_bucket, build_time_buckets, get_strategy, is_within
from mediawatch.schemas import Granularity

KST = timezone(timedelta(hours=9))


class TestBuildTimeBuckets:
    """Test cases for build_time_buckets."""

    def test_daily(self):
        buckets = build_time_buckets(date(2024, 1, 1), date(2024, 1, 3), Granularity.DAILY)

        assert [b.bucket for b in buckets] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert [b.label for b in buckets] == ["1/1", "1/2", "1/3"]

    def test_weekly_starts_on_monday(self):
        # 2024-01-03 is a Wednesday
        buckets = build_time_buckets(date(2024, 1, 3), date(2024, 1, 20), "weekly")

        assert buckets[0].start == date(2024, 1, 1)
        assert all(b.start.weekday() == 0 for b in buckets)
        assert buckets[0].label == "1/1 주"
        assert len(buckets) == 3

    def test_monthly(self):
        buckets = build_time_buckets(date(2024, 1, 15), date(2024, 12, 31), "monthly")

        assert len(buckets) == 12
        assert buckets[0].start == date(2024, 1, 1)
        assert buckets[1].label == "2024/2"
        assert buckets[-1].end == date(2025, 1, 1)

    def test_quarterly(self):
        buckets = build_time_buckets(date(2024, 2, 10), date(2024, 11, 1), "quarterly")

        assert [b.label for b in buckets] == ["2024 Q1", "2024 Q2", "2024 Q3", "2024 Q4"]
        assert buckets[0].start == date(2024, 1, 1)

    def test_yearly(self):
        buckets = build_time_buckets(date(2023, 6, 1), date(2024, 6, 1), "yearly")

        assert [b.label for b in buckets] == ["2023", "2024"]

    def test_end_before_start_yields_single_bucket(self):
        buckets = build_time_buckets(date(2024, 3, 10), date(2024, 3, 1), "daily")

        assert len(buckets) == 1
        assert buckets[0].start == date(2024, 3, 10)

    def test_capped(self):
        buckets = build_time_buckets(date(2020, 1, 1), date(2024, 12, 31), "daily")
        assert len(buckets) == 500

    def test_custom_cap(self):
        assert len(build_time_buckets(date(2024, 1, 1), date(2024, 12, 31), "daily", max_buckets=10)) == 10

    @pytest.mark.parametrize("granularity", list(Granularity))
    @pytest.mark.parametrize(
        "start_date, end_date",
        [
            (date(2024, 1, 1), date(2024, 1, 1)),
            (date(2024, 1, 31), date(2024, 3, 1)),
            (date(2023, 11, 15), date(2024, 2, 29)),
        ],
    )
    def test_contiguous_and_covering(self, granularity, start_date, end_date):
        buckets = build_time_buckets(start_date, end_date, granularity)

        assert buckets[0].start <= start_date
        assert buckets[-1].start <= end_date < buckets[-1].end
        for current, following in zip(buckets, buckets[1:]):
            assert current.end == following.start
            assert current.start < following.start

    def test_month_end_stepping(self):
        # Aligned month starts never drift to day 28/29
        buckets = build_time_buckets(date(2024, 1, 31), date(2024, 4, 30), "monthly")
        assert [b.start.day for b in buckets] == [1, 1, 1, 1]

    def test_get_strategy_accepts_strings(self):
        assert get_strategy("quarterly").label(date(2024, 7, 1)) == "2024 Q3"


class TestAssignToBucket:
    """Test cases for assign_to_bucket."""

    @pytest.fixture
    def buckets(self):
        return build_time_buckets(date(2024, 1, 1), date(2024, 3, 31), "monthly")

    def test_inside_range(self, buckets):
        bucket = assign_to_bucket(datetime(2024, 2, 14, 9, tzinfo=timezone.utc), buckets)

        assert bucket.bucket == "2024-02-01"
        assert bucket.start <= date(2024, 2, 14) < bucket.end

    def test_half_open_boundary(self, buckets):
        assert assign_to_bucket(datetime(2024, 2, 1, tzinfo=timezone.utc), buckets).bucket == "2024-02-01"
        assert assign_to_bucket(datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc), buckets).bucket == "2024-01-01"

    def test_uses_utc_calendar_date(self, buckets):
        # 2024-02-01 08:00 in KST is still January 31st in UTC
        moment = datetime(2024, 2, 1, 8, tzinfo=KST)
        assert assign_to_bucket(moment, buckets).bucket == "2024-01-01"

    def test_below_range_falls_into_first_bucket(self, buckets):
        assert assign_to_bucket(datetime(2023, 6, 1, tzinfo=timezone.utc), buckets) is buckets[0]

    def test_above_range_falls_into_last_bucket(self, buckets):
        assert assign_to_bucket(datetime(2024, 9, 1, tzinfo=timezone.utc), buckets) is buckets[-1]

    def test_no_buckets(self):
        assert assign_to_bucket(datetime(2024, 1, 1, tzinfo=timezone.utc), []) is None

    def test_no_date(self, buckets):
        assert assign_to_bucket(None, buckets) is None

    def test_every_day_in_range_has_exactly_one_bucket(self, buckets):
        day = buckets[0].start
        while day < buckets[-1].end:
            matches = [b for b in buckets if b.start <= day < b.end]
            assert len(matches) == 1
            assert assign_to_bucket(day, buckets) == matches[0]
            day += timedelta(days=1)


class TestIsWithin:
    def test_is_within(self):
        buckets = build_time_buckets(date(2024, 1, 1), date(2024, 1, 2), "daily")

        assert is_within(datetime(2024, 1, 2, 23, tzinfo=timezone.utc), buckets)
        assert not is_within(datetime(2024, 1, 3, tzinfo=timezone.utc), buckets)
        assert not is_within(datetime(2023, 12, 31, tzinfo=timezone.utc), buckets)
        assert not is_within(datetime(2024, 1, 1, tzinfo=timezone.utc), [])
