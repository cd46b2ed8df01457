"""
Tests for the shared helpers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from mediawatch.utils import bucket_date, extract_domain_from_url, percent, round2


class TestRounding:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.125, 0.13), (0.135, 0.14), (-0.125, -0.12), (0.5, 0.5), (1.0, 1.0), (-1.0, -1.0), (0.0, 0.0)],
    )
    def test_round2_halves_up(self, value, expected):
        assert round2(value) == expected

    def test_percent(self):
        assert percent(1, 8) == 13
        assert percent(1, 3) == 33
        assert percent(0, 0) == 0
        assert percent(3, 3) == 100


class TestBucketDate:
    def test_aware_converted(self):
        moment = datetime(2024, 1, 1, 1, tzinfo=timezone(timedelta(hours=9)))
        assert bucket_date(moment) == date(2023, 12, 31)

    def test_naive_is_utc(self):
        assert bucket_date(datetime(2024, 1, 1, 23, 30)) == date(2024, 1, 1)


class TestDomains:
    def test_registered_domain(self):
        assert extract_domain_from_url("https://news.example.co.kr/a/b") == "example.co.kr"

    def test_empty(self):
        assert extract_domain_from_url("") is None
