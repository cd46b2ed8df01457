"""
Shared fixtures for the mediawatch test suite.
"""

from datetime import date, datetime, timezone
from itertools import count

import pytest

from mediawatch.schemas import RawDocument

_ids = count(1)


def make_document(
    title,
    day,
    channel="news",
    keyword="보금자리론",
    text="",
    hour=12,
):
    """Build a RawDocument published at `hour` UTC on `day`."""
    n = next(_ids)
    published_at = datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)
    return RawDocument(
        id=f"{channel}_{n:016x}",
        channel=channel,
        keyword=keyword,
        title=title,
        text=text,
        url=f"https://example.com/{channel}/{n}",
        published_at=published_at,
        fetched_at=datetime(2024, 12, 31, tzinfo=timezone.utc),
    )


@pytest.fixture
def document_factory():
    """Factory for RawDocuments with unique IDs and URLs."""
    return make_document


@pytest.fixture
def january():
    return date(2024, 1, 1), date(2024, 1, 31)
