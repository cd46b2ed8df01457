"""
Common utilities for channel collectors.
"""
from __future__ import annotations

import hashlib
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from dateutil import parser as dateparser

from mediawatch.schemas import Channel, CollectStatus
from mediawatch.utils import BUCKET_TZ, normalize_text

KST = timezone(timedelta(hours=9))


def make_document_id(channel: str, keyword: str, url: str, published_at: datetime) -> str:
    """
    Generate a deterministic ID for a collected document.

    The same post fetched twice for the same keyword gets the same ID.

    Args:
        channel: Channel the document came from
        keyword: Keyword that matched it
        url: Canonical URL
        published_at: Publication timestamp

    Returns:
        Channel-prefixed 16-character hexadecimal ID
    """
    key = f"{channel}|{keyword}|{url}|{published_at.isoformat()}".encode("utf-8", "ignore")
    return f"{channel}_{hashlib.blake2b(key, digest_size=8).hexdigest()}"


def parse_utc_datetime(date_string: Optional[str], default_tz: timezone = timezone.utc) -> Optional[datetime]:
    """
    Parse a date string and convert to UTC datetime.

    Args:
        date_string: Date string in various formats, or None
        default_tz: Timezone assumed when the string carries none

    Returns:
        UTC datetime, or None if the input is empty or unparseable
    """
    if not date_string:
        return None

    try:
        parsed_date = dateparser.parse(date_string)
    except (ValueError, OverflowError):
        return None

    if parsed_date.tzinfo:
        return parsed_date.astimezone(timezone.utc)
    return parsed_date.replace(tzinfo=default_tz).astimezone(timezone.utc)


def clean_text(text: Optional[str]) -> str:
    """
    Clean and normalize text content.

    Args:
        text: Raw text string or None

    Returns:
        Cleaned text string, empty string if input is None
    """
    return normalize_text(text)


def range_bounds(start_date: date, end_date: date, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """
    Instants bounding [start_date 00:00, end_date 23:59:59.999999].

    Days are taken in the bucket timezone unless `tz` is given, so a document
    the collectors keep always lands inside the analytics range.
    """
    tz = tz or BUCKET_TZ
    start = datetime.combine(start_date, time.min, tzinfo=tz)
    end = datetime.combine(end_date, time.max, tzinfo=tz)
    return start, end


def failed_status(channel: Channel, source: str, error: BaseException | str, keyword: Optional[str] = None) -> CollectStatus:
    """Status for a source that could not be read."""
    message = error if isinstance(error, str) else (str(error) or type(error).__name__)
    return CollectStatus(
        channel=channel, source=source, keyword=keyword, status="failed", count=0, error=message
    )


def skipped_status(channel: Channel, source: str, reason: str) -> CollectStatus:
    """Status for a source that was not attempted."""
    return CollectStatus(channel=channel, source=source, status="skipped", count=0, error=reason)
