"""
Shared utility functions for the media monitoring application.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Optional

import tldextract
from dateutil import tz

from mediawatch.config import BUCKET_TIMEZONE

# Offline: use the suffix list bundled with tldextract
_domain_extractor = tldextract.TLDExtract(suffix_list_urls=())

# Unknown zone names fall back to UTC
BUCKET_TZ = tz.gettz(BUCKET_TIMEZONE) or tz.UTC


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def bucket_date(moment: datetime) -> date:
    """Calendar date of an instant in the bucket timezone; naive values are UTC."""
    return ensure_utc(moment).astimezone(BUCKET_TZ).date()


def normalize_text(text: str | None) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input text string (can be None)

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def extract_domain_from_url(url: str) -> Optional[str]:
    """
    Extract the registered domain from a URL.

    Args:
        url: Full URL string

    Returns:
        Domain name in lowercase, or None when the URL has none
    """
    if not url:
        return None
    extracted = _domain_extractor(url)
    if not extracted.domain:
        return None
    domain = f"{extracted.domain}.{extracted.suffix}" if extracted.suffix else extracted.domain
    return domain.lower()


def round2(value: float) -> float:
    """Round to two decimals, halves up, the precision used across the analytics series."""
    return math.floor(value * 100 + 0.5) / 100


def percent(part: int, total: int) -> int:
    """Share of `part` in `total` as a whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))
