"""
Google News RSS collector for the news channel.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional, Sequence
from urllib.parse import urlencode

import feedparser
import httpx

from mediawatch.config import HTTP_HEADERS, HTTP_TIMEOUT_SECONDS
from mediawatch.models import CollectorError, CollectResult
from mediawatch.schemas import Channel, CollectStatus, RawDocument
from mediawatch.sources.common import (
    clean_text,
    failed_status,
    make_document_id,
    parse_utc_datetime,
    range_bounds,
)
from mediawatch.utils import extract_domain_from_url, now_utc

logger = logging.getLogger(__name__)


def extract_publisher_from_entry(entry) -> Optional[str]:
    """
    Extract publisher name from RSS entry.

    Args:
        entry: RSS feed entry

    Returns:
        Publisher name or None if not found
    """
    source = entry.get("source")
    if isinstance(source, dict):
        title = source.get("title")
        if title:
            return clean_text(title)
    return clean_text(entry.get("author")) or None


class GoogleNewsCollector:
    """Fetches news articles from Google News RSS search feeds."""

    BASE_URL = "https://news.google.com/rss/search"
    channel = Channel.NEWS
    source_name = "Google News RSS"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    def feed_url(self, keyword: str) -> str:
        params = urlencode({
            "q": keyword,
            "hl": "ko",
            "gl": "KR",
            "ceid": "KR:ko",
        })
        return f"{self.BASE_URL}?{params}"

    def parse_feed(self, content: str, keyword: str, start_date: date, end_date: date) -> List[RawDocument]:
        """
        Turn an RSS document into RawDocuments inside the date range.

        Entries without a title, link or parseable date are skipped.
        Raises CollectorError when the content is not a feed at all.
        """
        feed = feedparser.parse(content)
        if feed.bozo and not feed.entries and not feed.get("version"):
            raise CollectorError(f"unreadable feed: {feed.get('bozo_exception')}")
        start, end = range_bounds(start_date, end_date)
        fetched_at = now_utc()
        documents: List[RawDocument] = []

        for entry in feed.entries:
            title = clean_text(entry.get("title"))
            link = clean_text(entry.get("link"))
            published_at = parse_utc_datetime(entry.get("published"))

            if not title or not link or published_at is None:
                continue
            if published_at < start or published_at > end:
                continue

            publisher = extract_publisher_from_entry(entry)
            documents.append(
                RawDocument(
                    id=make_document_id(self.channel.value, keyword, link, published_at),
                    channel=self.channel,
                    keyword=keyword,
                    title=title,
                    text=clean_text(entry.get("summary")) or title,
                    url=link,
                    published_at=published_at,
                    fetched_at=fetched_at,
                    source_meta={
                        "source": publisher or feed.feed.get("title", "Google News"),
                        "domain": extract_domain_from_url(link),
                    },
                )
            )

        return documents

    async def _fetch_keyword(self, client: httpx.AsyncClient, keyword: str, start_date: date, end_date: date) -> CollectResult:
        source = f"{self.source_name} ({keyword})"
        try:
            response = await client.get(self.feed_url(keyword))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Error fetching Google News feed for %s: %s", keyword, e)
            return CollectResult(statuses=[failed_status(self.channel, source, e, keyword)])

        try:
            documents = self.parse_feed(response.text, keyword, start_date, end_date)
        except CollectorError as e:
            logger.warning("Google News feed for %s could not be parsed: %s", keyword, e)
            return CollectResult(statuses=[failed_status(self.channel, source, e, keyword)])

        status = CollectStatus(
            channel=self.channel,
            source=source,
            keyword=keyword,
            status="success" if documents else "partial",
            count=len(documents),
        )
        return CollectResult(documents=documents, statuses=[status])

    async def collect(self, keywords: Sequence[str], start_date: date, end_date: date, **params: Any) -> CollectResult:
        """
        Fetch news articles for each keyword.

        Args:
            keywords: Watch-list keywords
            start_date: First day of the range
            end_date: Last day of the range, inclusive

        Returns:
            CollectResult with one status per keyword
        """
        result = CollectResult()
        if self._client is not None:
            for keyword in keywords:
                result.extend(await self._fetch_keyword(self._client, keyword, start_date, end_date))
            return result

        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=HTTP_TIMEOUT_SECONDS, follow_redirects=True) as client:
            for keyword in keywords:
                result.extend(await self._fetch_keyword(client, keyword, start_date, end_date))
        return result
