"""
YouTube Data API collector.
"""

from __future__ import annotations

import logging
from datetime import date, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from mediawatch.config import HTTP_TIMEOUT_SECONDS, YOUTUBE_MAX_RESULTS, settings
from mediawatch.models import CollectResult
from mediawatch.schemas import Channel, CollectStatus, RawDocument
from mediawatch.sources.common import (
    clean_text,
    failed_status,
    make_document_id,
    parse_utc_datetime,
    range_bounds,
    skipped_status,
)
from mediawatch.utils import now_utc

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"


def _rfc3339(moment) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


class YouTubeCollector:
    channel = Channel.YOUTUBE
    source_name = "YouTube Data API"

    def __init__(self, api_key: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key if api_key is not None else settings.YOUTUBE_API_KEY
        self._client = client

    async def _statistics(self, client: httpx.AsyncClient, video_ids: List[str]) -> Dict[str, Dict[str, str]]:
        # Statistics are optional; a failure here keeps the search results.
        try:
            r = await client.get(VIDEOS_URL, params={"part": "statistics", "id": ",".join(video_ids), "key": self.api_key})
            r.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("YouTube statistics unavailable: %s", e)
            return {}
        return {item["id"]: item.get("statistics", {}) for item in r.json().get("items", [])}

    async def _fetch_keyword(self, client: httpx.AsyncClient, keyword: str, start_date: date, end_date: date) -> CollectResult:
        source = f"YouTube API ({keyword})"
        start, end = range_bounds(start_date, end_date)
        params = {
            "part": "snippet",
            "q": keyword,
            "type": "video",
            "relevanceLanguage": "ko",
            "regionCode": "KR",
            "publishedAfter": _rfc3339(start),
            "publishedBefore": _rfc3339(end),
            "maxResults": YOUTUBE_MAX_RESULTS,
            "key": self.api_key,
        }

        try:
            r = await client.get(SEARCH_URL, params=params)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("YouTube search failed for %s: %s", keyword, e)
            return CollectResult(statuses=[failed_status(
                self.channel, source, f"YouTube API error {e.response.status_code}: {e.response.text[:200]}", keyword
            )])
        except httpx.HTTPError as e:
            logger.warning("YouTube search failed for %s: %s", keyword, e)
            return CollectResult(statuses=[failed_status(self.channel, source, e, keyword)])

        items = [item for item in r.json().get("items", []) if item.get("id", {}).get("videoId")]
        if not items:
            return CollectResult(statuses=[CollectStatus(
                channel=self.channel, source=source, keyword=keyword, status="partial", count=0
            )])

        stats = await self._statistics(client, [item["id"]["videoId"] for item in items])
        fetched_at = now_utc()
        documents: List[RawDocument] = []

        for item in items:
            video_id = item["id"]["videoId"]
            snippet = item.get("snippet", {})
            published_at = parse_utc_datetime(snippet.get("publishedAt"))
            if published_at is None:
                continue
            url = f"https://www.youtube.com/watch?v={video_id}"
            video_stats = stats.get(video_id, {})
            documents.append(
                RawDocument(
                    id=make_document_id(self.channel.value, keyword, url, published_at),
                    channel=self.channel,
                    keyword=keyword,
                    title=clean_text(snippet.get("title")),
                    text=clean_text(snippet.get("description")),
                    url=url,
                    published_at=published_at,
                    fetched_at=fetched_at,
                    source_meta={
                        "video_id": video_id,
                        "channel_title": snippet.get("channelTitle"),
                        "view_count": _int_or_none(video_stats.get("viewCount")),
                        "like_count": _int_or_none(video_stats.get("likeCount")),
                        "comment_count": _int_or_none(video_stats.get("commentCount")),
                    },
                )
            )

        status = CollectStatus(
            channel=self.channel, source=source, keyword=keyword, status="success", count=len(documents)
        )
        return CollectResult(documents=documents, statuses=[status])

    async def collect(self, keywords: Sequence[str], start_date: date, end_date: date, **params: Any) -> CollectResult:
        if not self.api_key:
            return CollectResult(statuses=[skipped_status(self.channel, self.source_name, "YOUTUBE_API_KEY not configured")])

        result = CollectResult()
        if self._client is not None:
            for keyword in keywords:
                result.extend(await self._fetch_keyword(self._client, keyword, start_date, end_date))
            return result

        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
            for keyword in keywords:
                result.extend(await self._fetch_keyword(client, keyword, start_date, end_date))
        return result
