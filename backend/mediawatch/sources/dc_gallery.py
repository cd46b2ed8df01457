"""
Gallery forum collector.

Searches the configured gallery boards by subject and body and reads the
result list pages. List pages carry only titles, so the title doubles as
the document text. Search results reach back only about a month, so the
requested window is clamped to the recent past.
"""
from __future__ import annotations

import asyncio
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from bs4 import BeautifulSoup

from mediawatch import config
from mediawatch.models import CollectResult, Gallery
from mediawatch.schemas import Channel, CollectStatus, RawDocument
from mediawatch.sources.common import KST, make_document_id, range_bounds
from mediawatch.utils import now_utc

logger = logging.getLogger(__name__)

BASE_URL = "https://gall.dcinside.com"
LIST_URL = f"{BASE_URL}/board/lists/"

_FULL_DATE = re.compile(r"(\d{4})\.(\d{2})\.(\d{2})(?:\s*(\d{2}):(\d{2}))?")
_SHORT_SLASH = re.compile(r"^(\d{2})/(\d{2})/(\d{2})$")
_SHORT_DOT = re.compile(r"^(\d{2})\.(\d{2})\.(\d{2})$")
_TIME_ONLY = re.compile(r"^(\d{2}):(\d{2})$")


def parse_gallery_date(text: str, today: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse the date formats shown in gallery lists.

    Handles "2024.01.15", "2024.01.15 12:30", "24/01/15", "24.01.15" and a
    bare "12:30" (today). Dates without a time are placed at noon KST.
    Impossible dates such as month 13 give None.
    """
    if not text:
        return None
    try:
        return _parse_gallery_date(text.strip(), today)
    except ValueError:
        return None


def _parse_gallery_date(cleaned: str, today: Optional[datetime]) -> Optional[datetime]:
    match = _FULL_DATE.search(cleaned)
    if match:
        year, month, day, hour, minute = match.groups()
        return datetime(int(year), int(month), int(day), int(hour or 12), int(minute or 0), tzinfo=KST)

    match = _SHORT_SLASH.match(cleaned)
    if match:
        year, month, day = match.groups()
        return datetime(2000 + int(year), int(month), int(day), 12, tzinfo=KST)

    match = _SHORT_DOT.match(cleaned)
    if match:
        year, month, day = (int(g) for g in match.groups())
        year += 1900 if year > 50 else 2000
        return datetime(year, month, day, 12, tzinfo=KST)

    match = _TIME_ONLY.match(cleaned)
    if match:
        now = (today or now_utc()).astimezone(KST)
        return now.replace(hour=int(match.group(1)), minute=int(match.group(2)), second=0, microsecond=0)

    return None


class GalleryCollector:
    channel = Channel.DC
    source_name = "DCInside Galleries"

    def __init__(
        self,
        galleries: Optional[Sequence[Gallery]] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_pages: int = config.GALLERY_MAX_PAGES,
        max_posts: int = config.GALLERY_MAX_POSTS,
        request_delay: float = config.GALLERY_REQUEST_DELAY,
        lookback_days: int = config.GALLERY_LOOKBACK_DAYS,
    ):
        self.galleries = list(galleries) if galleries is not None else [Gallery.from_dict(g) for g in config.GALLERIES]
        self._client = client
        self.max_pages = max_pages
        self.max_posts = max_posts
        self.request_delay = request_delay
        self.lookback_days = lookback_days

    def select_galleries(self, gallery_ids: Sequence[str]) -> List[Gallery]:
        enabled = [g for g in self.galleries if g.enabled and (not gallery_ids or g.id in gallery_ids)]
        return enabled or [g for g in self.galleries if g.id in ("loan", "house")]

    def parse_list_page(
        self,
        html: str,
        gallery: Gallery,
        keyword: str,
        start: datetime,
        end: datetime,
    ) -> Tuple[List[RawDocument], bool]:
        """
        Extract posts from one search result page.

        Returns:
            (documents inside the window, whether a post older than the
            window was reached)
        """
        soup = BeautifulSoup(html, "html.parser")
        fetched_at = now_utc()
        documents: List[RawDocument] = []

        for row in soup.select("tbody tr"):
            row_class = " ".join(row.get("class", []))
            if "notice" in row_class or "ad" in row.get("class", []):
                continue

            link = row.select_one(".gall_tit a")
            if link is None:
                continue
            title = link.get_text(strip=True)
            href = link.get("href", "")
            if len(title) < 2 or not href or href.startswith("javascript") or "addc.dcinside.com" in href:
                continue
            if not href.startswith("http"):
                href = f"{BASE_URL}{href}"

            date_cell = row.select_one(".gall_date")
            if date_cell is None:
                continue
            published = parse_gallery_date(date_cell.get("title") or date_cell.get_text(strip=True))
            if published is None:
                continue

            if published < start:
                return documents, True
            if published > end:
                continue

            documents.append(
                RawDocument(
                    id=make_document_id(self.channel.value, keyword, href, published),
                    channel=self.channel,
                    keyword=keyword,
                    title=title,
                    text=title,
                    url=href,
                    published_at=published,
                    fetched_at=fetched_at,
                    source_meta={
                        "source": f"DC인사이드 {gallery.name}갤러리",
                        "gallery_name": gallery.name,
                        "gallery_id": gallery.gallery_id,
                    },
                )
            )

        return documents, False

    async def _fetch_gallery(
        self,
        client: httpx.AsyncClient,
        gallery: Gallery,
        keyword: str,
        start: datetime,
        end: datetime,
    ) -> Tuple[List[RawDocument], bool]:
        """All pages for one gallery; the flag is False when a request failed."""
        collected: List[RawDocument] = []
        for page in range(1, self.max_pages + 1):
            if self.request_delay:
                await asyncio.sleep(self.request_delay)
            try:
                r = await client.get(
                    LIST_URL,
                    params={
                        "id": gallery.gallery_id,
                        "s_type": "search_subject_memo",
                        "s_keyword": keyword,
                        "page": page,
                    },
                    headers={"Referer": f"{LIST_URL}?id={gallery.gallery_id}"},
                )
                r.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning("Gallery %s page %d failed for %s: %s", gallery.gallery_id, page, keyword, e)
                return collected, False

            documents, reached_boundary = self.parse_list_page(r.text, gallery, keyword, start, end)
            collected.extend(documents)
            if reached_boundary or not documents or len(collected) >= self.max_posts:
                break
        return collected, True

    def clamp_window(self, start_date: date, end_date: date) -> Tuple[datetime, datetime]:
        start, end = range_bounds(start_date, end_date)
        now = now_utc()
        return max(start, now - timedelta(days=self.lookback_days)), min(end, now)

    async def _collect_with(
        self, client: httpx.AsyncClient, keywords: Sequence[str], start_date: date, end_date: date, gallery_ids: Sequence[str]
    ) -> CollectResult:
        start, end = self.clamp_window(start_date, end_date)
        targets = self.select_galleries(gallery_ids)
        names = ", ".join(g.name for g in targets)
        result = CollectResult()

        for keyword in keywords:
            total = 0
            failures = 0
            for gallery in targets:
                documents, ok = await self._fetch_gallery(client, gallery, keyword, start, end)
                failures += 0 if ok else 1
                total += len(documents)
                result.documents.extend(documents)

            if total > 0:
                state = "success"
            elif failures > 0:
                state = "failed"
            else:
                state = "partial"
            result.statuses.append(
                CollectStatus(
                    channel=self.channel,
                    source=f"DC인사이드 [{keyword}] ({names} 갤러리)",
                    keyword=keyword,
                    status=state,
                    count=total,
                    error=None if total else f"no posts between {start_date} and {end_date} or gallery unreachable",
                )
            )

        return result

    async def collect(self, keywords: Sequence[str], start_date: date, end_date: date, **params: Any) -> CollectResult:
        gallery_ids = params.get("gallery_ids") or []
        if self._client is not None:
            return await self._collect_with(self._client, keywords, start_date, end_date, gallery_ids)

        headers = {**config.HTTP_HEADERS, "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
        async with httpx.AsyncClient(headers=headers, timeout=config.HTTP_TIMEOUT_SECONDS, follow_redirects=True) as client:
            return await self._collect_with(client, keywords, start_date, end_date, gallery_ids)
