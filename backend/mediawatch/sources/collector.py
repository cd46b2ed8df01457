"""
Collection coordinator that runs the channel collectors concurrently.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from mediawatch.config import COLLECT_TIMEOUT_SECONDS
from mediawatch.models import CollectResult
from mediawatch.schemas import Channel, RawDocument
from mediawatch.sources.common import failed_status, skipped_status

logger = logging.getLogger(__name__)


class Collector(Protocol):
    """A per-channel document source."""

    channel: Channel
    source_name: str

    async def collect(
        self,
        keywords: Sequence[str],
        start_date: date,
        end_date: date,
        **params: Any,
    ) -> CollectResult:
        ...


def deduplicate_documents(documents: Iterable[RawDocument]) -> List[RawDocument]:
    """
    Remove documents seen more than once.

    Args:
        documents: Iterable of RawDocument objects

    Returns:
        Documents in original order, first occurrence of each ID kept
    """
    seen_ids: set[str] = set()
    unique: List[RawDocument] = []

    for document in documents:
        if document.id in seen_ids:
            continue
        seen_ids.add(document.id)
        unique.append(document)

    return unique


def default_collectors() -> Dict[Channel, Collector]:
    """Collectors for the channels that have one."""
    from mediawatch.sources.dc_gallery import GalleryCollector
    from mediawatch.sources.google_news import GoogleNewsCollector
    from mediawatch.sources.youtube import YouTubeCollector

    return {
        Channel.NEWS: GoogleNewsCollector(),
        Channel.YOUTUBE: YouTubeCollector(),
        Channel.DC: GalleryCollector(),
    }


async def _run_collector(
    collector: Collector,
    keywords: Sequence[str],
    start_date: date,
    end_date: date,
    timeout: float,
    params: Dict[str, Any],
) -> CollectResult:
    try:
        return await asyncio.wait_for(
            collector.collect(keywords, start_date, end_date, **params),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("%s collector timed out after %.0fs", collector.channel, timeout)
        return CollectResult(
            statuses=[failed_status(collector.channel, collector.source_name, f"timed out after {timeout:.0f}s")]
        )
    except Exception as e:
        logger.warning("%s collector failed: %s", collector.channel, e)
        return CollectResult(statuses=[failed_status(collector.channel, collector.source_name, e)])


async def collect_all(
    channels: Sequence[Union[Channel, str]],
    keywords: Sequence[str],
    start_date: date,
    end_date: date,
    *,
    gallery_ids: Optional[Sequence[str]] = None,
    collectors: Optional[Dict[Channel, Collector]] = None,
    timeout: float = COLLECT_TIMEOUT_SECONDS,
) -> CollectResult:
    """
    Collect documents for every requested channel.

    Collectors run concurrently, each under its own timeout. A collector
    that fails or times out contributes a `failed` status and no documents;
    a channel without a collector contributes a `skipped` status.

    Args:
        channels: Channels to collect from
        keywords: Watch-list keywords to search for
        start_date: First day of the range
        end_date: Last day of the range, inclusive
        gallery_ids: Gallery boards for the gallery collector
        collectors: Channel-to-collector mapping (defaults to the built-in ones)
        timeout: Per-channel timeout in seconds

    Returns:
        CollectResult with deduplicated documents and all statuses
    """
    registry = collectors if collectors is not None else default_collectors()
    result = CollectResult()
    pending = []

    for value in dict.fromkeys(Channel(c) for c in channels):
        collector = registry.get(value)
        if collector is None:
            result.statuses.append(skipped_status(value, value.value, "no collector available for this channel"))
            continue
        params: Dict[str, Any] = {}
        if value == Channel.DC:
            params["gallery_ids"] = list(gallery_ids or [])
        pending.append(_run_collector(collector, keywords, start_date, end_date, timeout, params))

    for outcome in await asyncio.gather(*pending):
        result.extend(outcome)

    result.documents = deduplicate_documents(result.documents)
    logger.info(
        "Collected %d documents from %d channels", len(result.documents), len(pending)
    )
    return result
