"""
File-backed cache for analytics results and narrative summaries.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from mediawatch.config import CACHE_DIR
from mediawatch.schemas import AnalyticsResult, SummaryResponse

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9가-힣_,.\-]")
MAX_KEY_LENGTH = 200

Model = TypeVar("Model", bound=BaseModel)


def analytics_cache_key(
    start_date: Union[date, str],
    end_date: Union[date, str],
    granularity: str,
    keywords: Sequence[str],
    channels: Sequence[str],
) -> str:
    """
    Fingerprint a request as a filesystem-safe cache key.

    Keyword and channel order does not matter.
    """
    keyword_part = ",".join(sorted(keywords))
    channel_part = ",".join(sorted(str(getattr(c, "value", c)) for c in channels))
    granularity = str(getattr(granularity, "value", granularity))
    raw = f"{start_date}_{end_date}_{granularity}_{keyword_part}_{channel_part}"
    return _UNSAFE_KEY_CHARS.sub("_", raw)[:MAX_KEY_LENGTH]


def result_cache_key(result: AnalyticsResult) -> str:
    meta = result.meta
    return analytics_cache_key(meta.start_date, meta.end_date, meta.granularity, meta.keywords, meta.channels)


class AnalyticsCache:
    """JSON files under `<root>/analytics/`, one per fingerprint."""

    def __init__(self, root: Union[str, Path] = CACHE_DIR):
        self.directory = Path(root) / "analytics"

    def _path(self, key: str, suffix: str = "") -> Path:
        return self.directory / f"{key}{suffix}.json"

    def _read(self, path: Path, model: Type[Model]) -> Optional[Model]:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Cache miss: %s", path.name)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring corrupt cache entry %s: %s", path.name, e)
            return None
        try:
            return model.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", path.name, e)
            return None

    def _write(self, path: Path, value: BaseModel) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(value.model_dump_json(indent=2, exclude={"from_cache"}), encoding="utf-8")

    def get(self, key: str) -> Optional[AnalyticsResult]:
        return self._read(self._path(key), AnalyticsResult)

    def put(self, key: str, result: AnalyticsResult) -> None:
        self._write(self._path(key), result)

    def get_summary(self, key: str) -> Optional[SummaryResponse]:
        return self._read(self._path(key, "_ai"), SummaryResponse)

    def put_summary(self, key: str, summary: SummaryResponse) -> None:
        self._write(self._path(key, "_ai"), summary)
