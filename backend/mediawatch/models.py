"""
File: mediawatch/models.py
Internal data structures used during collection/analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from mediawatch.schemas import CollectStatus, RawDocument


JsonDict = Dict[str, Any]


@dataclass(frozen=True)
class SentimentResult:
    """Label and score produced by the sentiment classifier."""

    label: str  # "positive" | "neutral" | "negative"
    score: float  # [-1, 1]


@dataclass
class CollectResult:
    """Documents plus per-source statuses returned by one collector run."""

    documents: List[RawDocument] = field(default_factory=list)
    statuses: List[CollectStatus] = field(default_factory=list)

    def extend(self, other: "CollectResult") -> None:
        self.documents.extend(other.documents)
        self.statuses.extend(other.statuses)


@dataclass(frozen=True)
class Gallery:
    """A gallery board searched by the gallery collector."""

    id: str
    name: str
    gallery_id: str
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: JsonDict) -> "Gallery":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            gallery_id=str(data["gallery_id"]),
            enabled=bool(data.get("enabled", True)),
        )


class MediawatchError(Exception):
    """Base error for the application."""


class CollectorError(MediawatchError):
    """Raised inside a collector when a source cannot be read."""


__all__ = [
    "JsonDict",
    "SentimentResult",
    "CollectResult",
    "Gallery",
    "MediawatchError",
    "CollectorError",
]
