# mediawatch/schemas.py
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediawatch.config import DEFAULT_CHANNELS, DEFAULT_GALLERY_IDS, DEFAULT_GRANULARITY


class Channel(str, Enum):
    NEWS = "news"
    YOUTUBE = "youtube"
    DC = "dc"
    INSTAGRAM = "instagram"
    BLOG = "blog"
    TISTORY = "tistory"
    BLIND = "blind"


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


Sentiment = Literal["positive", "neutral", "negative"]
CollectState = Literal["success", "partial", "failed", "skipped"]


class RawDocument(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    channel: Channel
    keyword: str
    title: str
    text: str = ""                            # absent for some sources
    url: str
    published_at: datetime
    fetched_at: datetime
    source_meta: Dict[str, Any] = Field(default_factory=dict)


class AnalyzedDocument(RawDocument):
    sentiment: Sentiment
    sentiment_score: float = Field(ge=-1.0, le=1.0)


class TimeBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: str                               # ISO date of start
    label: str
    start: date                               # inclusive
    end: date                                 # exclusive


class MentionDataPoint(BaseModel):
    bucket: str
    label: str
    total: int = 0
    news: int = 0
    youtube: int = 0
    dc: int = 0
    instagram: int = 0
    blog: int = 0
    tistory: int = 0
    blind: int = 0


class SentimentDataPoint(BaseModel):
    bucket: str
    label: str
    positive: int
    neutral: int
    negative: int
    positive_ratio: int
    neutral_ratio: int
    negative_ratio: int
    avg_score: float
    delta_negative: Optional[int] = None      # None for the first bucket
    negative_zscore: float = 0.0


class NegativeSpike(BaseModel):
    bucket: str
    zscore: float
    negative_count: int
    negative_ratio: float
    is_spike: bool


class TrendKeyword(BaseModel):
    keyword: str
    zscore: float
    count: int
    prev_count: int
    delta: int
    is_trending: bool


class BucketCount(BaseModel):
    bucket: str
    count: int


class KeywordMention(BaseModel):
    keyword: str
    total: int
    by_channel: Dict[str, int]
    by_bucket: List[BucketCount]


class CollectStatus(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    channel: Channel
    source: str
    keyword: Optional[str] = None
    status: CollectState
    count: int = 0
    error: Optional[str] = None


class AnalyticsMeta(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    start_date: date
    end_date: date
    granularity: Granularity
    keywords: List[str]
    channels: List[Channel]
    generated_at: datetime
    total_documents: int
    out_of_range_documents: int = 0


class AnalyticsResult(BaseModel):
    meta: AnalyticsMeta
    mentions: List[MentionDataPoint]
    sentiment: List[SentimentDataPoint]
    trend_keywords: List[TrendKeyword]
    keyword_mentions: List[KeywordMention]
    negative_spikes: List[NegativeSpike]
    top_documents: List[AnalyzedDocument]
    channel_stats: Dict[str, int]
    collect_status: List[CollectStatus]
    from_cache: Optional[bool] = None


class FaqEntry(BaseModel):
    q: str
    a: str


class ResponseGuide(BaseModel):
    fact_check: List[str] = Field(default_factory=list)
    faq: List[FaqEntry] = Field(default_factory=list)
    notice_short: str = ""
    notice_long: str = ""
    monitoring_keywords: List[str] = Field(default_factory=list)
    escalation_criteria: List[str] = Field(default_factory=list)


class SummaryResponse(BaseModel):
    summary: str
    key_issues: List[str]
    response_guide: ResponseGuide
    generated_at: datetime
    is_demo: bool
    from_cache: Optional[bool] = None


# Request bodies use the dashboard's camelCase field names.

class CollectRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    startDate: Optional[date] = None
    endDate: Optional[date] = None
    granularity: Granularity = Granularity(DEFAULT_GRANULARITY)
    keywords: List[str] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=lambda: [Channel(c) for c in DEFAULT_CHANNELS])
    galleryIds: List[str] = Field(default_factory=lambda: list(DEFAULT_GALLERY_IDS))
    forceRefresh: bool = False


class DemoRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    startDate: date = date(2024, 1, 1)
    endDate: date = date(2024, 12, 31)
    granularity: Granularity = Granularity.MONTHLY
    keywords: Optional[List[str]] = None
    channels: List[Channel] = Field(
        default_factory=lambda: [Channel.NEWS, Channel.YOUTUBE, Channel.DC]
    )


class SummaryRequest(BaseModel):
    analytics: Optional[AnalyticsResult] = None
    forceRefresh: bool = False
