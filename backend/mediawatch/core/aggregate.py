"""
Aggregation pipeline: raw documents in, AnalyticsResult out.

The pipeline is synchronous and performs no I/O. It classifies every
document once, assigns documents to calendar buckets, and derives the
mention, sentiment, negative-spike, trend-keyword and keyword-rollup series
that the dashboard, cache and summary services consume.
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

from mediawatch.config import (
    MAX_TOP_DOCUMENTS,
    MAX_TREND_KEYWORDS,
    SPIKE_REPORT_ZSCORE,
    SPIKE_ZSCORE,
    TRENDING_ZSCORE,
)
from mediawatch.core.buckets import assign_to_bucket, build_time_buckets, is_within
from mediawatch.core.keywords import KeywordExtractor
from mediawatch.core.sentiment import SentimentClassifier, default_classifier
from mediawatch.core.zscore import calculate_zscores
from mediawatch.schemas import (
    AnalyticsMeta,
    AnalyticsResult,
    AnalyzedDocument,
    BucketCount,
    Channel,
    CollectStatus,
    Granularity,
    KeywordMention,
    MentionDataPoint,
    NegativeSpike,
    RawDocument,
    SentimentDataPoint,
    TimeBucket,
    TrendKeyword,
)
from mediawatch.utils import now_utc, percent, round2

logger = logging.getLogger(__name__)

CHANNEL_NAMES = [channel.value for channel in Channel]


def _bucket_key(document: RawDocument, buckets: Sequence[TimeBucket]) -> Optional[str]:
    bucket = assign_to_bucket(document.published_at, buckets)
    return bucket.bucket if bucket else None


def build_mention_series(
    documents: Sequence[AnalyzedDocument], buckets: Sequence[TimeBucket]
) -> List[MentionDataPoint]:
    """Total and per-channel document counts for every bucket."""
    points = {
        b.bucket: MentionDataPoint(bucket=b.bucket, label=b.label) for b in buckets
    }
    for doc in documents:
        key = _bucket_key(doc, buckets)
        if key is None:
            continue
        point = points[key]
        point.total += 1
        if doc.channel in CHANNEL_NAMES:
            setattr(point, doc.channel, getattr(point, doc.channel) + 1)
    return list(points.values())


def build_sentiment_series(
    documents: Sequence[AnalyzedDocument], buckets: Sequence[TimeBucket]
) -> List[SentimentDataPoint]:
    """
    Sentiment counts, ratios, mean score, negative delta and negative z-score
    for every bucket.
    """
    counts: Dict[str, Counter] = {b.bucket: Counter() for b in buckets}
    scores: Dict[str, List[float]] = {b.bucket: [] for b in buckets}

    for doc in documents:
        key = _bucket_key(doc, buckets)
        if key is None:
            continue
        counts[key][doc.sentiment] += 1
        scores[key].append(doc.sentiment_score)

    negatives = [counts[b.bucket]["negative"] for b in buckets]
    negative_zscores = calculate_zscores(negatives)

    series: List[SentimentDataPoint] = []
    for i, bucket in enumerate(buckets):
        c = counts[bucket.bucket]
        total = c["positive"] + c["neutral"] + c["negative"]
        bucket_scores = scores[bucket.bucket]
        avg_score = sum(bucket_scores) / len(bucket_scores) if bucket_scores else 0.0

        series.append(
            SentimentDataPoint(
                bucket=bucket.bucket,
                label=bucket.label,
                positive=c["positive"],
                neutral=c["neutral"],
                negative=c["negative"],
                positive_ratio=percent(c["positive"], total),
                neutral_ratio=percent(c["neutral"], total),
                negative_ratio=percent(c["negative"], total),
                avg_score=round2(avg_score),
                delta_negative=negatives[i] - negatives[i - 1] if i > 0 else None,
                negative_zscore=round2(negative_zscores[i]),
            )
        )
    return series


def detect_negative_spikes(
    sentiment: Sequence[SentimentDataPoint],
    report_zscore: float = SPIKE_REPORT_ZSCORE,
    spike_zscore: float = SPIKE_ZSCORE,
) -> List[NegativeSpike]:
    """
    Spike records for buckets with negative mentions or an elevated z-score.

    Buckets with no negative mentions and a z-score under `report_zscore`
    are omitted, so the list is sparse.
    """
    spikes: List[NegativeSpike] = []
    for point in sentiment:
        zscore = point.negative_zscore
        if zscore < report_zscore and point.negative <= 0:
            continue
        total = point.positive + point.neutral + point.negative
        ratio = point.negative / total if total > 0 else 0.0
        spikes.append(
            NegativeSpike(
                bucket=point.bucket,
                zscore=zscore,
                negative_count=point.negative,
                negative_ratio=round2(ratio),
                is_spike=zscore >= spike_zscore,
            )
        )
    return spikes


def calculate_trend_keywords(
    documents: Sequence[RawDocument],
    buckets: Sequence[TimeBucket],
    extractor: KeywordExtractor,
    trending_zscore: float = TRENDING_ZSCORE,
    limit: int = MAX_TREND_KEYWORDS,
) -> List[TrendKeyword]:
    """
    Rank extracted terms by how unusual their latest-bucket frequency is.

    Each term's per-bucket frequency series is z-scored over all buckets.
    Terms absent from the latest bucket are dropped unless they still
    reach the trending threshold.
    """
    if not documents or not buckets:
        return []

    frequencies: Dict[str, Counter] = {b.bucket: Counter() for b in buckets}
    for doc in documents:
        key = _bucket_key(doc, buckets)
        if key is None:
            continue
        frequencies[key].update(extractor.extract(f"{doc.title} {doc.text}"))

    # Unique terms in first-seen order, walking buckets chronologically
    terms: Dict[str, None] = {}
    for bucket in buckets:
        for term in frequencies[bucket.bucket]:
            terms.setdefault(term, None)

    last_key = buckets[-1].bucket
    prev_key = buckets[-2].bucket if len(buckets) >= 2 else None

    results: List[TrendKeyword] = []
    for term in terms:
        series = [frequencies[b.bucket][term] for b in buckets]
        last_zscore = calculate_zscores(series)[-1]
        last_count = frequencies[last_key][term]
        prev_count = frequencies[prev_key][term] if prev_key else 0

        if last_count == 0 and last_zscore < trending_zscore:
            continue

        results.append(
            TrendKeyword(
                keyword=term,
                zscore=round2(last_zscore),
                count=last_count,
                prev_count=prev_count,
                delta=last_count - prev_count,
                is_trending=last_zscore >= trending_zscore,
            )
        )

    results.sort(key=lambda item: item.zscore, reverse=True)
    return results[:limit]


def build_keyword_mentions(
    documents: Sequence[AnalyzedDocument],
    buckets: Sequence[TimeBucket],
    keywords: Sequence[str],
) -> List[KeywordMention]:
    """Totals, channel breakdown and per-bucket counts for each watch-list keyword."""
    totals: Counter = Counter()
    by_channel: Dict[str, Counter] = defaultdict(Counter)
    by_bucket: Dict[str, Counter] = defaultdict(Counter)
    watched = set(keywords)

    for doc in documents:
        if doc.keyword not in watched:
            continue
        totals[doc.keyword] += 1
        by_channel[doc.keyword][doc.channel] += 1
        key = _bucket_key(doc, buckets)
        if key is not None:
            by_bucket[doc.keyword][key] += 1

    return [
        KeywordMention(
            keyword=keyword,
            total=totals[keyword],
            by_channel=dict(by_channel[keyword]),
            by_bucket=[
                BucketCount(bucket=b.bucket, count=by_bucket[keyword][b.bucket])
                for b in buckets
            ],
        )
        for keyword in dict.fromkeys(keywords)
    ]


def select_top_documents(
    documents: Iterable[AnalyzedDocument], limit: int = MAX_TOP_DOCUMENTS
) -> List[AnalyzedDocument]:
    """Negative documents first, then newest first."""
    ranked = sorted(
        documents,
        key=lambda doc: (doc.sentiment != "negative", -doc.published_at.timestamp()),
    )
    return ranked[:limit]


def aggregate_analytics(
    documents: Iterable[RawDocument],
    start_date: date,
    end_date: date,
    granularity: Union[Granularity, str],
    keywords: Sequence[str],
    channels: Sequence[Union[Channel, str]],
    collect_statuses: Sequence[CollectStatus],
    *,
    extractor: Optional[KeywordExtractor] = None,
    classifier: Optional[SentimentClassifier] = None,
) -> AnalyticsResult:
    """
    Turn collected documents into the dashboard's analytics result.

    Args:
        documents: Raw documents from the collectors
        start_date: First day of the requested range
        end_date: Last day of the requested range, inclusive
        granularity: Bucket width
        keywords: Monitored watch-list keywords
        channels: Channels to include; other documents are ignored
        collect_statuses: Collector statuses, passed through unchanged

    Returns:
        AnalyticsResult for the request
    """
    granularity = Granularity(granularity)
    channel_values = [Channel(c).value for c in channels]
    extractor = extractor or KeywordExtractor()
    classifier = classifier or default_classifier

    wanted = set(channel_values)
    filtered = [doc for doc in documents if doc.channel in wanted]
    analyzed = classifier.analyze_documents(filtered)

    buckets = build_time_buckets(start_date, end_date, granularity)

    channel_stats: Dict[str, int] = dict(Counter(doc.channel for doc in analyzed))

    out_of_range = sum(1 for doc in analyzed if not is_within(doc.published_at, buckets))
    if out_of_range:
        logger.warning(
            "%d of %d documents fall outside %s..%s and were attributed to edge buckets",
            out_of_range, len(analyzed), start_date, end_date,
        )

    mentions = build_mention_series(analyzed, buckets)
    sentiment = build_sentiment_series(analyzed, buckets)
    negative_spikes = detect_negative_spikes(sentiment)
    trend_keywords = calculate_trend_keywords(filtered, buckets, extractor)
    keyword_mentions = build_keyword_mentions(analyzed, buckets, keywords)
    top_documents = select_top_documents(analyzed)

    logger.info(
        "Aggregated %d documents into %d %s buckets (%d spikes, %d trend terms)",
        len(analyzed), len(buckets), granularity.value,
        sum(1 for s in negative_spikes if s.is_spike), len(trend_keywords),
    )

    return AnalyticsResult(
        meta=AnalyticsMeta(
            start_date=start_date,
            end_date=end_date,
            granularity=granularity,
            keywords=list(keywords),
            channels=channel_values,
            generated_at=now_utc(),
            total_documents=len(analyzed),
            out_of_range_documents=out_of_range,
        ),
        mentions=mentions,
        sentiment=sentiment,
        trend_keywords=trend_keywords,
        keyword_mentions=keyword_mentions,
        negative_spikes=negative_spikes,
        top_documents=top_documents,
        channel_stats=channel_stats,
        collect_status=list(collect_statuses),
    )
