"""
Unit and end-to-end tests for the aggregation pipeline.
"""

from datetime import date, timedelta

import pytest

from conftest import make_document
from mediawatch.core.aggregate import (
    aggregate_analytics,
    build_keyword_mentions,
    build_sentiment_series,
    calculate_trend_keywords,
    detect_negative_spikes,
    select_top_documents,
)
from mediawatch.core.buckets import build_time_buckets
from mediawatch.core.keywords import KeywordExtractor
from mediawatch.core.sentiment import default_classifier
from mediawatch.schemas import AnalyzedDocument, CollectStatus, SentimentDataPoint

START = date(2024, 1, 1)


def _days(n):
    return [START + timedelta(days=i) for i in range(n)]


def _aggregate(documents, end_date, granularity="daily", keywords=("보금자리론",), channels=("news",)):
    return aggregate_analytics(
        documents,
        START,
        end_date,
        granularity,
        list(keywords),
        list(channels),
        [CollectStatus(channel="news", source="test", status="success", count=len(documents))],
    )


class TestEndToEnd:
    """The scenarios the dashboard relies on."""

    def test_positive_and_negative_days(self):
        day1, day2, day3 = _days(3)
        documents = (
            [make_document("성장 기대", day1) for _ in range(3)]
            + [make_document("성장 기대", day2) for _ in range(3)]
            + [make_document("손실 우려", day3) for _ in range(4)]
        )

        result = _aggregate(documents, day3)

        assert len(result.sentiment) == 3
        assert sum(p.positive + p.neutral + p.negative for p in result.sentiment) == 10
        assert [p.positive for p in result.sentiment] == [3, 3, 0]
        assert result.sentiment[2].negative == 4
        assert result.sentiment[2].negative_ratio == 100
        assert result.sentiment[0].positive_ratio == 100
        assert result.sentiment[2].avg_score == -1.0
        assert result.meta.total_documents == 10

    def test_single_negative_spike(self):
        days = _days(9)
        documents = []
        for i, day in enumerate(days):
            n = 40 if i == 6 else 2
            documents.extend(make_document("손실 우려", day) for _ in range(n))

        result = _aggregate(documents, days[-1])
        spikes = {s.bucket: s for s in result.negative_spikes}

        spike_bucket = days[6].isoformat()
        assert spikes[spike_bucket].zscore > 2
        assert spikes[spike_bucket].is_spike is True
        assert spikes[spike_bucket].negative_count == 40
        assert spikes[spike_bucket].negative_ratio == 1.0
        for bucket, spike in spikes.items():
            if bucket != spike_bucket:
                assert spike.is_spike is False

    def test_keyword_trending_in_last_bucket(self):
        days = _days(5)
        documents = [make_document("보금자리론", days[4]) for _ in range(20)]

        result = _aggregate(documents, days[-1])
        trend = {t.keyword: t for t in result.trend_keywords}

        assert "보금자리론" in trend
        assert trend["보금자리론"].is_trending is True
        assert trend["보금자리론"].delta == 20
        assert trend["보금자리론"].count == 20
        assert trend["보금자리론"].prev_count == 0
        assert trend["보금자리론"].zscore == 2.0


class TestAggregateAnalytics:
    """Test cases for the orchestrator and its series."""

    def test_empty_input(self):
        result = _aggregate([], date(2024, 1, 7))

        assert len(result.mentions) == 7
        assert all(p.total == 0 for p in result.mentions)
        assert result.negative_spikes == []
        assert result.trend_keywords == []
        assert result.top_documents == []
        assert result.channel_stats == {}
        assert all(p.negative_zscore == 0.0 for p in result.sentiment)

    def test_mentions_per_channel(self):
        day = START
        documents = [
            make_document("소식", day, channel="news"),
            make_document("소식", day, channel="dc"),
            make_document("소식", day, channel="dc"),
        ]

        result = _aggregate(documents, day, channels=("news", "dc"))

        assert result.mentions[0].total == 3
        assert result.mentions[0].dc == 2
        assert result.mentions[0].news == 1
        assert result.channel_stats == {"news": 1, "dc": 2}

    def test_unrequested_channels_ignored(self):
        documents = [make_document("소식", START, channel="youtube")]

        result = _aggregate(documents, START, channels=("news",))

        assert result.meta.total_documents == 0

    def test_delta_negative(self):
        day1, day2 = _days(2)
        documents = [make_document("손실", day1), make_document("손실", day2), make_document("우려", day2)]

        result = _aggregate(documents, day2)

        assert result.sentiment[0].delta_negative is None
        assert result.sentiment[1].delta_negative == 1

    def test_avg_score_rounds_half_up(self):
        buckets = build_time_buckets(START, START, "daily")
        documents = [
            AnalyzedDocument(**make_document("a", START).model_dump(), sentiment=sentiment, sentiment_score=score)
            for sentiment, score in [("positive", 1.0), ("negative", -0.75)]
        ]

        series = build_sentiment_series(documents, buckets)

        assert series[0].avg_score == 0.13

    def test_out_of_range_documents_counted(self, caplog):
        documents = [
            make_document("소식", START - timedelta(days=10)),
            make_document("소식", START),
        ]

        with caplog.at_level("WARNING"):
            result = _aggregate(documents, START + timedelta(days=2))

        assert result.meta.out_of_range_documents == 1
        # below-range documents are attributed to the first bucket
        assert result.mentions[0].total == 2
        assert "outside" in caplog.text

    def test_collect_statuses_passed_through(self):
        result = _aggregate([], START)

        assert len(result.collect_status) == 1
        assert result.collect_status[0].source == "test"

    def test_meta(self):
        result = _aggregate([], date(2024, 3, 31), granularity="monthly", channels=("news", "dc"))

        assert result.meta.granularity == "monthly"
        assert result.meta.channels == ["news", "dc"]
        assert result.meta.keywords == ["보금자리론"]
        assert result.meta.start_date == START

    def test_sentiment_counts_match_mentions(self):
        days = _days(4)
        documents = [
            make_document(title, day)
            for day in days
            for title in ("성장", "손실", "소식")
        ]

        result = _aggregate(documents, days[-1])

        for mention, point in zip(result.mentions, result.sentiment):
            assert point.positive + point.neutral + point.negative == mention.total


class TestDetectNegativeSpikes:
    def _point(self, bucket, negative, zscore, positive=0):
        return SentimentDataPoint(
            bucket=bucket,
            label=bucket,
            positive=positive,
            neutral=0,
            negative=negative,
            positive_ratio=0,
            neutral_ratio=0,
            negative_ratio=0,
            avg_score=0.0,
            negative_zscore=zscore,
        )

    def test_sparse_emission(self):
        spikes = detect_negative_spikes(
            [
                self._point("a", 0, -0.5),
                self._point("b", 1, 0.1),
                self._point("c", 0, 1.6),
                self._point("d", 5, 2.0, positive=5),
            ]
        )

        assert [s.bucket for s in spikes] == ["b", "c", "d"]
        assert [s.is_spike for s in spikes] == [False, False, True]
        assert spikes[2].negative_ratio == 0.5
        assert spikes[1].negative_ratio == 0.0

    def test_is_spike_matches_threshold(self):
        points = [self._point(str(i), 1, z) for i, z in enumerate([1.99, 2.0, 2.01, -1.0])]

        for spike in detect_negative_spikes(points):
            assert spike.is_spike == (spike.zscore >= 2.0)


class TestTrendKeywords:
    @pytest.fixture
    def extractor(self):
        return KeywordExtractor()

    def test_capped_and_sorted(self, extractor):
        days = _days(3)
        buckets = build_time_buckets(days[0], days[-1], "daily")
        words = [f"단어{chr(0xAC00 + i)}" for i in range(80)]
        documents = [make_document("기본", days[0])]
        for i, word in enumerate(words):
            documents.extend(make_document(word, days[2]) for _ in range(1 + i % 5))

        trends = calculate_trend_keywords(documents, buckets, extractor)

        assert len(trends) <= 50
        zscores = [t.zscore for t in trends]
        assert zscores == sorted(zscores, reverse=True)

    def test_terms_missing_from_last_bucket_dropped(self, extractor):
        days = _days(3)
        buckets = build_time_buckets(days[0], days[-1], "daily")
        documents = [make_document("과거소식", days[0]), make_document("최신소식", days[2])]

        keywords = [t.keyword for t in calculate_trend_keywords(documents, buckets, extractor)]

        assert "최신소식" in keywords
        assert "과거소식" not in keywords

    def test_no_documents(self, extractor):
        buckets = build_time_buckets(START, START, "daily")
        assert calculate_trend_keywords([], buckets, extractor) == []


class TestKeywordMentionsAndTopDocuments:
    def test_keyword_mentions_dense(self):
        days = _days(3)
        buckets = build_time_buckets(days[0], days[-1], "daily")
        documents = default_classifier.analyze_documents(
            [
                make_document("소식", days[0], keyword="주택연금", channel="news"),
                make_document("소식", days[2], keyword="주택연금", channel="dc"),
                make_document("소식", days[2], keyword="기타"),
            ]
        )

        mentions = build_keyword_mentions(documents, buckets, ["주택연금", "MBS"])

        assert [m.keyword for m in mentions] == ["주택연금", "MBS"]
        assert mentions[0].total == 2
        assert mentions[0].by_channel == {"news": 1, "dc": 1}
        assert [b.count for b in mentions[0].by_bucket] == [1, 0, 1]
        assert mentions[1].total == 0
        assert len(mentions[1].by_bucket) == 3

    def test_top_documents_negative_first_then_newest(self):
        days = _days(3)
        documents = default_classifier.analyze_documents(
            [
                make_document("성장", days[2]),
                make_document("손실", days[0]),
                make_document("손실", days[1]),
                make_document("소식", days[1]),
            ]
        )

        top = select_top_documents(documents)

        assert [d.sentiment for d in top] == ["negative", "negative", "positive", "neutral"]
        assert top[0].published_at > top[1].published_at

    def test_top_documents_limit(self):
        documents = default_classifier.analyze_documents(
            [make_document("소식", START) for _ in range(60)]
        )
        assert len(select_top_documents(documents)) == 50
