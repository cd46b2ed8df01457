"""
Tests for synthetic demo data.
"""

from datetime import date

from mediawatch.config import MONITOR_KEYWORDS
from mediawatch.schemas import Channel
from mediawatch.services.demo import DOCS_PER_CHANNEL, generate_demo_analytics, generate_demo_documents

START, END = date(2024, 1, 1), date(2024, 12, 31)
ALL_CHANNELS = [c.value for c in Channel]


class TestGenerateDemoDocuments:
    def test_deterministic(self):
        a = generate_demo_documents(START, END, MONITOR_KEYWORDS, ALL_CHANNELS, seed=7)
        b = generate_demo_documents(START, END, MONITOR_KEYWORDS, ALL_CHANNELS, seed=7)

        assert [(d.id, d.published_at) for d in a] == [(d.id, d.published_at) for d in b]

    def test_all_channels_covered(self):
        documents = generate_demo_documents(START, END, MONITOR_KEYWORDS, ALL_CHANNELS)

        assert len(documents) == sum(DOCS_PER_CHANNEL.values())
        assert {d.channel for d in documents} == set(ALL_CHANNELS)

    def test_only_requested_keywords(self):
        documents = generate_demo_documents(START, END, ["보금자리론"], ["news"])

        assert documents
        assert {d.keyword for d in documents} == {"보금자리론"}

    def test_dates_within_range(self):
        documents = generate_demo_documents(date(2024, 3, 1), date(2024, 3, 31), MONITOR_KEYWORDS, ["news", "dc"])

        assert all(date(2024, 3, 1) <= d.published_at.date() <= date(2024, 3, 31) for d in documents)


class TestGenerateDemoAnalytics:
    def test_same_shape_as_collected(self):
        result = generate_demo_analytics(START, END, "monthly", None, ["news", "youtube", "dc"])

        assert len(result.mentions) == 12
        assert result.meta.keywords == MONITOR_KEYWORDS
        assert result.meta.out_of_range_documents == 0
        assert result.meta.total_documents == (
            DOCS_PER_CHANNEL[Channel.NEWS] + DOCS_PER_CHANNEL[Channel.YOUTUBE] + DOCS_PER_CHANNEL[Channel.DC]
        )
        assert [s.status for s in result.collect_status] == ["success"] * 3
        assert sum(s.count for s in result.collect_status) == result.meta.total_documents
        assert len(result.keyword_mentions) == len(MONITOR_KEYWORDS)
