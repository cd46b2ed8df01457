"""
Synthetic documents for offline demonstration.

Demo results go through the same aggregation pipeline as collected data,
so the dashboard sees exactly the shape it gets in production.
"""
from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Union

from mediawatch.config import MONITOR_KEYWORDS
from mediawatch.core.aggregate import aggregate_analytics
from mediawatch.schemas import (
    AnalyticsResult,
    Channel,
    CollectStatus,
    Granularity,
    RawDocument,
)
from mediawatch.sources.common import make_document_id
from mediawatch.utils import now_utc

TITLES: Dict[Channel, List[str]] = {
    Channel.NEWS: [
        "한국주택금융공사, 보금자리론 금리 인하 결정",
        "주택연금 수령액 늘린다… HF 개정안 발표",
        "전세자금보증 사기 의혹, 주금공 조사 착수",
        "보금자리론 한도 확대 검토 중",
        "MBS 발행 규모 역대 최대... 시장 우려 목소리",
        "한국주택금융공사 연간 보증 규모 증가세",
        "전세지킴보증 신청자 급증, 서버 마비 사태",
        "주택연금 가입자 50만 명 돌파",
        "커버드본드 지급보증 관련 규제강화 논의",
        "HF, 저소득층 보금자리론 우대금리 확대",
        "건설자금보증 부실 우려... 업계 긴장",
        "보금자리론 2년 연속 실적 성장",
    ],
    Channel.YOUTUBE: [
        "보금자리론 완벽 가이드 - 자격요건부터 신청까지",
        "주택연금 가입 전 반드시 알아야 할 5가지",
        "전세사기 예방법 - 전세자금보증 활용하기",
        "한국주택금융공사 논란 총정리",
        "MBS란 무엇인가? 주택시장과의 관계",
    ],
    Channel.DC: [
        "보금자리론 신청했는데 거절됨 이유가 뭔가요",
        "주택연금 진짜 가입할만한가요 후기 궁금",
        "전세사기 당한 것 같아요 HF 보증 피해",
        "주금공 대출 심사 기준 바뀐 거 아닌가요",
        "MBS 금리 오르면 보금자리론도 부담증가",
        "주택연금 신청 완료했습니다 도움 많이 받았어요",
    ],
    Channel.BLOG: [
        "[후기] 보금자리론으로 내집마련 성공했어요",
        "주택연금 신청 과정 정리",
        "전세자금보증 피해 사례 공유합니다",
        "HF 보금자리론 vs 시중은행 금리 비교 분석",
    ],
    Channel.TISTORY: [
        "보금자리론 달라진 점 총정리",
        "주택연금 수령액 계산법 + 실제 사례",
        "HF 전세자금보증 한도와 조건 정리",
        "보금자리론 거절 사유 TOP 5",
    ],
    Channel.BLIND: [
        "주금공 직원이 말하는 보금자리론 심사 기준",
        "HF 연봉/복지 실제로 어때요? 이직 고민 중",
        "전세사기 관련 HF 보증 논란",
        "주택금융공사 채용 정보 공유",
    ],
    Channel.INSTAGRAM: [
        "#보금자리론 #내집마련 드디어 성공했어요!",
        "#주택연금 부모님께 신청해드렸는데 만족하세요",
        "#전세사기 조심하세요 피해 주의 #HF보증",
        "#보금자리론 금리 너무 높아졌어요 #주거비부담",
    ],
}

DOCS_PER_CHANNEL: Dict[Channel, int] = {
    Channel.NEWS: 30,
    Channel.YOUTUBE: 15,
    Channel.DC: 25,
    Channel.BLOG: 20,
    Channel.TISTORY: 15,
    Channel.BLIND: 12,
    Channel.INSTAGRAM: 15,
}

URLS: Dict[Channel, str] = {
    Channel.NEWS: "https://example.com/news/{i}",
    Channel.YOUTUBE: "https://youtube.com/watch?v=demo{i}",
    Channel.DC: "https://gall.dcinside.com/board/view/?id=realestate&no={i}",
    Channel.BLOG: "https://blog.naver.com/demo_user/demo{i}",
    Channel.TISTORY: "https://demo-finance-blog.tistory.com/{i}",
    Channel.BLIND: "https://www.teamblind.com/kr/post/demo-{i}",
    Channel.INSTAGRAM: "https://www.instagram.com/p/demo{i}/",
}


def _random_moment(rng: random.Random, start_date: date, end_date: date) -> datetime:
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    span = max((end_date - start_date).days + 1, 1) * 86400
    return start + timedelta(seconds=rng.randrange(span))


def generate_demo_documents(
    start_date: date,
    end_date: date,
    keywords: Sequence[str],
    channels: Sequence[Union[Channel, str]],
    seed: int = 42,
) -> List[RawDocument]:
    """
    Synthetic documents spread over the range for the requested channels.

    Only watch-list keywords present in `keywords` produce documents.
    """
    rng = random.Random(seed)
    fetched_at = now_utc()
    wanted = set(keywords)
    documents: List[RawDocument] = []

    for channel in dict.fromkeys(Channel(c) for c in channels):
        titles = TITLES[channel]
        for i in range(DOCS_PER_CHANNEL[channel]):
            keyword = MONITOR_KEYWORDS[i % len(MONITOR_KEYWORDS)]
            if keyword not in wanted:
                continue
            title = titles[i % len(titles)]
            published_at = _random_moment(rng, start_date, end_date)
            url = URLS[channel].format(i=i)
            documents.append(
                RawDocument(
                    id=make_document_id(channel.value, keyword, url, published_at),
                    channel=channel,
                    keyword=keyword,
                    title=title,
                    text=f"{title}. {keyword} 관련 최신 정보를 정리했습니다.",
                    url=url,
                    published_at=published_at,
                    fetched_at=fetched_at,
                    source_meta={"source": "demo", "view_count": rng.randint(100, 100000)},
                )
            )

    return documents


def generate_demo_analytics(
    start_date: date,
    end_date: date,
    granularity: Union[Granularity, str],
    keywords: Optional[Sequence[str]],
    channels: Sequence[Union[Channel, str]],
    seed: int = 42,
) -> AnalyticsResult:
    """Aggregate synthetic documents exactly like collected ones."""
    keywords = list(keywords) if keywords else list(MONITOR_KEYWORDS)
    documents = generate_demo_documents(start_date, end_date, keywords, channels, seed=seed)

    statuses = []
    for channel in dict.fromkeys(Channel(c) for c in channels):
        count = sum(1 for doc in documents if doc.channel == channel.value)
        statuses.append(CollectStatus(channel=channel, source=f"demo ({channel.value})", status="success", count=count))

    return aggregate_analytics(documents, start_date, end_date, granularity, keywords, channels, statuses)
