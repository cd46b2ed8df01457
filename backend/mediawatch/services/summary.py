"""
Narrative summaries of an analytics result.

A language model writes the summary when an OpenAI key is configured;
otherwise, or when the model call fails, a rule-based summary is built from
the same figures.
"""
from __future__ import annotations

import json
import logging
from textwrap import shorten
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from mediawatch.config import settings
from mediawatch.schemas import AnalyticsResult, FaqEntry, ResponseGuide, SummaryResponse, TrendKeyword
from mediawatch.utils import now_utc, percent

logger = logging.getLogger(__name__)


def _get_openai_client() -> Optional[AsyncOpenAI]:
    """Get OpenAI client only when an API key is available."""
    if not settings.OPENAI_API_KEY:
        return None
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)


def sentiment_totals(result: AnalyticsResult) -> Dict[str, int]:
    totals = {"positive": 0, "neutral": 0, "negative": 0}
    for point in result.sentiment:
        totals["positive"] += point.positive
        totals["neutral"] += point.neutral
        totals["negative"] += point.negative
    return totals


def trending_terms(result: AnalyticsResult, limit: int = 5) -> List[TrendKeyword]:
    return [k for k in result.trend_keywords if k.is_trending][:limit]


DEFAULT_FAQ = [
    FaqEntry(
        q="한국주택금융공사의 주요 역할은 무엇인가요?",
        a="한국주택금융공사(HF)는 주택담보대출 유동화, 주택연금, 전세자금보증 등을 통해 국민 주거 안정을 지원하는 공공기관입니다.",
    ),
    FaqEntry(
        q="보금자리론 신청 자격은 어떻게 되나요?",
        a="보금자리론은 소득과 주택 가격 요건을 충족하는 무주택 세대주가 신청할 수 있으며, 세부 조건은 공식 홈페이지에서 확인할 수 있습니다.",
    ),
    FaqEntry(
        q="주택연금이란 무엇인가요?",
        a="주택연금은 본인 소유 주택을 담보로 평생 매월 연금을 받는 역모기지 상품입니다.",
    ),
    FaqEntry(
        q="전세자금보증 신청은 어떻게 하나요?",
        a="전세 계약 후 취급 금융기관에서 신청하며, 보증 한도와 조건은 소득과 지역 등에 따라 다릅니다.",
    ),
    FaqEntry(
        q="MBS란 무엇인가요?",
        a="주택저당증권(MBS)은 주택담보대출을 기초로 발행되는 증권으로, 장기 주택금융 재원을 안정적으로 공급하는 데 쓰입니다.",
    ),
]

ESCALATION_CRITERIA = [
    "일별 부정 언급 30건 초과 시 긴급 대응팀 알림",
    "부정 언급 비율 40% 초과 시 상위 보고",
    "트렌드 키워드 z-score 3.0 이상 시 즉시 검토",
    "주요 언론사 부정 보도 발생 시 즉각 대응",
    "커뮤니티 부정 게시글 100건 초과 시 FAQ 즉시 업데이트",
]


def build_rule_based_summary(result: AnalyticsResult) -> SummaryResponse:
    """
    Build a summary from the figures alone.

    Args:
        result: Analytics result to describe

    Returns:
        SummaryResponse marked as `is_demo`
    """
    meta = result.meta
    totals = sentiment_totals(result)
    total_docs = meta.total_documents
    negative_ratio = percent(totals["negative"], total_docs)
    has_spike = any(s.is_spike for s in result.negative_spikes)
    trending = trending_terms(result)

    sentences = [
        f"{meta.start_date} ~ {meta.end_date} 기간 동안 총 {total_docs}건의 문서가 수집되었습니다.",
        f"감성 분포는 긍정 {totals['positive']}건({percent(totals['positive'], total_docs)}%), "
        f"중립 {totals['neutral']}건, 부정 {totals['negative']}건({negative_ratio}%)입니다.",
        "부정 언급 급증 구간이 감지되었습니다. 즉각적인 모니터링 강화가 필요합니다."
        if has_spike
        else "특이한 부정 스파이크는 감지되지 않았습니다.",
    ]
    if trending:
        sentences.append(f"트렌드 키워드: {', '.join(k.keyword for k in trending)}")

    key_issues: List[str] = []
    if has_spike:
        key_issues.append("부정 언급 급증 구간 감지 - 즉각 대응 필요")
    if negative_ratio > 30:
        key_issues.append(f"부정 언급 비율 {negative_ratio}% - 대응 필요")
    for doc in [d for d in result.top_documents if d.sentiment == "negative"][:3]:
        key_issues.append(f"부정 이슈: {shorten(doc.title, width=50, placeholder='...')}")
    if trending:
        key_issues.append(
            "트렌드 키워드 급상승: " + ", ".join(f"{k.keyword}(z={k.zscore})" for k in trending)
        )
    if not key_issues:
        key_issues = ["현재 기간 내 특이 이슈 없음", "일반적인 모니터링 지속 권장"]

    keywords = meta.keywords
    monitoring = [*keywords[:3], *(k.keyword for k in trending[:2])]

    return SummaryResponse(
        summary=" ".join(sentences),
        key_issues=key_issues[:7],
        response_guide=ResponseGuide(
            fact_check=[
                f"{'/'.join(keywords)} 관련 보도 사실 여부 확인",
                "공식 발표 내용과 언론 보도 내용 대조",
                "수치 오류 여부 확인 (금리, 한도, 조건 등)",
                "출처 신뢰성 검토 (주요 언론사 vs 블로그/커뮤니티)",
                "시간적 맥락 확인 (과거 정책과 현재 정책 혼동 여부)",
            ],
            faq=list(DEFAULT_FAQ),
            notice_short=(
                f"{meta.start_date}~{meta.end_date} 기간 발생한 관련 이슈를 면밀히 모니터링하고 있으며, "
                "고객 불편을 최소화하기 위해 최선을 다하겠습니다."
            ),
            notice_long=(
                f"최근 온라인상에서 발생한 {', '.join(keywords[:3])} 관련 보도 및 커뮤니티 내용에 대해 "
                "신속하게 대응하고 있습니다.\n\n정확한 정보는 공식 채널(홈페이지, 고객센터)을 통해 확인해 "
                "주시기 바랍니다. 잘못된 정보로 인한 혼란이 없도록 지속적으로 모니터링하고 있으며, 필요한 "
                "경우 해명 자료를 배포할 예정입니다."
            ),
            monitoring_keywords=monitoring[:5],
            escalation_criteria=list(ESCALATION_CRITERIA),
        ),
        generated_at=now_utc(),
        is_demo=True,
    )


SYSTEM_PROMPT = (
    "You are a media-monitoring analyst for a Korean public housing-finance agency. "
    "Write in Korean. Respond with a single JSON object and no other text."
)


def build_summary_prompt(result: AnalyticsResult, max_documents: int = 20) -> str:
    """
    Compact prompt with the period, sentiment totals, trending terms and the
    top documents.
    """
    meta = result.meta
    totals = sentiment_totals(result)

    documents = "\n\n".join(
        f"[{i + 1}] [{doc.channel}/{doc.keyword}] ({doc.published_at.date().isoformat()}) {doc.title}\n"
        f"요약: {doc.text[:200].replace(chr(10), ' ')}"
        for i, doc in enumerate(result.top_documents[:max_documents])
    )
    trends = ", ".join(f"{k.keyword}(z={k.zscore})" for k in result.trend_keywords[:10]) or "없음"

    return (
        f"[분석 기간] {meta.start_date} ~ {meta.end_date}\n"
        f"[모니터링 키워드] {', '.join(meta.keywords)}\n"
        f"[감성 현황] 긍정: {totals['positive']}건, 중립: {totals['neutral']}건, 부정: {totals['negative']}건\n"
        f"[트렌드 키워드] {trends}\n\n"
        f"수집된 주요 문서:\n\n{documents}\n\n"
        "다음 JSON 형식으로 작성하세요:\n"
        '{"summary": "3~5문장 요약", "key_issues": ["핵심 이슈 3~7개"], '
        '"response_guide": {"fact_check": ["3~5개"], "faq": [{"q": "질문", "a": "답변"}], '
        '"notice_short": "100자 내외 공지", "notice_long": "300자 내외 공지", '
        '"monitoring_keywords": ["3~5개"], "escalation_criteria": ["3~5개"]}}'
    )


async def generate_summary(
    result: AnalyticsResult,
    model: Optional[str] = None,
    client: Optional[AsyncOpenAI] = None,
) -> SummaryResponse:
    """
    Generate a narrative summary for an analytics result.

    Args:
        result: Analytics result to summarise
        model: OpenAI model to use
        client: Preconfigured client (defaults to one built from settings)

    Returns:
        Model-written summary, or the rule-based one when no key is
        configured or the call fails
    """
    client = client or _get_openai_client()
    if client is None:
        return build_rule_based_summary(result)

    try:
        response = await client.chat.completions.create(
            model=model or settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_summary_prompt(result)},
            ],
            temperature=0.3,
            max_tokens=3000,
        )
        content = (response.choices[0].message.content or "").strip()
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("model did not return a JSON object")

        return SummaryResponse(
            summary=str(data.get("summary", "")),
            key_issues=[str(issue) for issue in data.get("key_issues", [])],
            response_guide=ResponseGuide.model_validate(data.get("response_guide") or {}),
            generated_at=now_utc(),
            is_demo=False,
        )
    except (OpenAIError, ValueError) as e:
        logger.warning("Summary generation failed, using rule-based summary: %s", e)
        return build_rule_based_summary(result)
