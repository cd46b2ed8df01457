"""
Lexicon-based Korean sentiment classification.

Each document is scored by counting positive and negative lexicon entries
that occur as substrings of its lower-cased title and body. A flat penalty
is added to the negative tally whenever any negation marker appears in the
text, regardless of where it appears.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from mediawatch.models import SentimentResult
from mediawatch.schemas import AnalyzedDocument, RawDocument

logger = logging.getLogger(__name__)


POSITIVE_WORDS = frozenset([
    "좋은", "훌륭한", "우수한", "탁월한", "성공", "성장", "증가", "향상", "개선", "혜택",
    "지원", "보호", "안전", "안정", "신뢰", "확대", "강화", "활성화", "추진", "달성",
    "완료", "해결", "획득", "승인", "긍정", "호조", "상승", "회복", "정상", "원활",
    "효율", "효과", "최고", "최우수", "적극", "우대", "편리", "신속", "정확", "투명",
    "공정", "합리", "도움", "지지", "응원", "기대", "희망", "만족", "인정", "수혜",
    "유리", "긍정적", "호평", "인기", "수요증가", "흑자", "절감", "우호", "환영",
    "혜택확대", "금리인하", "지원확대", "조건완화", "혜택증가",
])

NEGATIVE_WORDS = frozenset([
    "우려", "문제", "위기", "위험", "손실", "감소", "하락", "악화", "부실", "부담",
    "논란", "갈등", "비판", "반발", "거부", "거절", "실패", "취소", "지연", "중단",
    "파산", "도산", "손해", "피해", "사기", "부정", "불법", "위반", "제재", "처벌",
    "소송", "고발", "조사", "수사", "적발", "발각", "스캔들", "사고", "오류", "결함",
    "불만", "항의", "거센", "비난", "폭락", "급락", "급등", "혼란", "불안", "공포",
    "충격", "경고", "적자", "부채", "연체", "부도", "디폴트", "위축", "침체", "불황",
    "규제강화", "금리인상", "문제점", "리스크", "부담증가", "조건강화", "자격박탈",
    "사태", "횡령", "배임", "비리", "부정부패", "불투명", "논쟁", "분쟁",
])

# Negation markers and negative prefixes
NEGATIONS = ("아니", "않", "못", "불", "비", "무", "미")


class SentimentClassifier:
    """Rule-based classifier over two disjoint word sets."""

    def __init__(
        self,
        positive_words: Iterable[str] = POSITIVE_WORDS,
        negative_words: Iterable[str] = NEGATIVE_WORDS,
        negations: Iterable[str] = NEGATIONS,
        negation_penalty: float = 0.5,
        threshold: float = 0.2,
    ):
        self.positive_words = frozenset(w.lower() for w in positive_words)
        self.negative_words = frozenset(w.lower() for w in negative_words)
        self.negations = tuple(negations)
        self.negation_penalty = negation_penalty
        self.threshold = threshold

    def classify(self, title: str, text: str) -> SentimentResult:
        """
        Classify a document by its title and body.

        Args:
            title: Document title
            text: Document body (may be empty)

        Returns:
            SentimentResult with label and score in [-1, 1]
        """
        full_text = f"{title or ''} {text or ''}".lower()

        positive = float(sum(1 for word in self.positive_words if word in full_text))
        negative = float(sum(1 for word in self.negative_words if word in full_text))

        for marker in self.negations:
            if marker in full_text:
                negative += self.negation_penalty

        total = positive + negative
        if total == 0:
            return SentimentResult(label="neutral", score=0.0)

        raw = (positive - negative) / total

        if raw > self.threshold:
            return SentimentResult(label="positive", score=min(raw, 1.0))
        if raw < -self.threshold:
            return SentimentResult(label="negative", score=max(raw, -1.0))
        return SentimentResult(label="neutral", score=raw)

    def analyze_document(self, document: RawDocument) -> AnalyzedDocument:
        """Attach sentiment to a raw document."""
        result = self.classify(document.title, document.text)
        return AnalyzedDocument(
            **document.model_dump(),
            sentiment=result.label,
            sentiment_score=result.score,
        )

    def analyze_documents(self, documents: Iterable[RawDocument]) -> List[AnalyzedDocument]:
        """Classify each document independently."""
        analyzed = [self.analyze_document(doc) for doc in documents]
        logger.debug("Classified sentiment for %d documents", len(analyzed))
        return analyzed


default_classifier = SentimentClassifier()


def analyze_sentiment(title: str, text: str) -> SentimentResult:
    """Classify with the default lexicons."""
    return default_classifier.classify(title, text)


def analyze_documents(documents: Iterable[RawDocument]) -> List[AnalyzedDocument]:
    """Classify a batch with the default lexicons."""
    return default_classifier.analyze_documents(documents)
