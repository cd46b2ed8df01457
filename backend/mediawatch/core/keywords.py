"""
Lightweight keyword extraction for trend detection.

This is a whitespace tokenizer with stopword and script filters rather than
a morphological analyser, so particles attached to nouns stay attached.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List

from mediawatch import config

_URL_RE = re.compile(r"https?://\S+")
_PUNCT_RE = re.compile(r"[!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~]")
_DIGITS_RE = re.compile(r"[0-9]+")
_SINGLE_LATIN_RE = re.compile(r"^[a-zA-Z]$")
_JAMO_ONLY_RE = re.compile(r"^[ㄱ-ㅎㅏ-ㅣ]+$")
_HANGUL_RUN_RE = re.compile(r"[가-힣]{2,}")
_LATIN_RUN_RE = re.compile(r"[a-zA-Z]{3,}")


@dataclass(frozen=True)
class KeywordExtractorConfig:
    """Vocabulary and limits for the keyword extractor."""

    stopwords: FrozenSet[str] = field(default_factory=frozenset)
    protected_keywords: FrozenSet[str] = field(default_factory=frozenset)
    min_length: int = 2

    @classmethod
    def build(
        cls,
        stopwords: Iterable[str],
        protected_keywords: Iterable[str],
        min_length: int = 2,
    ) -> "KeywordExtractorConfig":
        return cls(
            stopwords=frozenset(stopwords),
            protected_keywords=frozenset(k.lower() for k in protected_keywords),
            min_length=min_length,
        )

    @classmethod
    def from_settings(cls) -> "KeywordExtractorConfig":
        """Configuration from the application settings module."""
        return cls.build(
            config.STOPWORDS,
            config.PROTECTED_KEYWORDS,
            config.KEYWORD_MIN_LENGTH,
        )


def clean_for_tokens(text: str) -> str:
    """Strip URLs, punctuation and digit runs, then collapse whitespace."""
    cleaned = _URL_RE.sub(" ", text)
    cleaned = _PUNCT_RE.sub(" ", cleaned)
    cleaned = _DIGITS_RE.sub(" ", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


class KeywordExtractor:
    """Turns free text into candidate trend terms."""

    def __init__(self, extractor_config: KeywordExtractorConfig | None = None):
        self.config = extractor_config or KeywordExtractorConfig.from_settings()

    def keep(self, token: str) -> bool:
        """Decide whether one cleaned token is a candidate term."""
        if len(token) < self.config.min_length:
            return False
        if token in self.config.stopwords:
            return False
        if _SINGLE_LATIN_RE.match(token):
            return False
        if token.lower() in self.config.protected_keywords:
            return True
        if _JAMO_ONLY_RE.match(token):
            return False
        return bool(_HANGUL_RUN_RE.search(token) or _LATIN_RUN_RE.search(token))

    def extract(self, text: str) -> List[str]:
        """
        Extract candidate keywords from text.

        Args:
            text: Free text (title and body)

        Returns:
            Tokens in order of appearance, duplicates preserved
        """
        if not text:
            return []
        return [token for token in clean_for_tokens(text).split(" ") if token and self.keep(token)]
