"""
Application configuration with environment variable support.
"""
from __future__ import annotations

import logging
import os
from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable with fallback."""
    try:
        return float(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable with fallback."""
    try:
        return int(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


def _get_env_list(key: str, default: list[str], separator: str = ",") -> list[str]:
    """Get list value from environment variable with fallback."""
    value = os.getenv(key)
    if not value:
        return default
    return [item.strip() for item in value.split(separator) if item.strip()]


class Settings(BaseSettings):
    """Credentials for the external services, read from the environment or `.env`."""

    model_config = SettingsConfigDict(extra="ignore")

    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    YOUTUBE_API_KEY: str = ""
    PORT: int = 8000


settings = Settings(_env_file=".env", _env_file_encoding="utf-8")


# Analytics thresholds
SPIKE_ZSCORE: float = _get_env_float("SPIKE_ZSCORE", 2.0)
SPIKE_REPORT_ZSCORE: float = _get_env_float("SPIKE_REPORT_ZSCORE", 1.5)
TRENDING_ZSCORE: float = _get_env_float("TRENDING_ZSCORE", 2.0)
MAX_TREND_KEYWORDS: int = _get_env_int("MAX_TREND_KEYWORDS", 50)
MAX_TOP_DOCUMENTS: int = _get_env_int("MAX_TOP_DOCUMENTS", 50)
MAX_BUCKETS: int = 500
# Calendar days for bucketing and collector range filters
BUCKET_TIMEZONE: str = os.getenv("BUCKET_TIMEZONE", "UTC")

# Collection Settings
COLLECT_TIMEOUT_SECONDS: float = _get_env_float("COLLECT_TIMEOUT_SECONDS", 45.0)
HTTP_TIMEOUT_SECONDS: float = _get_env_float("HTTP_TIMEOUT_SECONDS", 12.0)
GALLERY_LOOKBACK_DAYS: int = _get_env_int("GALLERY_LOOKBACK_DAYS", 30)
GALLERY_MAX_PAGES: int = _get_env_int("GALLERY_MAX_PAGES", 3)
GALLERY_MAX_POSTS: int = _get_env_int("GALLERY_MAX_POSTS", 60)
GALLERY_REQUEST_DELAY: float = _get_env_float("GALLERY_REQUEST_DELAY", 0.5)
YOUTUBE_MAX_RESULTS: int = _get_env_int("YOUTUBE_MAX_RESULTS", 25)

# Cache Settings
CACHE_DIR: str = os.getenv("CACHE_DIR", os.path.join(os.getcwd(), "data"))

# Default request values
DEFAULT_GRANULARITY: str = os.getenv("DEFAULT_GRANULARITY", "monthly")
DEFAULT_CHANNELS: list[str] = _get_env_list("DEFAULT_CHANNELS", ["news", "youtube", "dc"])
DEFAULT_GALLERY_IDS: list[str] = _get_env_list(
    "DEFAULT_GALLERY_IDS", ["real_estate", "finance", "loan", "policy"]
)

# Watch-list: the organisation and its products
MONITOR_KEYWORDS: List[str] = _get_env_list(
    "MONITOR_KEYWORDS",
    ["한국주택금융공사", "HF", "보금자리론", "주택연금", "전세자금보증", "MBS"],
)

# Terms kept by the keyword extractor regardless of length or script
PROTECTED_KEYWORDS: List[str] = [
    *MONITOR_KEYWORDS,
    "주금공",
    "주택금융공사",
    "전세지킴보증",
    "커버드본드",
    "디딤돌",
    "특례보금자리론",
    "적격대출",
    "HUG",
    "LTV",
    "DSR",
]

KEYWORD_MIN_LENGTH: int = _get_env_int("KEYWORD_MIN_LENGTH", 2)

STOPWORDS: List[str] = [
    # particles, endings and filler that survive whitespace tokenisation
    "그리고", "그러나", "하지만", "그래서", "또한", "그런데", "때문에", "위해", "위한",
    "통해", "대한", "대해", "관련", "관련해", "이번", "지난", "오늘", "내일", "어제",
    "올해", "작년", "내년", "현재", "최근", "지금", "당시", "이후", "이전", "이상",
    "이하", "경우", "정도", "이런", "저런", "그런", "이것", "그것", "저것", "여기",
    "거기", "우리", "저희", "있다", "없다", "있는", "없는", "했다", "한다", "하는",
    "된다", "됐다", "되는", "있습니다", "합니다", "했습니다", "입니다", "것으로",
    "것이다", "라고", "이라고", "밝혔다", "말했다", "전했다", "따르면", "가운데",
    "등을", "등의", "등이", "및", "또는", "기자", "뉴스", "무단", "재배포", "금지",
    "저작권", "속보", "단독", "종합", "영상", "사진", "출처", "네이버", "구독",
    "진짜", "너무", "정말", "그냥", "아직", "계속", "많이", "좀", "다시", "모두",
    "the", "and", "for", "with", "this", "that", "from", "are", "was", "were",
    "http", "https", "www", "com", "news",
]

# Gallery boards searched by the gallery collector
GALLERIES: List[Dict[str, object]] = [
    {"id": "real_estate", "name": "부동산", "gallery_id": "realestate", "enabled": True},
    {"id": "finance", "name": "금융", "gallery_id": "finance", "enabled": True},
    {"id": "loan", "name": "대출", "gallery_id": "loan", "enabled": True},
    {"id": "policy", "name": "정책", "gallery_id": "policy", "enabled": True},
    {"id": "house", "name": "주택", "gallery_id": "house", "enabled": False},
]

# HTTP Client Configuration
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
HTTP_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8",
}

# CORS Configuration
CORS_ALLOW_ORIGINS: list[str] = _get_env_list("CORS_ALLOW_ORIGINS", ["*"])

# Logging Configuration
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv(
    "LOG_FORMAT",
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def configure_logging() -> None:
    """Apply LOG_LEVEL and LOG_FORMAT to the root logger."""
    logging.basicConfig(level=LOG_LEVEL.upper(), format=LOG_FORMAT)
