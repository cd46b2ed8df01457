"""
Main FastAPI application and routing layer.
"""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from mediawatch.config import CORS_ALLOW_ORIGINS, GALLERIES, MONITOR_KEYWORDS, configure_logging, settings
from mediawatch.core.aggregate import aggregate_analytics
from mediawatch.schemas import (
    AnalyticsResult,
    CollectRequest,
    DemoRequest,
    SummaryRequest,
    SummaryResponse,
)
from mediawatch.services.cache import AnalyticsCache, analytics_cache_key, result_cache_key
from mediawatch.services.demo import generate_demo_analytics
from mediawatch.services.summary import generate_summary
from mediawatch.sources.collector import collect_all
from mediawatch.utils import now_utc

configure_logging()
logger = logging.getLogger("uvicorn")


def get_cache() -> AnalyticsCache:
    return AnalyticsCache()


app = FastAPI(
    title="Media Monitoring Analytics API",
    version="0.1.0",
    description="Collects mentions of the watch-list keywords and turns them into dashboard analytics",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "as_of": now_utc().isoformat(),
        "service": "mediawatch-api",
    }


@app.get("/api/config")
async def get_config():
    """Watch-list keywords, selectable galleries and which optional services are configured."""
    return {
        "keywords": list(MONITOR_KEYWORDS),
        "galleries": [
            {"id": g["id"], "name": g["name"]} for g in GALLERIES if g.get("enabled")
        ],
        "capabilities": {
            "youtube": bool(settings.YOUTUBE_API_KEY),
            "openai": bool(settings.OPENAI_API_KEY),
        },
    }


@app.post("/api/collect", response_model=AnalyticsResult)
async def collect_analytics(request: CollectRequest, cache: AnalyticsCache = Depends(get_cache)):
    """
    Collect documents for the requested range and return the analytics.

    Results are cached per request fingerprint; `forceRefresh` bypasses the
    cached copy and overwrites it.
    """
    if request.startDate is None or request.endDate is None:
        raise HTTPException(status_code=400, detail="startDate and endDate are required")

    keywords = request.keywords or list(MONITOR_KEYWORDS)
    key = analytics_cache_key(request.startDate, request.endDate, request.granularity, keywords, request.channels)

    try:
        if not request.forceRefresh:
            cached = cache.get(key)
            if cached is not None:
                logger.info("Serving cached analytics for %s", key)
                return cached.model_copy(update={"from_cache": True})

        logger.info(
            "Collecting %s..%s for %d keywords on %s",
            request.startDate, request.endDate, len(keywords),
            ", ".join(request.channels),
        )
        collected = await collect_all(
            request.channels,
            keywords,
            request.startDate,
            request.endDate,
            gallery_ids=request.galleryIds,
        )
        result = aggregate_analytics(
            collected.documents,
            request.startDate,
            request.endDate,
            request.granularity,
            keywords,
            request.channels,
            collected.statuses,
        )
        cache.put(key, result)
        return result.model_copy(update={"from_cache": False})

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error collecting analytics for %s: %s", key, e)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/demo", response_model=AnalyticsResult)
async def demo_analytics(request: DemoRequest):
    """Analytics built from synthetic documents, for use without network access."""
    try:
        return generate_demo_analytics(
            request.startDate,
            request.endDate,
            request.granularity,
            request.keywords,
            request.channels,
        )
    except Exception as e:
        logger.error("Error generating demo analytics: %s", e)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/ai-summary", response_model=SummaryResponse)
async def ai_summary(request: SummaryRequest, cache: AnalyticsCache = Depends(get_cache)):
    """Narrative summary and response guide for an analytics result."""
    if request.analytics is None:
        raise HTTPException(status_code=400, detail="analytics is required")

    key = result_cache_key(request.analytics)
    try:
        if not request.forceRefresh:
            cached = cache.get_summary(key)
            if cached is not None:
                logger.info("Serving cached summary for %s", key)
                return cached.model_copy(update={"from_cache": True})

        summary = await generate_summary(request.analytics)
        cache.put_summary(key, summary)
        return summary.model_copy(update={"from_cache": False})

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error generating summary for %s: %s", key, e)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


if __name__ == "__main__":
    # For development
    import uvicorn
    uvicorn.run("mediawatch.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
