"""Admin API router.

Roadmap cache inspection and reset, plus a provider health probe.

All endpoints require the AdminSession dependency (session user with the
Admin access level).
"""

from dataclasses import asdict

import structlog
from fastapi import APIRouter

from smartapply.api.deps import AdminSession, RoadmapServiceDep
from smartapply.core.responses import DataResponse

logger = structlog.get_logger()

router = APIRouter()


# =============================================================================
# Roadmap cache
# =============================================================================


@router.get("/cache")
async def get_cache_stats(_admin: AdminSession, roadmaps: RoadmapServiceDep) -> DataResponse[dict]:
    """Cache size, hit/miss counters and cached keys."""
    stats = asdict(roadmaps.get_cache_stats())
    stats["keys"] = roadmaps.cache.keys()
    return DataResponse(data=stats)


@router.delete("/cache")
async def clear_cache(admin: AdminSession, roadmaps: RoadmapServiceDep) -> DataResponse[dict]:
    """Drop every cached roadmap and alternatives list."""
    removed = roadmaps.clear_cache()
    logger.info("roadmap_cache_cleared", user_id=admin.user_id, removed=removed)
    return DataResponse(data={"removed": removed})


# =============================================================================
# Provider health
# =============================================================================


@router.get("/health/roadmaps")
async def roadmap_health(_admin: AdminSession, roadmaps: RoadmapServiceDep) -> DataResponse[dict]:
    """Send a one-line probe to Gemini (5 second limit)."""
    return DataResponse(data=await roadmaps.check_health())
