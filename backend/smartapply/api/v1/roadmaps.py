"""Career roadmap endpoints.

POST /roadmaps               - Roadmap for explicit inputs (generator form)
POST /roadmaps/alternatives  - Alternative careers for the caller's profile
GET  /roadmaps/status        - Provider configuration and cache statistics

Generation never fails for provider reasons: a missing API key, an
exhausted retry budget or an unusable response all end in the offline
fallback result, flagged with ``isFallback``.
"""

from dataclasses import asdict

from fastapi import APIRouter, Request

from smartapply.api.deps import CurrentSession, RoadmapServiceDep
from smartapply.core.config import settings
from smartapply.core.errors import NotFoundError
from smartapply.core.rate_limiting import limiter
from smartapply.core.responses import DataResponse
from smartapply.schemas.roadmap import (
    AlternativeCareer,
    CareerRecommendation,
    RoadmapRequestBody,
)

router = APIRouter()


@router.post("")
@limiter.limit(lambda: settings.rate_limit_llm)
async def create_roadmap(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RoadmapRequestBody,
    _session: CurrentSession,
    roadmaps: RoadmapServiceDep,
) -> DataResponse[CareerRecommendation]:
    """Generate (or fetch from cache) a roadmap for the given inputs."""
    recommendation = await roadmaps.generate_roadmap(body.to_request())
    return DataResponse(data=recommendation)


@router.post("/alternatives")
@limiter.limit(lambda: settings.rate_limit_llm)
async def suggest_alternatives(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    session: CurrentSession,
    roadmaps: RoadmapServiceDep,
) -> DataResponse[list[AlternativeCareer]]:
    """Suggest three alternative careers based on the stored profile.

    Raises:
        NotFoundError: The caller has no profile yet.
    """
    profile = session.workspace.store.get_profile()
    if profile is None:
        profile = session.workspace.resolver().resolve().profile
    if profile is None:
        raise NotFoundError("Profile")

    alternatives = await roadmaps.suggest_alternatives(profile)
    return DataResponse(data=alternatives)


@router.get("/status")
async def get_status(_session: CurrentSession, roadmaps: RoadmapServiceDep) -> DataResponse[dict]:
    return DataResponse(
        data={
            "configured": roadmaps.is_configured(),
            "cache": asdict(roadmaps.get_cache_stats()),
        }
    )
