"""Enhanced profile endpoints.

GET    /profile             - Current profile, completeness and latest roadmap
PUT    /profile             - Partial update
POST   /profile/assessment  - Submit the assessment and generate a roadmap

All endpoints need a live session. Profile writes go through the
workspace's ProfileStore, which mirrors them into the persisted snapshot.
"""

from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter, Request

from smartapply.api.deps import CurrentSession, RoadmapServiceDep, Session
from smartapply.core.config import settings
from smartapply.core.rate_limiting import limiter
from smartapply.core.responses import DataResponse
from smartapply.schemas.profile import AssessmentSubmission, ProfileUpdate
from smartapply.services.route_guard import DASHBOARD_PATH

logger = structlog.get_logger()

router = APIRouter()


def _profile_state(session: Session) -> dict[str, Any]:
    store = session.workspace.store
    resolved = session.workspace.resolver().resolve()
    profile = store.get_profile() or resolved.profile
    results = store.get_results()
    return {
        "profile": profile.to_storage_dict() if profile else None,
        "isComplete": resolved.is_complete,
        "source": resolved.source.value,
        "results": results.to_client_dict() if results else None,
    }


@router.get("")
async def get_profile(session: CurrentSession) -> DataResponse[dict]:
    """Return the profile the guard would see."""
    return DataResponse(data=_profile_state(session))


@router.put("")
async def update_profile(body: ProfileUpdate, session: CurrentSession) -> DataResponse[dict]:
    """Apply the fields present in the body; absent fields are untouched."""
    changes = body.model_dump(exclude_unset=True)
    session.workspace.store.update_profile(changes)
    logger.info("profile_updated", user_id=session.user_id, fields=sorted(changes))
    return DataResponse(data=_profile_state(session))


@router.post("/assessment")
@limiter.limit(lambda: settings.rate_limit_llm)
async def submit_assessment(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: AssessmentSubmission,
    session: CurrentSession,
    roadmaps: RoadmapServiceDep,
) -> DataResponse[dict]:
    """Store assessment answers and attach a generated roadmap.

    The roadmap comes from cache, Gemini or the offline fallback tables;
    the call never fails for provider reasons. Afterwards the profile is
    complete and the client continues to the dashboard.
    """
    store = session.workspace.store
    profile = store.update_profile(
        {
            "name": body.name,
            "age": body.age,
            "education_level": body.education_level,
            "skills": body.skills,
            "career_interest": body.career_interest,
            "location": body.location,
            "career_assessment": {
                "responses": body.responses,
                "completedAt": datetime.now(UTC).isoformat(),
            },
        }
    )

    recommendation = await roadmaps.generate_career_path(profile)
    store.add_recommendation(recommendation)
    logger.info(
        "assessment_completed",
        user_id=session.user_id,
        is_fallback=recommendation.is_fallback,
    )

    state = _profile_state(session)
    state["redirectPath"] = DASHBOARD_PATH
    return DataResponse(data=state)
