"""Pydantic request/response schemas for API endpoints."""

from smartapply.schemas.auth import (
    AuthResultResponse,
    LoginRequest,
    LogoutRequest,
    SessionResponse,
    SignupRequest,
    UserInfo,
)
from smartapply.schemas.profile import (
    AssessmentSubmission,
    EnhancedProfile,
    ProfileUpdate,
)
from smartapply.schemas.roadmap import (
    AlternativeCareer,
    CareerPath,
    CareerRecommendation,
    RoadmapRequest,
    RoadmapRequestBody,
)

__all__ = [
    # Auth
    "AuthResultResponse",
    "LoginRequest",
    "LogoutRequest",
    "SessionResponse",
    "SignupRequest",
    "UserInfo",
    # Profile
    "AssessmentSubmission",
    "EnhancedProfile",
    "ProfileUpdate",
    # Roadmaps
    "AlternativeCareer",
    "CareerPath",
    "CareerRecommendation",
    "RoadmapRequest",
    "RoadmapRequestBody",
]
