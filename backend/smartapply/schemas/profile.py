"""Enhanced user profile schemas.

The profile is the record the route guard inspects to decide whether
onboarding is finished. It is stored as camelCase JSON inside the
``career-mentor-store`` snapshot, so the model keeps the original client
field names as aliases.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from smartapply.schemas.roadmap import CamelModel


class EnhancedProfile(CamelModel):
    """The user's career and assessment record.

    Only ``career_recommendations`` and ``career_interest`` decide
    completeness; everything else (including the gamification fields) is
    carried along for the dashboard.

    Recommendations are kept as raw JSON values: snapshots written by older
    clients may hold recommendation shapes this service does not produce.
    A null in the snapshot means "not set" and falls back to the default.
    """

    # Identity
    name: str = ""
    age: int | None = None
    education_level: str = ""
    skills: list[str] = Field(default_factory=list)
    career_interest: str = ""
    location: str = ""

    # Career data
    selected_career: str | None = None
    career_assessment: dict[str, Any] | None = None
    career_recommendations: list[Any] = Field(default_factory=list)
    selected_career_path: dict[str, Any] | None = None
    progress_data: dict[str, Any] | None = None

    # Gamification
    achievements: list[Any] = Field(default_factory=list)
    current_milestones: list[Any] = Field(default_factory=list)
    level: int = 1
    experience_points: int = 0
    badges: list[Any] = Field(default_factory=list)
    streaks: dict[str, Any] | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_storage_dict(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class ProfileUpdate(CamelModel):
    """Request body for PUT /profile (partial update)."""

    name: str | None = Field(default=None, max_length=200)
    age: int | None = Field(default=None, ge=0, le=150)
    education_level: str | None = Field(default=None, max_length=100)
    skills: list[str] | None = Field(default=None, max_length=100)
    career_interest: str | None = Field(default=None, max_length=200)
    location: str | None = Field(default=None, max_length=200)
    selected_career: str | None = Field(default=None, max_length=200)
    level: int | None = Field(default=None, ge=1)
    experience_points: int | None = Field(default=None, ge=0)
    badges: list[Any] | None = None
    achievements: list[Any] | None = None
    streaks: dict[str, Any] | None = None
    progress_data: dict[str, Any] | None = None


class AssessmentSubmission(CamelModel):
    """Request body for POST /profile/assessment.

    Identity answers from the assessment form plus free-form responses.
    """

    name: str = Field(default="", max_length=200)
    age: int | None = Field(default=None, ge=0, le=150)
    education_level: str = Field(default="", max_length=100)
    skills: list[str] = Field(default_factory=list, max_length=100)
    career_interest: str = Field(..., min_length=1, max_length=200)
    location: str = Field(default="", max_length=200)
    responses: dict[str, Any] = Field(default_factory=dict)
