"""Career roadmap schemas.

Roadmap results are exchanged with the browser client in camelCase JSON
(``fitScore``, ``careerPath``, ...). Models accept either the camelCase
alias or the snake_case field name on input and serialize with aliases.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ExperienceLevel = Literal["entry", "junior", "mid", "senior", "expert"]
GrowthLevel = Literal["very high", "high", "medium", "low"]

EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "junior", "mid", "senior", "expert")


class CamelModel(BaseModel):
    """Base for client-facing models using camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Roadmap Graph
# =============================================================================


class NodePosition(CamelModel):
    x: float = 0
    y: float = 0


class CareerNode(CamelModel):
    """One step in a career path graph (course, job, certification, ...)."""

    id: str
    type: str
    title: str
    description: str = ""
    duration: str | None = None
    difficulty: str | None = None
    salary: str | None = None
    requirements: list[str] = Field(default_factory=list)
    position: NodePosition = Field(default_factory=NodePosition)

    @field_validator("requirements", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("salary", "duration", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value


class CareerEdge(CamelModel):
    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    type: str | None = "smoothstep"
    animated: bool = False


class CareerPath(CamelModel):
    nodes: list[CareerNode] = Field(default_factory=list)
    edges: list[CareerEdge] = Field(default_factory=list)


class AlternativeCareer(CamelModel):
    """A related career suggested alongside the primary one."""

    id: str
    title: str
    description: str = ""
    match_score: int = 70
    salary: str = "$50k-80k"
    requirements: list[str] = Field(default_factory=list)
    growth: GrowthLevel = "medium"
    experience_level: Literal["entry", "mid", "senior", "internship"] | None = None

    @field_validator("growth", mode="before")
    @classmethod
    def _normalize_growth(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("match_score", mode="before")
    @classmethod
    def _round_score(cls, value: Any) -> Any:
        return round(value) if isinstance(value, float) else value


# =============================================================================
# Recommendation Details
# =============================================================================


class SalaryRange(CamelModel):
    min: int
    max: int
    currency: str = "USD"
    period: Literal["hourly", "monthly", "yearly"] = "yearly"


class Skill(CamelModel):
    id: str
    name: str
    category: str
    proficiency: Literal["beginner", "intermediate", "advanced", "expert"] | None = None
    is_required: bool = True
    priority: Literal["critical", "important", "nice-to-have"] = "important"


class LearningResource(CamelModel):
    id: str
    title: str
    description: str = ""
    type: str
    provider: str
    url: str | None = None
    duration: str
    cost: float = 0
    difficulty: str = "beginner"
    skills: list[str] = Field(default_factory=list)


class LearningPhase(CamelModel):
    id: str
    title: str
    description: str = ""
    duration: str
    priority: Literal["critical", "important", "nice-to-have"] = "important"
    resources: list[LearningResource] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    order: int


class LearningPath(CamelModel):
    id: str
    title: str
    description: str
    total_duration: str
    phases: list[LearningPhase] = Field(default_factory=list)
    estimated_cost: float = 0
    difficulty: Literal["beginner", "intermediate", "advanced"] = "beginner"
    prerequisites: list[str] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)


class JobMarketInfo(CamelModel):
    demand: Literal["high", "medium", "low"]
    competitiveness: Literal["high", "medium", "low"]
    locations: list[str] = Field(default_factory=list)
    industry_growth: float
    average_salary: int


class CareerRecommendation(CamelModel):
    """A complete career roadmap result.

    Produced either from a Gemini response or from the offline fallback
    tables; ``is_fallback`` and the "[Fallback]" summary prefix mark the
    latter.
    """

    id: str
    title: str
    description: str
    fit_score: int = Field(ge=0, le=100)
    salary_range: SalaryRange
    growth_prospects: Literal["high", "medium", "low"]
    required_skills: list[Skill] = Field(default_factory=list)
    recommended_path: LearningPath
    job_market_data: JobMarketInfo
    primary_career: str
    related_roles: list[str] = Field(default_factory=list)
    career_path: CareerPath
    alternatives: list[AlternativeCareer] = Field(default_factory=list)
    summary: str
    is_fallback: bool = False

    def to_client_dict(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class RoadmapRequest:
    """Inputs that determine a roadmap (and its cache key).

    Skills are stored as a tuple so instances stay immutable; their order
    is irrelevant to the cache key.
    """

    domain: str
    job_role: str
    experience_level: str
    skills: tuple[str, ...] = field(default_factory=tuple)
    education_level: str = ""
    age: int | None = None
    name: str | None = None


class RoadmapRequestBody(CamelModel):
    """Request body for POST /roadmaps."""

    domain: str = Field(..., min_length=1, max_length=200)
    job_role: str = Field(..., min_length=1, max_length=200)
    experience_level: ExperienceLevel = "entry"
    skills: list[str] = Field(default_factory=list, max_length=100)
    education_level: str = Field(default="", max_length=100)
    age: int | None = Field(default=None, ge=0, le=150)
    name: str | None = Field(default=None, max_length=200)

    def to_request(self) -> RoadmapRequest:
        return RoadmapRequest(
            domain=self.domain,
            job_role=self.job_role,
            experience_level=self.experience_level,
            skills=tuple(self.skills),
            education_level=self.education_level,
            age=self.age,
            name=self.name,
        )
