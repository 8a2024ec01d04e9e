"""Career roadmap generation service.

Flow for generate_roadmap():
1. Derive the cache key and return a fresh cached result if present
2. Otherwise ask Gemini for a JSON roadmap, retrying transient, rate-limit
   and malformed-response failures with exponential backoff
3. If the provider is not configured, or every attempt failed, build the
   offline fallback roadmap
4. Cache whichever result was produced

Provider failures never reach the caller; they only show up as a fallback
result (``is_fallback=True``, "[Fallback]" summary prefix). The one
exception is RetryCancelledError, which the caller asked for.
"""

import asyncio
import json
import re
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from smartapply.core.scheduler import CancellationToken, Scheduler, default_scheduler
from smartapply.prompts.roadmap import (
    ALTERNATIVES_SYSTEM_PROMPT,
    HEALTH_CHECK_PROMPT,
    ROADMAP_SYSTEM_PROMPT,
    build_alternatives_prompt,
    build_roadmap_prompt,
)
from smartapply.providers.config import ProviderConfig
from smartapply.providers.errors import (
    MalformedResponseError,
    ProviderError,
    RetryCancelledError,
)
from smartapply.providers.llm.base import LLMMessage, LLMProvider, TaskType
from smartapply.providers.retry import with_retries
from smartapply.schemas.profile import EnhancedProfile
from smartapply.schemas.roadmap import (
    AlternativeCareer,
    CareerPath,
    CareerRecommendation,
    JobMarketInfo,
    LearningPath,
    RoadmapRequest,
    SalaryRange,
    Skill,
)
from smartapply.services.fallback_roadmaps import (
    build_fallback_alternatives,
    build_fallback_roadmap,
)
from smartapply.services.roadmap_cache import (
    CacheStats,
    RoadmapCache,
    derive_alternatives_key,
    derive_cache_key,
)

logger = structlog.get_logger()

# =============================================================================
# Constants
# =============================================================================

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_SALARY_PATTERN = re.compile(r"\$(\d+)k?-\$?(\d+)k?")

_REQUIRED_ROADMAP_FIELDS = ("primaryCareer", "careerPath", "alternatives")

_EXPERIENCE_BONUS = {"entry": 5, "junior": 10, "mid": 15, "senior": 20, "expert": 25}
_AVERAGE_SALARY = {
    "entry": 60000,
    "junior": 75000,
    "mid": 95000,
    "senior": 120000,
    "expert": 150000,
}
_HIGH_GROWTH_DOMAINS = (
    "technology",
    "computer science",
    "ai",
    "machine learning",
    "data science",
    "cybersecurity",
    "cloud computing",
    "blockchain",
)
_VALID_GROWTH = frozenset({"very high", "high", "medium", "low"})

# Career interest keyword -> domain, first match wins
_INTEREST_DOMAINS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("software", "programming", "developer", "tech"), "Technology & Computer Science"),
    (("business", "management"), "Business & Management"),
    (("design", "creative"), "Design & Creative Industries"),
    (("health", "medical"), "Healthcare & Medicine"),
    (("education", "teaching"), "Education & Training"),
)
DEFAULT_DOMAIN = "Technology & Computer Science"
DEFAULT_JOB_ROLE = "Professional"

_EDUCATION_EXPERIENCE = {
    "high-school": "entry",
    "associates": "junior",
    "bachelors": "junior",
    "masters": "mid",
    "phd": "senior",
}


# =============================================================================
# Profile -> Request
# =============================================================================


def extract_domain_from_profile(profile: EnhancedProfile) -> str:
    """Map the profile's career interest onto a broad domain."""
    interest = (profile.career_interest or "").lower()
    for keywords, domain in _INTEREST_DOMAINS:
        if any(keyword in interest for keyword in keywords):
            return domain
    return DEFAULT_DOMAIN


def map_education_to_experience(education_level: str | None) -> str:
    return _EDUCATION_EXPERIENCE.get(education_level or "", "entry")


def profile_to_request(profile: EnhancedProfile) -> RoadmapRequest:
    return RoadmapRequest(
        domain=extract_domain_from_profile(profile),
        job_role=(profile.career_interest or "").strip() or DEFAULT_JOB_ROLE,
        experience_level=map_education_to_experience(profile.education_level),
        skills=tuple(profile.skills),
        education_level=profile.education_level or "",
        age=profile.age,
        name=profile.name,
    )


# =============================================================================
# Response Parsing
# =============================================================================


def _stamp(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def calculate_fit_score(request: RoadmapRequest) -> int:
    """Base 70, plus experience and skill-count bonuses, capped at 95."""
    score = 70 + _EXPERIENCE_BONUS.get(request.experience_level, 0)
    if len(request.skills) > 5:
        score += 10
    elif len(request.skills) > 2:
        score += 5
    return min(score, 95)


def determine_growth_prospects(domain: str) -> str:
    domain_lower = domain.lower()
    return "high" if any(d in domain_lower for d in _HIGH_GROWTH_DOMAINS) else "medium"


def _nodes_of_type(nodes: list[dict[str, Any]], *types: str) -> list[dict[str, Any]]:
    return [node for node in nodes if node.get("type") in types]


def extract_salary_range(nodes: list[dict[str, Any]]) -> SalaryRange:
    """Read the salary range from the first job node.

    Two-digit-or-shorter figures are thousands ("$60k-80k" -> 60000-80000).
    Falls back to 50000-90000.
    """
    job_nodes = _nodes_of_type(nodes, "job")
    if job_nodes and isinstance(job_nodes[0].get("salary"), str):
        match = _SALARY_PATTERN.search(job_nodes[0]["salary"])
        if match:
            low, high = match.group(1), match.group(2)
            return SalaryRange(
                min=int(low) * (1000 if len(low) <= 2 else 1),
                max=int(high) * (1000 if len(high) <= 2 else 1),
            )
    return SalaryRange(min=50000, max=90000)


def _extract_required_skills(nodes: list[dict[str, Any]]) -> list[Skill]:
    return [
        Skill(
            id=f"skill_{index}",
            name=str(node.get("title", "")),
            category="technical",
            priority="critical" if index < 3 else "important",
        )
        for index, node in enumerate(_nodes_of_type(nodes, "skill"))
    ]


def _extract_learning_phases(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    phases = []
    for index, node in enumerate(_nodes_of_type(nodes, "course", "certification")):
        duration = node.get("duration") or "4 weeks"
        requirements = node.get("requirements") or []
        phases.append(
            {
                "id": f"phase_{index + 1}",
                "title": node.get("title", ""),
                "description": node.get("description") or "",
                "duration": str(duration),
                "priority": "critical" if index < 2 else "important",
                "order": index + 1,
                "skills": requirements,
                "resources": [
                    {
                        "id": f"resource_{index}",
                        "title": node.get("title", ""),
                        "description": node.get("description") or "",
                        "type": node.get("type"),
                        "provider": "Multiple Platforms",
                        "duration": str(duration),
                        "cost": 50,
                        "difficulty": node.get("difficulty") or "beginner",
                        "skills": requirements,
                    }
                ],
            }
        )
    return phases


def _build_learning_path(
    nodes: list[dict[str, Any]], request: RoadmapRequest, now: datetime
) -> LearningPath:
    return LearningPath.model_validate(
        {
            "id": f"learning_path_{_stamp(now)}",
            "title": f"{request.job_role} Learning Path",
            "description": (
                f"Comprehensive learning path for {request.job_role} in {request.domain}"
            ),
            "totalDuration": "6-12 months",
            "phases": _extract_learning_phases(nodes),
            "estimatedCost": 2000,
            "difficulty": "beginner" if request.experience_level == "entry" else "intermediate",
            "prerequisites": [f"Basic understanding of {request.domain}", "Problem-solving mindset"],
            "outcomes": [
                f"Master {request.job_role} skills",
                "Build portfolio projects",
                "Ready for job applications",
            ],
        }
    )


def _job_market_data(request: RoadmapRequest) -> JobMarketInfo:
    return JobMarketInfo(
        demand="high" if determine_growth_prospects(request.domain) == "high" else "medium",
        competitiveness="high" if request.experience_level == "entry" else "medium",
        locations=["Remote", "Major Cities", "Tech Hubs"],
        industry_growth=15,
        average_salary=_AVERAGE_SALARY.get(request.experience_level, 75000),
    )


def normalize_alternative(raw: Any, index: int) -> AlternativeCareer:
    """Fill defaults into one AI-suggested alternative.

    Raises:
        ValueError: If the item is not a JSON object.
    """
    if not isinstance(raw, dict):
        msg = f"alternative {index} is {type(raw).__name__}, expected object"
        raise ValueError(msg)
    growth = str(raw.get("growth") or "medium").strip().lower()
    return AlternativeCareer.model_validate(
        {
            **raw,
            "id": str(raw.get("id") or f"alt{index + 1}"),
            "title": raw.get("title") or "Alternative Career",
            "description": raw.get("description") or "Career alternative description",
            "matchScore": raw.get("matchScore") or 70,
            "salary": raw.get("salary") or "$50k-80k",
            "requirements": raw.get("requirements") or [],
            "growth": growth if growth in _VALID_GROWTH else "medium",
        }
    )


def transform_to_recommendation(
    data: dict[str, Any],
    request: RoadmapRequest,
    now: datetime,
) -> CareerRecommendation:
    """Turn parsed Gemini JSON into a CareerRecommendation.

    Scores, salary, skills and the learning path are derived locally from
    the request and the returned graph rather than trusted from the model.
    """
    career_path = data["careerPath"]
    if not isinstance(career_path, dict):
        msg = "careerPath must be an object"
        raise ValueError(msg)
    raw_nodes = career_path.get("nodes") or []
    nodes = [node for node in raw_nodes if isinstance(node, dict)]

    raw_alternatives = data["alternatives"]
    if not isinstance(raw_alternatives, list):
        msg = "alternatives must be an array"
        raise ValueError(msg)

    primary = str(data["primaryCareer"])
    summary = data.get("summary")

    return CareerRecommendation(
        id=f"gemini_roadmap_{_stamp(now)}",
        title=primary,
        description=summary
        or f"Personalized career roadmap for {request.job_role} in {request.domain}",
        fit_score=calculate_fit_score(request),
        salary_range=extract_salary_range(nodes),
        growth_prospects=determine_growth_prospects(request.domain),
        required_skills=_extract_required_skills(nodes),
        recommended_path=_build_learning_path(nodes, request, now),
        job_market_data=_job_market_data(request),
        primary_career=primary,
        related_roles=[str(role) for role in data.get("relatedRoles") or []],
        career_path=CareerPath.model_validate({**career_path, "nodes": nodes}),
        alternatives=[normalize_alternative(alt, i) for i, alt in enumerate(raw_alternatives)],
        summary=summary
        or f"AI-generated career roadmap for {request.experience_level} level {request.job_role}",
    )


def parse_roadmap_response(
    text: str,
    request: RoadmapRequest,
    now: datetime,
) -> CareerRecommendation:
    """Extract and validate the roadmap object from model output.

    The outermost ``{...}`` span is parsed, so prose or code fences around
    the JSON are tolerated.

    Raises:
        MalformedResponseError: No JSON object, missing required fields, or
            content that does not fit the schema.
    """
    match = _JSON_OBJECT_PATTERN.search(text or "")
    if match is None:
        raise MalformedResponseError("No JSON object in roadmap response", raw_content=text)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid roadmap JSON: {e}", raw_content=text) from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Roadmap JSON is not an object", raw_content=text)
    missing = [name for name in _REQUIRED_ROADMAP_FIELDS if not data.get(name)]
    if missing:
        raise MalformedResponseError(
            f"Roadmap response missing fields: {', '.join(missing)}", raw_content=text
        )

    try:
        return transform_to_recommendation(data, request, now)
    except (ValidationError, ValueError, TypeError) as e:
        raise MalformedResponseError(f"Roadmap response rejected: {e}", raw_content=text) from e


def parse_alternatives_response(text: str) -> list[AlternativeCareer]:
    """Extract a non-empty array of alternatives from model output.

    Raises:
        MalformedResponseError: No array, empty array, or invalid items.
    """
    match = _JSON_ARRAY_PATTERN.search(text or "")
    if match is None:
        raise MalformedResponseError("No JSON array in alternatives response", raw_content=text)

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid alternatives JSON: {e}", raw_content=text) from e

    if not isinstance(items, list) or not items:
        raise MalformedResponseError("Alternatives response is empty", raw_content=text)

    try:
        return [normalize_alternative(item, i) for i, item in enumerate(items)]
    except (ValidationError, ValueError) as e:
        raise MalformedResponseError(
            f"Alternatives response rejected: {e}", raw_content=text
        ) from e


# =============================================================================
# Service
# =============================================================================


class RoadmapService:
    """Cached, retrying, fallback-backed roadmap generation.

    One instance is shared by the whole app; its cache is shared by every
    caller.

    Args:
        provider: LLM provider used for remote generation.
        config: Retry policy. Defaults to the provider's config.
        cache: Result cache. Defaults to a 24h RoadmapCache on the same
            scheduler.
        scheduler: Clock and sleep used for retries and timestamps.
    """

    def __init__(
        self,
        provider: LLMProvider,
        config: ProviderConfig | None = None,
        cache: RoadmapCache | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or provider.config
        self._scheduler = scheduler or default_scheduler
        self._cache = cache or RoadmapCache(scheduler=self._scheduler)

    @property
    def cache(self) -> RoadmapCache:
        return self._cache

    def is_configured(self) -> bool:
        return self._provider.is_configured()

    async def generate_roadmap(
        self,
        request: RoadmapRequest,
        cancel_token: CancellationToken | None = None,
    ) -> CareerRecommendation:
        """Return a roadmap for the request, from cache, Gemini or fallback.

        Args:
            request: Normalized roadmap request.
            cancel_token: Stops pending retries when cancelled.

        Returns:
            CareerRecommendation; ``is_fallback`` tells the caller which path
            produced it.

        Raises:
            RetryCancelledError: If cancel_token was cancelled before a
                result was produced. Nothing is cached in that case.
        """
        cache_key = derive_cache_key(request)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("roadmap_cache_hit", cache_key=cache_key)
            return cached

        result: CareerRecommendation | None = None
        if not self.is_configured():
            logger.warning("roadmap_provider_not_configured", job_role=request.job_role)
        else:
            try:
                result = await with_retries(
                    lambda: self._request_roadmap(request),
                    self._config,
                    scheduler=self._scheduler,
                    cancel_token=cancel_token,
                )
            except RetryCancelledError:
                logger.info("roadmap_generation_cancelled", job_role=request.job_role)
                raise
            except ProviderError as e:
                logger.warning(
                    "roadmap_generation_failed",
                    job_role=request.job_role,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        if result is None:
            result = build_fallback_roadmap(request, now=self._scheduler.now())

        self._cache.set(cache_key, result)
        logger.info(
            "roadmap_generated",
            cache_key=cache_key,
            is_fallback=result.is_fallback,
        )
        return result

    async def _request_roadmap(self, request: RoadmapRequest) -> CareerRecommendation:
        response = await self._provider.complete(
            messages=[
                LLMMessage(role="system", content=ROADMAP_SYSTEM_PROMPT),
                LLMMessage(role="user", content=build_roadmap_prompt(request)),
            ],
            task=TaskType.ROADMAP_GENERATION,
            json_mode=True,
        )
        return parse_roadmap_response(response.content or "", request, self._scheduler.now())

    async def generate_career_path(
        self,
        profile: EnhancedProfile,
        cancel_token: CancellationToken | None = None,
    ) -> CareerRecommendation:
        """Generate a roadmap from an enhanced profile."""
        return await self.generate_roadmap(profile_to_request(profile), cancel_token)

    async def suggest_alternatives(
        self,
        profile: EnhancedProfile,
        cancel_token: CancellationToken | None = None,
    ) -> list[AlternativeCareer]:
        """Suggest alternative careers for a profile.

        Same cache/retry/fallback policy as generate_roadmap(), under the
        ``alternatives_`` key prefix.
        """
        request = profile_to_request(profile)
        cache_key = derive_alternatives_key(request)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("alternatives_cache_hit", cache_key=cache_key)
            return cached

        alternatives: list[AlternativeCareer] | None = None
        if self.is_configured():
            try:
                alternatives = await with_retries(
                    lambda: self._request_alternatives(request),
                    self._config,
                    scheduler=self._scheduler,
                    cancel_token=cancel_token,
                )
            except RetryCancelledError:
                raise
            except ProviderError as e:
                logger.warning(
                    "alternatives_generation_failed",
                    job_role=request.job_role,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        if alternatives is None:
            alternatives = build_fallback_alternatives(request)

        self._cache.set(cache_key, alternatives)
        return alternatives

    async def _request_alternatives(self, request: RoadmapRequest) -> list[AlternativeCareer]:
        response = await self._provider.complete(
            messages=[
                LLMMessage(role="system", content=ALTERNATIVES_SYSTEM_PROMPT),
                LLMMessage(role="user", content=build_alternatives_prompt(request)),
            ],
            task=TaskType.ALTERNATIVE_CAREERS,
            json_mode=True,
        )
        return parse_alternatives_response(response.content or "")

    def clear_cache(self) -> int:
        """Empty the cache. Returns the number of entries removed."""
        return self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    async def check_health(self) -> dict[str, Any]:
        """Probe the provider with a trivial prompt (5 second limit).

        Returns:
            ``{"status": "healthy"|"unhealthy", "details": {...}}``.
        """
        details: dict[str, Any] = {
            "api_key": self.is_configured(),
            "model": self._provider.get_model_for_task(TaskType.HEALTH_CHECK),
            "cache_size": len(self._cache),
        }
        if not self.is_configured():
            return {"status": "unhealthy", "details": {**details, "error": "API key not configured"}}

        try:
            response = await asyncio.wait_for(
                self._provider.complete(
                    messages=[LLMMessage(role="user", content=HEALTH_CHECK_PROMPT)],
                    task=TaskType.HEALTH_CHECK,
                    max_tokens=16,
                ),
                timeout=HEALTH_CHECK_TIMEOUT_SECONDS,
            )
        except (ProviderError, TimeoutError) as e:
            logger.warning("llm_health_check_failed", error=str(e), error_type=type(e).__name__)
            return {
                "status": "unhealthy",
                "details": {**details, "error": str(e) or type(e).__name__},
            }

        return {
            "status": "healthy",
            "details": {**details, "test_response": (response.content or "")[:50]},
        }
