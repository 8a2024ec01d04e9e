"""Profile completeness check.

A profile counts as complete once onboarding produced something the
dashboard can show: at least one career recommendation, or a stated
career interest. Gamification data (level, badges, streaks) never
affects the answer.

This is the only place the rule lives; the resolver, the route guard and
the API all call is_profile_complete().
"""

from collections.abc import Mapping
from typing import Any

from smartapply.schemas.profile import EnhancedProfile

_RECOMMENDATIONS_KEYS = ("careerRecommendations", "career_recommendations")
_INTEREST_KEYS = ("careerInterest", "career_interest")


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """First non-null value among the key spellings."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def is_profile_complete(profile: EnhancedProfile | Mapping[str, Any] | None) -> bool:
    """Return True when onboarding is finished for this profile.

    Accepts a validated EnhancedProfile or a raw mapping (camelCase or
    snake_case keys). Missing, null or wrongly typed fields count as empty;
    this function never raises.

    Args:
        profile: Profile to inspect, or None.

    Returns:
        True iff career recommendations is a non-empty list, or career
        interest is a string that is non-empty after trimming.
    """
    if profile is None:
        return False

    if isinstance(profile, EnhancedProfile):
        recommendations: Any = profile.career_recommendations
        interest: Any = profile.career_interest
    elif isinstance(profile, Mapping):
        recommendations = _first_present(profile, _RECOMMENDATIONS_KEYS)
        interest = _first_present(profile, _INTEREST_KEYS)
    else:
        return False

    if isinstance(recommendations, list) and len(recommendations) > 0:
        return True
    return isinstance(interest, str) and len(interest.strip()) > 0
