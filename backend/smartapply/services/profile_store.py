"""Profile store and persisted snapshot.

ProfileStore is the in-process application state for one workspace: the
current enhanced profile plus the latest roadmap result. Writes are
mirrored into the ``career-mentor-store`` snapshot in client storage, a
flat JSON object::

    {"profile": {...}, "enhancedProfile": {...}, "results": {...}, ...}

Unknown top-level keys in the snapshot are preserved on write.

Snapshot reads are defensive: malformed JSON or a non-object payload is
logged and treated as absent. Profile fields that fail validation fall back
to their defaults one by one, so a bad gamification value never hides the
rest of the record.
"""

import json
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import ValidationError

from smartapply.core.storage import PROFILE_SNAPSHOT_KEY, ClientStorage
from smartapply.schemas.profile import EnhancedProfile
from smartapply.schemas.roadmap import CareerRecommendation

logger = structlog.get_logger()

ENHANCED_PROFILE_FIELD = "enhancedProfile"
RESULTS_FIELD = "results"


# =============================================================================
# Snapshot I/O
# =============================================================================


def read_snapshot(storage: ClientStorage) -> dict[str, Any]:
    """Parse the persisted snapshot, or return {} when absent or unreadable."""
    raw = storage.get_item(PROFILE_SNAPSHOT_KEY)
    if raw is None:
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("profile_snapshot_unreadable", reason="invalid_json", error=str(e))
        return {}
    if not isinstance(parsed, dict):
        logger.warning(
            "profile_snapshot_unreadable",
            reason="not_an_object",
            payload_type=type(parsed).__name__,
        )
        return {}
    return parsed


def write_snapshot(storage: ClientStorage, snapshot: dict[str, Any]) -> None:
    storage.set_item(PROFILE_SNAPSHOT_KEY, json.dumps(snapshot))


def load_snapshot_profile(storage: ClientStorage) -> EnhancedProfile | None:
    """Return the validated enhanced profile from the snapshot, if any."""
    data = read_snapshot(storage).get(ENHANCED_PROFILE_FIELD)
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning(
            "profile_snapshot_unreadable",
            reason="profile_not_an_object",
            payload_type=type(data).__name__,
        )
        return None
    try:
        return EnhancedProfile.model_validate(data)
    except ValidationError as e:
        invalid = _invalid_field_keys(e)
        logger.warning(
            "profile_snapshot_fields_defaulted",
            fields=sorted(invalid),
            error_count=e.error_count(),
        )

    try:
        return EnhancedProfile.model_validate(
            {key: value for key, value in data.items() if key not in invalid}
        )
    except ValidationError as e:
        logger.warning(
            "profile_snapshot_unreadable",
            reason="profile_invalid",
            error_count=e.error_count(),
        )
        return None


def _invalid_field_keys(error: ValidationError) -> set[str]:
    """Top-level snapshot keys (alias and field name) named by a validation error."""
    keys: set[str] = set()
    for detail in error.errors():
        if not detail["loc"]:
            continue
        key = str(detail["loc"][0])
        keys.add(key)
        for name, field in EnhancedProfile.model_fields.items():
            if key in (name, field.alias):
                keys.update({name, field.alias or name})
    return keys


# =============================================================================
# Store
# =============================================================================


class ProfileStore:
    """Holds the current enhanced profile for a workspace.

    Args:
        storage: Client storage receiving the snapshot on every write.
            None keeps the store purely in memory.
    """

    def __init__(self, storage: ClientStorage | None = None) -> None:
        self._storage = storage
        self._profile: EnhancedProfile | None = None
        self._results: CareerRecommendation | None = None

    def get_profile(self) -> EnhancedProfile | None:
        return self._profile

    def get_results(self) -> CareerRecommendation | None:
        return self._results

    def set_profile(self, profile: EnhancedProfile) -> None:
        now = datetime.now(UTC)
        changes: dict[str, Any] = {"updated_at": now}
        if profile.created_at is None:
            changes["created_at"] = now
        self._profile = profile.model_copy(update=changes)
        self.persist()

    def update_profile(self, changes: dict[str, Any]) -> EnhancedProfile:
        """Apply field changes (snake_case names), creating the profile if needed."""
        current = self._profile or EnhancedProfile()
        merged = current.model_dump()
        merged.update(changes)
        updated = EnhancedProfile.model_validate(merged)
        self.set_profile(updated)
        return self._profile  # type: ignore[return-value]

    def add_recommendation(self, recommendation: CareerRecommendation) -> EnhancedProfile:
        """Record a roadmap as the latest result and append it to the profile."""
        self._results = recommendation
        current = self._profile or EnhancedProfile()
        recommendations = [*current.career_recommendations, recommendation.to_client_dict()]
        return self.update_profile({"career_recommendations": recommendations})

    def clear(self) -> None:
        """Forget in-memory state. The snapshot is left untouched."""
        self._profile = None
        self._results = None

    def rehydrate_from_snapshot(self) -> bool:
        """Load the profile and latest result from the snapshot.

        Returns:
            True if a valid profile was loaded.
        """
        if self._storage is None:
            return False
        profile = load_snapshot_profile(self._storage)
        if profile is None:
            return False
        self._profile = profile

        results = read_snapshot(self._storage).get(RESULTS_FIELD)
        if isinstance(results, dict):
            try:
                self._results = CareerRecommendation.model_validate(results)
            except ValidationError:
                logger.warning("profile_snapshot_results_invalid")
        logger.info("profile_store_rehydrated", has_results=self._results is not None)
        return True

    def persist(self) -> None:
        """Write current state into the snapshot, keeping unrelated keys."""
        if self._storage is None:
            return
        snapshot = read_snapshot(self._storage)
        snapshot[ENHANCED_PROFILE_FIELD] = (
            self._profile.to_storage_dict() if self._profile else None
        )
        snapshot[RESULTS_FIELD] = self._results.to_client_dict() if self._results else None
        write_snapshot(self._storage, snapshot)
