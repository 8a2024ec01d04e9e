"""Tests for multi-source profile resolution."""

import json

from smartapply.core.storage import PROFILE_SNAPSHOT_KEY
from smartapply.schemas.profile import EnhancedProfile
from smartapply.services.profile_resolver import ProfileResolver, ProfileSource
from smartapply.services.profile_store import ProfileStore


def _persist(storage, profile: dict) -> None:
    storage.set_item(PROFILE_SNAPSHOT_KEY, json.dumps({"enhancedProfile": profile}))


class TestProfileResolver:
    def test_nothing_anywhere(self, storage):
        resolved = ProfileResolver(ProfileStore(), storage).resolve()

        assert resolved.source is ProfileSource.NONE
        assert resolved.profile is None
        assert resolved.is_complete is False

    def test_store_wins_over_snapshot(self, storage):
        store = ProfileStore()
        store.set_profile(EnhancedProfile(career_interest="Nurse"))
        _persist(storage, {"careerInterest": "Teacher"})

        resolved = ProfileResolver(store, storage).resolve()

        assert resolved.source is ProfileSource.STORE
        assert resolved.profile.career_interest == "Nurse"

    def test_incomplete_store_falls_through_to_snapshot(self, storage):
        store = ProfileStore()
        store.set_profile(EnhancedProfile(name="Ada"))
        _persist(storage, {"careerInterest": "Teacher"})

        resolved = ProfileResolver(store, storage).resolve()

        assert resolved.source is ProfileSource.PERSISTED
        assert resolved.profile.career_interest == "Teacher"
        assert resolved.is_complete is True

    def test_incomplete_everywhere(self, storage):
        store = ProfileStore()
        store.set_profile(EnhancedProfile(name="Ada"))
        _persist(storage, {"name": "Ada", "careerRecommendations": []})

        assert ProfileResolver(store, storage).resolve().source is ProfileSource.NONE

    def test_corrupt_snapshot_counts_as_absent(self, storage):
        storage.set_item(PROFILE_SNAPSHOT_KEY, "{{{")

        assert ProfileResolver(ProfileStore(), storage).resolve().source is ProfileSource.NONE

    def test_resolution_never_writes(self, storage):
        store = ProfileStore()
        _persist(storage, {"careerInterest": "Teacher"})
        before = storage.get_item(PROFILE_SNAPSHOT_KEY)

        ProfileResolver(store, storage).resolve()

        assert store.get_profile() is None
        assert storage.get_item(PROFILE_SNAPSHOT_KEY) == before

    def test_null_gamification_fields_keep_snapshot_complete(self, storage):
        _persist(
            storage,
            {"careerRecommendations": [{"title": "x"}], "level": None, "badges": None, "name": None},
        )

        resolved = ProfileResolver(ProfileStore(), storage).resolve()

        assert resolved.source is ProfileSource.PERSISTED
        assert resolved.is_complete is True

    def test_plain_string_recommendations_count(self, storage):
        _persist(storage, {"careerRecommendations": ["Data Scientist"]})

        resolved = ProfileResolver(ProfileStore(), storage).resolve()

        assert resolved.source is ProfileSource.PERSISTED
        assert resolved.profile.career_recommendations == ["Data Scientist"]
