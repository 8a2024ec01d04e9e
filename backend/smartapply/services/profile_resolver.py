"""Multi-source profile resolution.

Finds the first complete profile available to a workspace, checking the
live store before the persisted snapshot. The snapshot can be ahead of the
store, e.g. right after a page reload when the store has not been
rehydrated yet.

Resolution never writes: rehydrating the store is the sign-in flow's job.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from smartapply.core.storage import ClientStorage
from smartapply.schemas.profile import EnhancedProfile
from smartapply.services.profile_completeness import is_profile_complete
from smartapply.services.profile_store import ProfileStore, load_snapshot_profile

logger = structlog.get_logger()


class ProfileSource(Enum):
    STORE = "store"
    PERSISTED = "persisted"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedProfile:
    profile: EnhancedProfile | None
    source: ProfileSource

    @property
    def is_complete(self) -> bool:
        return self.source is not ProfileSource.NONE


class ProfileResolver:
    """Resolve a complete profile from store, then snapshot.

    Args:
        store: Live profile store.
        storage: Client storage holding the persisted snapshot.
    """

    def __init__(self, store: ProfileStore, storage: ClientStorage) -> None:
        self._store = store
        self._storage = storage

    def resolve(self) -> ResolvedProfile:
        """Return the first complete profile and where it came from.

        Order: store, persisted snapshot, none. Incomplete profiles are
        skipped; unreadable snapshots count as absent.
        """
        store_profile = self._store.get_profile()
        if is_profile_complete(store_profile):
            return ResolvedProfile(store_profile, ProfileSource.STORE)

        persisted = load_snapshot_profile(self._storage)
        if is_profile_complete(persisted):
            logger.debug("profile_resolved_from_snapshot")
            return ResolvedProfile(persisted, ProfileSource.PERSISTED)

        return ResolvedProfile(None, ProfileSource.NONE)
