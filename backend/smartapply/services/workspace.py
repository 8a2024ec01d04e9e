"""Per-user workspaces.

A workspace is the server-side stand-in for one browser profile: its own
client storage (session keys plus the persisted profile snapshot) and its
own profile store. Workspaces are keyed by user id, which is the session
token subject.

The registry lives for the process lifetime; nothing is written to disk.
"""

from datetime import timedelta

from smartapply.core.scheduler import Scheduler
from smartapply.core.storage import ClientStorage, InMemoryStorage
from smartapply.services.auth_service import (
    DEFAULT_SESSION_DURATION,
    AuthService,
    CredentialDirectory,
)
from smartapply.services.profile_resolver import ProfileResolver
from smartapply.services.profile_store import ProfileStore
from smartapply.services.route_guard import RouteGuard


class Workspace:
    """Client storage plus profile store for one user.

    Args:
        storage: Starting storage. Defaults to an empty in-memory one.
    """

    def __init__(self, storage: ClientStorage | None = None) -> None:
        self.storage: ClientStorage = storage if storage is not None else InMemoryStorage()
        self.store = ProfileStore(self.storage)

    def auth(
        self,
        directory: CredentialDirectory,
        *,
        secret: str,
        scheduler: Scheduler | None = None,
        session_duration: timedelta = DEFAULT_SESSION_DURATION,
    ) -> AuthService:
        return AuthService(
            self.storage,
            self.store,
            directory,
            secret=secret,
            scheduler=scheduler,
            session_duration=session_duration,
        )

    def resolver(self) -> ProfileResolver:
        return ProfileResolver(self.store, self.storage)

    def guard(self, auth: AuthService | None) -> RouteGuard:
        return RouteGuard(auth, self.resolver())


class WorkspaceRegistry:
    """User id -> Workspace map."""

    def __init__(self) -> None:
        self._workspaces: dict[str, Workspace] = {}

    def get(self, user_id: str) -> Workspace | None:
        return self._workspaces.get(user_id)

    def get_or_create(self, user_id: str) -> Workspace:
        workspace = self._workspaces.get(user_id)
        if workspace is None:
            workspace = Workspace()
            self._workspaces[user_id] = workspace
        return workspace

    def register(self, user_id: str, workspace: Workspace) -> None:
        self._workspaces[user_id] = workspace

    def discard(self, user_id: str) -> None:
        self._workspaces.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._workspaces)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._workspaces
