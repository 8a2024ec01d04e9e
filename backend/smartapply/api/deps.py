"""Shared dependencies for API endpoints.

Session resolution: the httpOnly cookie carries the session token, the
token subject names the user's workspace, and the workspace's own storage
decides whether the session is still live (ten-day expiry, logout).

App-wide singletons (workspace registry, credential directory, roadmap
service, scheduler) live on ``app.state`` and are created in main.py.
"""

from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status

from smartapply.core.auth import decode_jwt, session_lifetime
from smartapply.core.config import settings
from smartapply.core.errors import AdminRequiredError
from smartapply.core.scheduler import Scheduler
from smartapply.services.auth_service import AuthService, CredentialDirectory
from smartapply.services.roadmap_generation import RoadmapService
from smartapply.services.workspace import Workspace, WorkspaceRegistry

# Generic 401 detail. Never say why the session was rejected.
_UNAUTHORIZED_DETAIL = {
    "code": "UNAUTHORIZED",
    "message": "Authentication required",
}


# =============================================================================
# App singletons
# =============================================================================


def get_workspace_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.workspaces


def get_credential_directory(request: Request) -> CredentialDirectory:
    return request.app.state.credentials


def get_roadmap_service(request: Request) -> RoadmapService:
    return request.app.state.roadmap_service


def get_scheduler(request: Request) -> Scheduler:
    return request.app.state.scheduler


WorkspaceRegistryDep = Annotated[WorkspaceRegistry, Depends(get_workspace_registry)]
DirectoryDep = Annotated[CredentialDirectory, Depends(get_credential_directory)]
RoadmapServiceDep = Annotated[RoadmapService, Depends(get_roadmap_service)]
SchedulerDep = Annotated[Scheduler, Depends(get_scheduler)]


def build_auth_service(
    workspace: Workspace,
    directory: CredentialDirectory,
    scheduler: Scheduler,
) -> AuthService:
    """AuthService bound to a workspace with the configured secret and lifetime."""
    return workspace.auth(
        directory,
        secret=settings.auth_secret.get_secret_value(),
        scheduler=scheduler,
        session_duration=session_lifetime(),
    )


# =============================================================================
# Session
# =============================================================================


@dataclass
class Session:
    """A live session: who is calling and the workspace they own."""

    user_id: str
    workspace: Workspace
    auth: AuthService


def _read_subject(request: Request) -> tuple[str, str] | None:
    """Return (token, subject) from a valid session cookie, else None."""
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        return None
    try:
        payload = decode_jwt(token, settings.auth_secret.get_secret_value())
    except jwt.InvalidTokenError:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return token, subject


async def get_optional_session(
    request: Request,
    registry: WorkspaceRegistryDep,
    directory: DirectoryDep,
    scheduler: SchedulerDep,
) -> Session | None:
    """Resolve the caller's session, or None when there is none.

    Validation steps:
    1. Read and verify the session cookie (signature, exp, aud, iss)
    2. Find the workspace named by the token subject
    3. Require the token to be the one the workspace issued last
    4. Ask the workspace whether the session is still live

    Step 4 clears an expired session from the workspace as a side effect.
    """
    found = _read_subject(request)
    if found is None:
        return None
    token, subject = found

    workspace = registry.get(subject)
    if workspace is None:
        return None

    auth = build_auth_service(workspace, directory, scheduler)
    if auth.get_stored_token() != token:
        return None
    if not auth.is_authenticated():
        return None
    return Session(user_id=subject, workspace=workspace, auth=auth)


async def get_current_session(
    session: Annotated[Session | None, Depends(get_optional_session)],
) -> Session:
    """Require a live session.

    Raises:
        HTTPException: 401 for any session failure.
    """
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_UNAUTHORIZED_DETAIL,
        )
    return session


OptionalSession = Annotated[Session | None, Depends(get_optional_session)]
CurrentSession = Annotated[Session, Depends(get_current_session)]


async def require_admin(session: CurrentSession) -> Session:
    """Require a live session whose user has the Admin access level.

    Raises:
        HTTPException: 401 if there is no session.
        AdminRequiredError: 403 if the user is not an admin.
    """
    if not session.auth.is_admin():
        raise AdminRequiredError()
    return session


AdminSession = Annotated[Session, Depends(require_admin)]
