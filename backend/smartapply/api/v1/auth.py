"""Authentication endpoints.

Sign-in, sign-up, sign-out and session introspection.

Security considerations:
- login: unknown usernames still run a bcrypt comparison (no user enumeration)
- login/signup: rate limited per IP, session token in an httpOnly cookie
- logout: requires an explicit confirmation, clears the whole workspace
"""

from typing import NoReturn

from fastapi import APIRouter, Request, Response

from smartapply.api.deps import (
    DirectoryDep,
    OptionalSession,
    SchedulerDep,
    WorkspaceRegistryDep,
    build_auth_service,
)
from smartapply.core.auth import clear_auth_cookie, set_auth_cookie
from smartapply.core.errors import ConflictError, UnauthorizedError, ValidationError
from smartapply.core.rate_limiting import limiter
from smartapply.core.responses import DataResponse
from smartapply.schemas.auth import (
    AuthResultResponse,
    LoginRequest,
    LogoutRequest,
    SessionResponse,
    SignupRequest,
    UserInfo,
)
from smartapply.services.auth_service import AuthResult, Credentials, User
from smartapply.services.workspace import Workspace

router = APIRouter()


def _user_info(user: User) -> UserInfo:
    return UserInfo(id=user.id, username=user.username, access_level=user.access_level)


def _raise_for_failure(result: AuthResult, *, username_taken: bool = False) -> NoReturn:
    """Map a failed AuthResult to an API error."""
    if result.errors:
        raise ValidationError(
            result.message or "Validation failed",
            details=[{"message": error} for error in result.errors],
        )
    if username_taken:
        raise ConflictError(code="USERNAME_TAKEN", message=result.message or "Username taken")
    raise UnauthorizedError(result.message or "Invalid username or password")


# ===================================================================
# POST /auth/login
# ===================================================================


@router.post("/login")
@limiter.limit("10/minute")
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    response: Response,
    registry: WorkspaceRegistryDep,
    directory: DirectoryDep,
    scheduler: SchedulerDep,
) -> DataResponse[AuthResultResponse]:
    """Verify credentials, start a session and restore the saved profile.

    The response carries the path to continue to: the page the user was
    bounced from (``redirect_to``) or the dashboard.
    """
    known = directory.find_by_username(body.username)
    # Unknown users get a throwaway workspace so the failure path is identical
    workspace = registry.get_or_create(known.id) if known else Workspace()
    auth = build_auth_service(workspace, directory, scheduler)

    if body.redirect_to:
        auth.set_redirect_path(body.redirect_to)

    result = auth.login(Credentials(username=body.username, password=body.password))
    if not result.success or result.user is None or result.token is None:
        _raise_for_failure(result)

    set_auth_cookie(response, result.token)
    return DataResponse(
        data=AuthResultResponse(
            success=True,
            user=_user_info(result.user),
            message=result.message,
            redirect_path=auth.pop_redirect_path(),
        )
    )


# ===================================================================
# POST /auth/signup
# ===================================================================


@router.post("/signup", status_code=201)
@limiter.limit("5/minute")
async def signup(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: SignupRequest,
    response: Response,
    registry: WorkspaceRegistryDep,
    directory: DirectoryDep,
    scheduler: SchedulerDep,
) -> DataResponse[AuthResultResponse]:
    """Create an account and start a session with an empty profile.

    New accounts have no profile yet, so the client continues to the
    assessment.
    """
    workspace = Workspace()
    auth = build_auth_service(workspace, directory, scheduler)

    result = auth.sign_up(
        Credentials(
            username=body.username,
            password=body.password,
            confirm=body.confirm_password,
        )
    )
    if not result.success or result.user is None or result.token is None:
        _raise_for_failure(result, username_taken=body.username in directory)

    registry.register(result.user.id, workspace)
    set_auth_cookie(response, result.token)
    return DataResponse(
        data=AuthResultResponse(
            success=True,
            user=_user_info(result.user),
            message=result.message,
            redirect_path="/assessment",
        )
    )


# ===================================================================
# POST /auth/logout
# ===================================================================


@router.post("/logout")
async def logout(
    body: LogoutRequest,
    response: Response,
    session: OptionalSession,
    registry: WorkspaceRegistryDep,
) -> DataResponse[dict]:
    """Sign out after the client confirmed the prompt.

    A declined confirmation changes nothing. A confirmed one clears the
    workspace (session keys, profile store and saved snapshot) and the
    cookie. Calling without a live session only clears the cookie.
    """
    if session is None:
        if body.confirm:
            clear_auth_cookie(response)
        return DataResponse(data={"logged_out": body.confirm})

    logged_out = session.auth.logout(lambda _prompt: body.confirm)
    if logged_out:
        registry.discard(session.user_id)
        clear_auth_cookie(response)
    return DataResponse(data={"logged_out": logged_out})


# ===================================================================
# GET /auth/session
# ===================================================================


@router.get("/session")
async def get_session(session: OptionalSession) -> DataResponse[SessionResponse]:
    """Report whether the caller has a live session, and who they are."""
    if session is None:
        return DataResponse(data=SessionResponse(authenticated=False))

    info = session.auth.session_info()
    user = info["user"]
    return DataResponse(
        data=SessionResponse(
            authenticated=info["authenticated"],
            user=_user_info(user) if user else None,
            is_admin=info["is_admin"],
            expires_at=info["expires_at"],
        )
    )
