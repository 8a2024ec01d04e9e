"""Navigation guard for protected and admin routes.

decide_navigation() and decide_admin_navigation() are pure functions of
their inputs. RouteGuard wires them to a session checker and a profile
resolver, and maps collaborator failures to the most conservative answer:
a failing session check means "not signed in", a failing profile lookup
means "profile incomplete".

Outcome table for protected routes:

    not signed in                                -> redirect /signin
    incomplete, profile required or /dashboard   -> redirect /assessment
    incomplete, otherwise                        -> render
    complete, /assessment                        -> redirect /dashboard
    complete, otherwise                          -> render
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import structlog

from smartapply.services.profile_resolver import ProfileResolver

logger = structlog.get_logger()

SIGNIN_PATH = "/signin"
ASSESSMENT_PATH = "/assessment"
DASHBOARD_PATH = "/dashboard"


class NavigationOutcome(Enum):
    RENDER = "render"
    REDIRECT = "redirect"


class RouteKind(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PROFILE_REQUIRED = "profile_required"
    ADMIN = "admin"


@dataclass(frozen=True)
class NavigationDecision:
    outcome: NavigationOutcome
    path: str
    redirect_to: str | None = None
    reason: str = ""

    @property
    def is_redirect(self) -> bool:
        return self.outcome is NavigationOutcome.REDIRECT

    @classmethod
    def render(cls, path: str, reason: str) -> "NavigationDecision":
        return cls(NavigationOutcome.RENDER, path, None, reason)

    @classmethod
    def redirect(cls, path: str, target: str, reason: str) -> "NavigationDecision":
        return cls(NavigationOutcome.REDIRECT, path, target, reason)


# =============================================================================
# Route Table
# =============================================================================

ROUTES: dict[str, RouteKind] = {
    # Public
    "/": RouteKind.PUBLIC,
    "/signin": RouteKind.PUBLIC,
    "/signup": RouteKind.PUBLIC,
    "/details": RouteKind.PUBLIC,
    "/career-dashboard": RouteKind.PUBLIC,
    "/career-details/:id": RouteKind.PUBLIC,
    "/career-path-generator": RouteKind.PUBLIC,
    "/learning-roadmap": RouteKind.PUBLIC,
    "/platform-links-demo": RouteKind.PUBLIC,
    "/results": RouteKind.PUBLIC,
    # Signed in
    "/profile": RouteKind.PROTECTED,
    "/assessment": RouteKind.PROTECTED,
    "/achievements": RouteKind.PROTECTED,
    "/resume-upload": RouteKind.PROTECTED,
    "/resume-analysis/:id": RouteKind.PROTECTED,
    # Signed in with a complete profile
    "/dashboard": RouteKind.PROFILE_REQUIRED,
    "/progress-dashboard": RouteKind.PROFILE_REQUIRED,
    "/learning-resources": RouteKind.PROFILE_REQUIRED,
    # Admin
    "/admin": RouteKind.ADMIN,
    "/admin/users": RouteKind.ADMIN,
    "/admin/careers": RouteKind.ADMIN,
    "/admin/analytics": RouteKind.ADMIN,
}


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    segments = [
        "[^/]+" if segment.startswith(":") else re.escape(segment)
        for segment in pattern.split("/")
    ]
    return re.compile("^" + "/".join(segments) + "$")


_COMPILED_ROUTES: list[tuple[re.Pattern[str], RouteKind]] = [
    (_compile_pattern(pattern), kind) for pattern, kind in ROUTES.items()
]


def normalize_path(path: str) -> str:
    """Strip query string, fragment and trailing slash."""
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def route_kind(path: str) -> RouteKind:
    """Classify a path. Unknown paths are public (landing page catch-all)."""
    normalized = normalize_path(path)
    for pattern, kind in _COMPILED_ROUTES:
        if pattern.match(normalized):
            return kind
    return RouteKind.PUBLIC


# =============================================================================
# Decisions
# =============================================================================


def decide_navigation(
    is_authenticated: bool,
    profile_complete: bool,
    path: str,
    requires_profile: bool,
) -> NavigationDecision:
    """Decide a protected navigation from session and profile state."""
    if not is_authenticated:
        return NavigationDecision.redirect(path, SIGNIN_PATH, "authentication_required")

    if not profile_complete:
        if requires_profile or path == DASHBOARD_PATH:
            return NavigationDecision.redirect(path, ASSESSMENT_PATH, "profile_required")
        return NavigationDecision.render(path, "profile_not_required")

    if path == ASSESSMENT_PATH:
        return NavigationDecision.redirect(path, DASHBOARD_PATH, "assessment_completed")
    return NavigationDecision.render(path, "access_granted")


def decide_admin_navigation(
    is_authenticated: bool,
    is_admin: bool,
    path: str = "/admin",
) -> NavigationDecision:
    """Admin routes need a session and admin access; anything else goes to sign-in."""
    if not is_authenticated:
        return NavigationDecision.redirect(path, SIGNIN_PATH, "authentication_required")
    if not is_admin:
        return NavigationDecision.redirect(path, SIGNIN_PATH, "admin_required")
    return NavigationDecision.render(path, "admin_access_granted")


# =============================================================================
# Guard
# =============================================================================


class SessionChecker(Protocol):
    def is_authenticated(self) -> bool: ...

    def is_admin(self) -> bool: ...


class RouteGuard:
    """Evaluate navigations against live session and profile state.

    Args:
        auth: Session checker (usually the workspace AuthService). None
            means there is no session at all.
        resolver: Profile resolver for the same workspace.
    """

    def __init__(self, auth: SessionChecker | None, resolver: ProfileResolver | None) -> None:
        self._auth = auth
        self._resolver = resolver

    def _is_authenticated(self) -> bool:
        if self._auth is None:
            return False
        try:
            return bool(self._auth.is_authenticated())
        except Exception as e:
            logger.warning("session_check_failed", error=str(e), error_type=type(e).__name__)
            return False

    def _is_admin(self) -> bool:
        if self._auth is None:
            return False
        try:
            return bool(self._auth.is_admin())
        except Exception as e:
            logger.warning("admin_check_failed", error=str(e), error_type=type(e).__name__)
            return False

    def _profile_complete(self) -> bool:
        if self._resolver is None:
            return False
        try:
            return self._resolver.resolve().is_complete
        except Exception as e:
            logger.warning("profile_resolution_failed", error=str(e), error_type=type(e).__name__)
            return False

    def check(self, path: str, requires_profile: bool | None = None) -> NavigationDecision:
        """Decide a protected navigation.

        Args:
            path: Requested path.
            requires_profile: Override; None looks it up in the route table.
        """
        normalized = normalize_path(path)
        if requires_profile is None:
            requires_profile = route_kind(normalized) is RouteKind.PROFILE_REQUIRED

        authenticated = self._is_authenticated()
        # The profile is irrelevant without a session
        complete = self._profile_complete() if authenticated else False

        decision = decide_navigation(authenticated, complete, normalized, requires_profile)
        self._log(decision)
        return decision

    def check_admin(self, path: str = "/admin") -> NavigationDecision:
        normalized = normalize_path(path)
        decision = decide_admin_navigation(self._is_authenticated(), self._is_admin(), normalized)
        self._log(decision)
        return decision

    def evaluate_path(self, path: str, requires_profile: bool | None = None) -> NavigationDecision:
        """Decide any navigation, dispatching on the route table.

        Admin paths always go through the admin guard. An explicit
        ``requires_profile`` treats any other path as protected.
        """
        normalized = normalize_path(path)
        kind = route_kind(normalized)
        if kind is RouteKind.ADMIN:
            return self.check_admin(normalized)
        if requires_profile is not None:
            return self.check(normalized, requires_profile=requires_profile)
        if kind is RouteKind.PUBLIC:
            return NavigationDecision.render(normalized, "public_route")
        return self.check(normalized, requires_profile=kind is RouteKind.PROFILE_REQUIRED)

    @staticmethod
    def _log(decision: NavigationDecision) -> None:
        logger.info(
            "navigation_decision",
            path=decision.path,
            outcome=decision.outcome.value,
            redirect_to=decision.redirect_to,
            reason=decision.reason,
        )
