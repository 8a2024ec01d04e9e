"""Session token helpers: JWT creation, decoding and cookie management.

Shared by the authentication service (token issuance at sign-in), the API
dependencies (cookie validation) and the rate limiter (per-user keying).

Pipeline:
- create_jwt: signed HS256 token with sub/role/aud/iss/exp/iat claims
- decode_jwt: verified claims or jwt.InvalidTokenError
- set_auth_cookie / clear_auth_cookie: httpOnly session cookie
- DUMMY_HASH: timing-safe constant for unknown-user password checks
"""

from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Response

from smartapply.core.config import settings

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"

_ALGORITHM = "HS256"


def session_lifetime() -> timedelta:
    """Return the configured session lifetime (10 days by default)."""
    return timedelta(days=settings.session_duration_days)


def create_jwt(
    *,
    user_id: str,
    role: str,
    secret: str,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Create a signed session token.

    Args:
        user_id: Subject identifier (the workspace owner).
        role: "admin" or "user"; read by the admin check.
        secret: HMAC signing secret.
        expires_delta: Time until expiration. Defaults to the session lifetime.
        now: Issue time override for deterministic tests.

    Returns:
        Encoded JWT string.
    """
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role,
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": issued_at + (expires_delta or session_lifetime()),
        "iat": issued_at,
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def decode_jwt(token: str, secret: str) -> dict:
    """Verify a session token and return its claims.

    Raises:
        jwt.InvalidTokenError: Bad signature, expired, wrong audience/issuer.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[_ALGORITHM],
        audience=settings.auth_audience,
        issuer=settings.auth_issuer,
    )


def set_auth_cookie(response: Response, token: str) -> None:
    """Set httpOnly JWT cookie on response.

    Security: httpOnly prevents XSS cookie theft. Secure flag and SameSite
    are configured via settings for environment-appropriate security.
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=int(session_lifetime().total_seconds()),
    )


def clear_auth_cookie(response: Response) -> None:
    """Expire the session cookie."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite=settings.auth_cookie_samesite,
    )
