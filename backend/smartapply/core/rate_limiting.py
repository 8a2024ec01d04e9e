"""Rate limiting configuration using slowapi.

Security: Prevents API abuse and Gemini quota exhaustion by limiting
request frequency on the roadmap generation endpoints.

Requests carrying a valid session cookie are keyed on the JWT subject
(per-user); anonymous requests fall back to IP-based keying.

Usage in routers:
    from smartapply.core.rate_limiting import limiter

    @router.post("")
    @limiter.limit(lambda: settings.rate_limit_llm)
    async def create_roadmap(request: Request, ...):
        ...
"""

import jwt
from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from smartapply.core.auth import decode_jwt
from smartapply.core.config import settings

# Demo user ids are short slugs; anything longer is not one of ours
_MAX_SUBJECT_LENGTH = 64


def _rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format:
    - valid JWT: "user:{sub}"
    - no/invalid JWT: "unauth:{ip}"
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        try:
            payload = decode_jwt(token, settings.auth_secret.get_secret_value())
            sub = payload["sub"]
            if len(sub) <= _MAX_SUBJECT_LENGTH:
                return f"user:{sub}"
        except (jwt.InvalidTokenError, KeyError, TypeError):
            pass

    return f"unauth:{get_remote_address(request)}"


# In-memory storage, single-instance deployment
limiter = Limiter(
    key_func=_rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Return 429 Too Many Requests with the standard error envelope."""
    # exc.detail looks like "10 per 1 minute"
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Rate limit exceeded: {exc.detail}",
            }
        },
        headers={"Retry-After": retry_after},
    )
