"""Provider error taxonomy.

Adapters map SDK exceptions onto these classes so callers can decide what
to retry without knowing which SDK raised.

Retryable: TransientError, RateLimitError, MalformedResponseError.
Everything else needs configuration or prompt changes first.
"""


__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentFilterError",
    "ContextLengthError",
    "TransientError",
    "MalformedResponseError",
    "RetryCancelledError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    All provider-specific exceptions should inherit from this class,
    allowing callers to catch all provider errors with a single handler.
    """

    pass


class RateLimitError(ProviderError):
    """Rate limit or quota exceeded.

    May carry a retry_after_seconds hint from the provider, which the retry
    helper uses instead of its own backoff.
    """

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        """Initialize RateLimitError.

        Args:
            message: Error description from the provider.
            retry_after_seconds: Optional hint from provider on when to retry.
        """
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ProviderError):
    """Missing, invalid or expired API key. Not retryable."""

    pass


class ContentFilterError(ProviderError):
    """Content blocked by provider's safety filter."""

    pass


class ContextLengthError(ProviderError):
    """Input exceeded model's context window."""

    pass


class TransientError(ProviderError):
    """Temporary failure: connection errors, timeouts, 5xx responses."""

    pass


class MalformedResponseError(ProviderError):
    """Provider answered, but the body is not a usable roadmap.

    Raised when the text contains no JSON object, the JSON does not parse,
    or required top-level fields are missing. Sampling is nondeterministic,
    so a second attempt often succeeds.
    """

    def __init__(self, message: str, raw_content: str | None = None):
        super().__init__(message)
        self.raw_content = raw_content


class RetryCancelledError(ProviderError):
    """Caller cancelled a retry loop before it produced a result."""

    def __init__(self, attempts: int):
        super().__init__(f"Retry cancelled after {attempts} attempt(s)")
        self.attempts = attempts
