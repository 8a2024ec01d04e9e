"""Structured logging setup.

Configures structlog once at application start. Modules obtain loggers
with ``structlog.get_logger()`` and log an event name plus keyword
context, e.g. ``logger.info("roadmap_cache_hit", key=key)``.

Renderer is chosen by ``settings.log_json``: JSON lines for deployed
environments, the colored console renderer for local development.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from smartapply.core.config import settings

_MASK = "***MASKED***"
_SENSITIVE_FIELDS = ("password", "api_key", "token", "secret", "credential")


def mask_credentials(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace values of credential-like keys with a mask.

    Matches exact names and underscore/hyphen-delimited variants
    (``auth_token``, ``api_key-id``) so fields like ``tokens_used`` survive.
    """
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in _SENSITIVE_FIELDS:
            if (
                key_lower == sensitive
                or key_lower.endswith((f"_{sensitive}", f"-{sensitive}"))
                or key_lower.startswith((f"{sensitive}_", f"{sensitive}-"))
            ):
                event_dict[key] = _MASK
                break
    return event_dict


def configure_logging(log_level: str | None = None, json: bool | None = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        log_level: Level name; defaults to settings.log_level.
        json: Render JSON lines; defaults to settings.log_json.
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    use_json = settings.log_json if json is None else json

    logging.basicConfig(
        format="%(message)s",
        level=level,
        stream=sys.stdout,
    )

    # ConsoleRenderer formats exceptions itself
    renderers: list[structlog.types.Processor]
    if use_json:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            mask_credentials,
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
