"""
Structured logging for Codiro.

Log events are snake_case names with keyword fields. Context bound with
`bind_context` (request id, user id, GitHub id) is merged into every entry
emitted while handling the same request. Credentials never reach the
output: fields carrying tokens, OAuth codes or client secrets are masked
by `redact_credentials` before rendering.
"""

import logging
import sys
import time
from collections.abc import Callable, MutableMapping
from functools import lru_cache, wraps
from typing import Any, TypeVar

import structlog
from structlog.types import Processor

F = TypeVar("F", bound=Callable[..., Any])

REDACTED = "[redacted]"

# Field names whose values are bearer credentials or one-time secrets
CREDENTIAL_FIELDS = frozenset(
    {
        "access_token",
        "refresh_token",
        "state",
        "code",
        "client_secret",
        "jwt_secret_key",
        "authorization",
    }
)


def redact_credentials(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential-bearing fields, leaving empty values visible as such."""
    for key in CREDENTIAL_FIELDS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _tag_service(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict["app"] = "codiro"
    return event_dict


def _use_console_renderer() -> bool:
    from .config import get_settings

    settings = get_settings()
    return settings.debug or not settings.is_production


def get_processors() -> list[Processor]:
    """Processor chain: context, redaction, then a console or JSON renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_credentials,
        _tag_service,
    ]

    if _use_console_renderer():
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return processors


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging on stdout. Runs once per process."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every entry logged for the rest of the request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind fields for the duration of a block only.

        with LogContext(github_id=profile.id):
            UserRepository(db).upsert_from_provider(profile)
    """

    def __init__(self, **kwargs: Any):
        self.fields = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        structlog.contextvars.unbind_contextvars(*self.fields)
        return False


def log_timing(
    operation: str, logger: structlog.stdlib.BoundLogger | None = None
) -> Callable[[F], F]:
    """
    Log how long a call to an external system took, and whether it failed.

    Emits `operation_complete` or `operation_failed` with `duration_ms`;
    exceptions are re-raised unchanged.
    """

    def decorator(func: F) -> F:
        log = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.warning(
                    "operation_failed",
                    operation=operation,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                    error_type=type(e).__name__,
                )
                raise
            log.info(
                "operation_complete",
                operation=operation,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = [
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_timing",
    "redact_credentials",
]
