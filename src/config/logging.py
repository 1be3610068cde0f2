"""
structlog setup for the API and the cron entry point.

Development gets the colored console renderer; every other environment emits
one JSON object per line. Push tokens and bearer credentials are masked
before rendering.
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import get_settings

_PUSH_TOKEN = re.compile(r"(ExponentPushToken|ExpoPushToken)\[([^\]]+)\]")
_SENSITIVE_KEYS = frozenset({"token", "authorization", "service_token", "expo_push_token"})
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "uvicorn.access")


def _mask(value: str) -> str:
    return _PUSH_TOKEN.sub(lambda m: f"{m.group(1)}[...{m.group(2)[-4:]}]", value)


def mask_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Hide credentials and push tokens in event values."""
    for key, value in event_dict.items():
        if key in _SENSITIVE_KEYS and value:
            event_dict[key] = "***"
        elif isinstance(value, str) and "PushToken[" in value:
            event_dict[key] = _mask(value)
    return event_dict


def add_service_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("env", settings.environment)
    event_dict.setdefault("org_id", settings.reminders.org_id)
    return event_dict


def configure_logging(log_level: str | None = None) -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = get_settings()
    level = logging.getLevelName(log_level or settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_fields,
        mask_secrets,
    ]
    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_log_context(**values: Any) -> None:
    """Attach values to every event logged by the current task."""
    structlog.contextvars.bind_contextvars(**values)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
