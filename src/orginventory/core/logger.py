"""Project wide structured logger configuration.

Every command line entry point configures logging through
:func:`configure_logging` so that all components emit the same structured
records.  Events are rendered either as JSON or as ``key=value`` pairs and
always carry a UTC timestamp and the bound inventory context (``run_id``,
``org``, ``command``, ``component``).
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Final, cast

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.exceptions import DropEvent
from structlog.stdlib import BoundLogger

__all__ = [
    "LogFormat",
    "LogConfig",
    "CONTEXT_FIELDS",
    "configure_logging",
    "UnifiedLogger",
]


class LogFormat(str, Enum):
    """Supported output formats for the renderer."""

    JSON = "json"
    KEY_VALUE = "key_value"


CONTEXT_FIELDS: Sequence[str] = (
    "run_id",
    "org",
    "command",
    "component",
)
"""Fields expected on every event; absent ones are reported under ``missing_context``."""

_DEFAULT_LOGGER_NAME: Final[str] = "orginventory"
_LOG_METHOD_TO_LEVEL: Mapping[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "exception": logging.ERROR,
    "fatal": logging.CRITICAL,
}

_KEY_ORDER: Sequence[str] = (
    "timestamp",
    "level",
    "command",
    "org",
    "component",
    "run_id",
    "message",
)


@dataclass(frozen=True, slots=True)
class LogConfig:
    """User configurable logging parameters."""

    level: int | str = logging.INFO
    format: LogFormat = LogFormat.JSON
    redact_fields: Sequence[str] = ("access_token", "authorization", "password")


def _coerce_log_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    mapped_level = logging.getLevelNamesMapping().get(level.upper())
    if isinstance(mapped_level, int):
        return mapped_level
    raise ValueError(f"Unsupported log level: {level}")


def _redact_sensitive_values(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
    *,
    redact_fields: Iterable[str],
) -> MutableMapping[str, Any]:
    for field in redact_fields:
        if field in event_dict:
            event_dict[field] = "***REDACTED***"
    return event_dict


def _report_missing_context(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    missing = [field for field in CONTEXT_FIELDS if field not in event_dict]
    if missing:
        event_dict.setdefault("missing_context", missing)
    return event_dict


def _shared_processors(config: LogConfig) -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _report_missing_context,
        structlog.processors.EventRenamer("message"),
        partial(
            _redact_sensitive_values,
            redact_fields=config.redact_fields,
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer_for(format: LogFormat) -> Any:
    if format is LogFormat.KEY_VALUE:
        return structlog.processors.KeyValueRenderer(
            key_order=_KEY_ORDER,
            sort_keys=False,
            drop_missing=True,
        )
    return structlog.processors.JSONRenderer(sort_keys=True, ensure_ascii=False)


def _safe_filter_by_level(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Drop events that do not satisfy the active logging level."""

    effective_logger = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)
    level = _LOG_METHOD_TO_LEVEL.get(method_name.lower(), logging.INFO)
    if effective_logger.isEnabledFor(level):
        return event_dict
    raise DropEvent


def configure_logging(config: LogConfig | None = None) -> None:
    """Initialise logging based on the supplied configuration."""

    cfg = config or LogConfig()
    shared_processors = _shared_processors(cfg)
    renderer = _renderer_for(cfg.format)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*shared_processors, _safe_filter_by_level],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logging.basicConfig(handlers=[handler], level=_coerce_log_level(cfg.level), force=True)

    structlog.configure(
        processors=[
            *shared_processors,
            _safe_filter_by_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class UnifiedLogger:
    """Facade that exposes a minimal, documented logging API."""

    _default_logger_name = _DEFAULT_LOGGER_NAME

    @staticmethod
    def configure(config: LogConfig | None = None) -> None:
        """Configure the underlying structured logger."""

        configure_logging(config)

    @staticmethod
    def get(name: str | None = None) -> BoundLogger:
        """Return a configured bound logger."""

        logger = structlog.get_logger(name or UnifiedLogger._default_logger_name)
        return cast(BoundLogger, logger)

    @staticmethod
    def bind(**context: Any) -> None:
        """Bind context that should be included with all subsequent log events."""

        bind_contextvars(**context)

    @staticmethod
    def reset() -> None:
        """Reset all bound context variables."""

        clear_contextvars()
