"""whenthen — Structured logging configuration.

Uses structlog for structured, levelled logging with consistent key names
across all layers.  All log entries include:
    - timestamp (ISO-8601)
    - level
    - module (Python logger name)
    - rule_id / label (bound via context variables when available)

The activity log (the user-facing run history of installs, registrations and
failures) is the same event stream written to a second file handler.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

_ctx_rule_id: ContextVar[str | None] = ContextVar("rule_id", default=None)
_ctx_label: ContextVar[str | None] = ContextVar("label", default=None)


def bind_rule_context(rule_id: str | None = None, label: str | None = None) -> None:
    """Bind the rule being operated on to the current thread."""
    if rule_id is not None:
        _ctx_rule_id.set(rule_id)
    if label is not None:
        _ctx_label.set(label)


def clear_rule_context() -> None:
    _ctx_rule_id.set(None)
    _ctx_label.set(None)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (rule_id := _ctx_rule_id.get()) is not None:
        event_dict.setdefault("rule_id", rule_id)
    if (label := _ctx_label.get()) is not None:
        event_dict.setdefault("label", label)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | Path | None = None,
    activity_log: str | Path | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Call once at CLI startup, before any log statements.

    Args:
        level:        One of debug, info, warning, error, critical.
        format:       ``"console"`` for human-readable output, ``"json"`` for
                      machine-readable structured logs.
        log_file:     Optional path to write logs to in addition to stderr.
        activity_log: Optional path of the activity log.  Always rendered as
                      JSON lines so it can be tailed and parsed.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    # stdout belongs to the CLI's tables and JSON output.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if activity_log:
        Path(activity_log).parent.mkdir(parents=True, exist_ok=True)
        activity_handler = logging.FileHandler(activity_log)
        activity_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared_processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(activity_handler)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level.upper())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.info("unit_registered", label="io.whenthen.open-apps.on-login.a3f8b2c1")
    """
    return structlog.get_logger(name)
