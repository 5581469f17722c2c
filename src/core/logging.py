"""Loguru based logging setup.

Two output formats are supported:

- **console**: coloured single line records with request context inline,
  used during development.
- **json**: one JSON document per line, used when the service runs behind a
  log collector.

Records emitted through the standard library ``logging`` module (uvicorn,
SQLAlchemy, asyncpg) are routed into Loguru so every line shares one format
and carries the same request context.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any, Final, Protocol, cast

import orjson
from loguru import logger

from src.core.constants import REDACTED
from src.core.config import get_settings

type LogRecord = dict[str, Any]
type Formatter = Callable[[LogRecord], str]


class _LoggingState:
    """Tracks whether logging has been configured for this process."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...

    @property
    def enable_sql_logging(self) -> bool:
        """Whether SQLAlchemy engine logs are emitted."""
        ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


FALLBACK_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Context keys rendered first, in this order, by the console formatter
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "user_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)

_STATUS_COLOURS: Final[dict[str, str]] = {
    "2": "green",
    "3": "yellow",
    "4": "red",
    "5": "red><bold",
}

_STDLIB_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    vars(logging.makeLogRecord({})).keys() | {"color_message", "message", "taskName"}
)


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    """Render one of the well-known context fields for the console."""
    text = str(value)
    if field == "correlation_id" and len(text) > CORRELATION_ID_DISPLAY_LENGTH:
        text = text[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        text = f"{text}ms"
    elif field == "status_code" and (colour := _STATUS_COLOURS.get(text[:1])):
        closing = "</bold></red>" if "bold" in colour else f"</{colour}>"
        return f"<{colour}>{_escape(text)}{closing}"
    return _escape(text)


def _format_extra_field(key: str, value: object) -> str:
    """Render an arbitrary context field, redacting sensitive names."""
    text = str(value)
    if key.lower() in get_settings().log_config.sensitive_fields:
        text = REDACTED
    elif len(text) > MAX_FIELD_VALUE_LENGTH:
        text = text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(text)}"


def format_console_with_context(record: LogRecord) -> str:
    """Format a record for the console with its context fields inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format template for the record.
    """
    try:
        extra = record.get("extra", {})
        parts = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        context = [
            f"[<yellow>{_format_priority_field(field, extra[field])}</yellow>]"
            for field in PRIORITY_FIELDS
            if extra.get(field) is not None
        ]
        context.extend(
            f"[<dim>{_format_extra_field(key, value)}</dim>]"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        )
        if context:
            parts.append(" ".join(context))

        parts.append(_escape(record.get("message", "")))
        line = " | ".join(parts)
        if record.get("exception"):
            line += "\n{exception}"
    except (AttributeError, TypeError, ValueError, KeyError):
        return FALLBACK_LOG_FORMAT + "\n"
    else:
        return line + "\n"


def serialize_for_json(record: LogRecord) -> str:
    """Serialize a record as a single JSON line.

    Args:
        record: Loguru record to serialize.

    Returns:
        str: JSON document terminated by a newline.
    """
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    entry.update(
        {
            key: value
            for key, value in record.get("extra", {}).items()
            if not key.startswith("_")
        }
    )

    if exc := record.get("exception"):
        entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return orjson.dumps(entry, default=str).decode() + "\n"


LOG_FORMATTERS: dict[str, Formatter | None] = {
    "console": None,
    "json": serialize_for_json,
}


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Re-emit ``record`` through Loguru at the matching level.

        Args:
            record: Standard library record to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so Loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STDLIB_RECORD_FIELDS and not key.startswith("_")
        }
        logger.opt(depth=depth, exception=record.exc_info).bind(**extra).log(
            level, record.getMessage()
        )


def _structured_sink(formatter: Formatter) -> Callable[[Any], None]:
    def sink(message: Any) -> None:  # noqa: ANN401 - loguru Message
        sys.stdout.write(formatter(message.record))
        sys.stdout.flush()

    return sink


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru and hook the standard library into it.

    Calling this more than once is a no-op.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or "console"
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:
        logger.add(
            _structured_sink(formatter),
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.log_config.enable_sql_logging else logging.WARNING
    )

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        formatter_type=formatter_type,
        log_level=settings.log_config.log_level,
    )
    _state.configured = True
