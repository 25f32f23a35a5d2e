"""
Structured logging for the Marty control plane.

Every module logs through ``get_logger`` with key/value context. Operations
such as endpoint location run inside a ``RequestLogger`` scope, which tags
their records with a correlation id.

``setup_logging`` is for the embedding application: it routes structlog
events into stdlib ``logging``, rendered as JSON by python-json-logger or as
console text.
"""

import contextvars
import logging
import logging.config
import time
import uuid
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from ..config import LoggingConfig
from ..exceptions import ConfigurationError

correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def add_correlation_id(logger, method_name, event_dict):
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict


def _service_fields(service_name: str, service_version: str):
    def add_service_fields(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("version", service_version)
        return event_dict

    return add_service_fields


def setup_logging(
    config: Optional[LoggingConfig] = None, service_version: Optional[str] = None
) -> None:
    """Configure structlog and the root stdlib logger from ``config``.

    Raises ``ConfigurationError`` when the handlers cannot be installed, for
    example when the log file cannot be opened.
    """
    config = config or LoggingConfig()
    if service_version is None:
        from .. import __version__ as service_version

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_correlation_id,
        _service_fields(config.service_name, service_version),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.format == "json":
        # Event context travels as ``extra`` and is rendered by JsonFormatter
        processors.append(structlog.stdlib.render_to_log_kwargs)
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: dict[str, dict[str, Any]] = {
        "console": {"class": "logging.StreamHandler", "formatter": config.format},
    }
    if config.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": config.format,
            "filename": config.log_file,
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUPS,
        }

    try:
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": jsonlogger.JsonFormatter,
                        "format": "%(message)s",
                        "rename_fields": {"message": "event"},
                    },
                    "console": {"format": "%(message)s"},
                },
                "handlers": handlers,
                "root": {"handlers": list(handlers), "level": config.level.value},
            }
        )
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        raise ConfigurationError(f"Failed to configure logging: {e}")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation id of the current context, generating one if None."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def clear_context() -> None:
    correlation_id_var.set(None)


class RequestLogger:
    """Operation scope: logs start, completion or failure with a duration.

    The scope reuses the caller's correlation id when one is set and
    restores the previous value on exit. Exceptions propagate.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        correlation_id: Optional[str] = None,
        **context: Any,
    ):
        self.logger = logger.bind(operation=operation, **context)
        self.operation = operation
        self.correlation_id = correlation_id
        self._started: float | None = None
        self._token: contextvars.Token | None = None

    def __enter__(self) -> "RequestLogger":
        self._started = time.monotonic()
        correlation_id = (
            self.correlation_id or get_correlation_id() or str(uuid.uuid4())
        )
        self._token = correlation_id_var.set(correlation_id)
        self.logger.debug("Operation started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration_ms = round((time.monotonic() - (self._started or 0)) * 1000, 2)
        if exc_type is None:
            self.logger.debug("Operation completed", duration_ms=duration_ms)
        else:
            self.logger.warning(
                "Operation failed",
                duration_ms=duration_ms,
                error_type=exc_type.__name__,
                error=str(exc_val),
            )
        if self._token is not None:
            correlation_id_var.reset(self._token)
            self._token = None


__all__ = [
    "RequestLogger",
    "add_correlation_id",
    "clear_context",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "setup_logging",
]
