"""
Logging configuration for the NetSight Analyzer API.

Provides a single place to configure logging:
- Human-readable console output in development
- Structured JSON records in production
- Optional file-based logging with rotation (LOG_DIR)
- Request IDs attached to every record emitted while serving a request
"""
import json
import logging
import logging.config
import logging.handlers
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, Response

from .config import Settings, settings as default_settings

# Set by the HTTP middleware for the lifetime of one request
_current_request_id: ContextVar[Optional[str]] = ContextVar("netsight_request_id", default=None)


def bind_request_id(request_id: Optional[str] = None) -> Token:
    """Make request_id current for this context; returns the token for reset."""
    return _current_request_id.set(request_id or str(uuid.uuid4()))


def unbind_request_id(token: Token) -> None:
    _current_request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _current_request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamp records with the id of the request being served, or "system"."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = current_request_id() or "system"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record when is_prod, else the plain format."""

    def __init__(self, *args: Any, is_prod: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.is_prod = is_prod

    def format(self, record: logging.LogRecord) -> str:
        if not self.is_prod:
            return super().format(record)

        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or current_request_id() or "system",
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key in ("method", "path", "status_code", "duration_ms"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """Return the dictConfig mapping for the given settings."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }
    }
    root_handlers = ["console"]

    if settings.LOG_DIR:
        logs_dir = Path(settings.LOG_DIR)
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "file",
            "filename": str(logs_dir / "netsight.log"),
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "WARNING",
            "formatter": "file",
            "filename": str(logs_dir / "error.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        root_handlers += ["file", "error_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "netsight.logging.JsonFormatter",
                "fmt": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "is_prod": settings.ENVIRONMENT.lower() == "production",
            },
            "file": {
                "format": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": settings.LOG_LEVEL,
            },
            "uvicorn": {"level": "INFO"},
            "uvicorn.error": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
            "openai": {"level": "WARNING"},
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging for the application."""
    settings = settings or default_settings
    logging.config.dictConfig(build_logging_config(settings))

    request_id_filter = RequestIdFilter()
    for handler in logging.root.handlers:
        handler.addFilter(request_id_filter)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


def log_request(
    request: Request,
    response: Optional[Response] = None,
    error: Optional[Exception] = None,
    duration_ms: Optional[float] = None,
) -> str:
    """
    Log an HTTP request with its response or error.

    Args:
        request: The incoming request.
        response: The response, when the request completed.
        error: The exception raised while handling the request, if any.
        duration_ms: Handling time in milliseconds.

    Returns:
        The request ID used for the log record.
    """
    logger = get_logger("http")

    request_id = (
        getattr(request.state, "request_id", None) or current_request_id() or str(uuid.uuid4())
    )
    request.state.request_id = request_id

    extra: Dict[str, Any] = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else "unknown",
    }
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    if error is not None:
        extra["status_code"] = getattr(error, "status_code", 500)
        extra["error"] = str(error)
        logger.error("Request failed: %s %s", request.method, request.url.path, extra=extra)
    elif response is not None:
        extra["status_code"] = response.status_code
        logger.info(
            "Request processed: %s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra=extra,
        )
    else:
        logger.info("Request started: %s %s", request.method, request.url.path, extra=extra)

    return request_id
