"""
Logging setup for Gradlink.

Production writes one JSON object per line to stdout, stamped with the
institution (tenant) the record was emitted for. Development gets a
plain console format.

LOG_FORMAT ("json" or "console") and LOG_LEVEL override the defaults.
"""
import json
import logging
import os
from datetime import datetime, timezone

from tenant.context import get_current_tenant_id

APP_LOGGERS = (
    "accounts",
    "tenant",
    "graduates",
    "employers",
    "analytics",
    "notifications",
    "dashboards",
    "themes",
    "ops",
    "celery",
)

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {"message", "asctime"}


def _logger(level: str, handler: str = "console") -> dict:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(debug: bool = False) -> dict:
    """Build the Django LOGGING dict."""
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    if log_format == "json":
        formatter = {"()": "ops.logging_config.JsonFormatter"}
    else:
        formatter = {"format": "[{asctime}] {levelname} {name} {message}", "style": "{"}

    loggers = {
        "django": _logger(log_level),
        "django.request": _logger(log_level if debug else "ERROR"),
        # SQL only in development
        "django.db.backends": _logger("DEBUG", "console") if debug else _logger("INFO", "null"),
    }
    loggers.update({name: _logger(log_level) for name in APP_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "null": {"class": "logging.NullHandler"},
        },
        "root": {"handlers": ["console"], "level": log_level},
        "loggers": loggers,
    }


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp, level, logger, message, location, plus tenant_id when
    emitted inside a tenant context, exception when one is attached, and
    extra for anything passed through `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {"file": record.pathname, "line": record.lineno, "function": record.funcName},
        }

        tenant_id = get_current_tenant_id()
        if tenant_id is not None:
            entry["tenant_id"] = tenant_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extras:
            entry["extra"] = extras

        return json.dumps(entry, default=str)
