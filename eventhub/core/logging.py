"""
Logging configuration

Records are emitted as JSON (or plain text when LOG_FORMAT=text) and carry
the id of the HTTP request that produced them, so a booking, its payment and
the tickets issued for it can be followed through the log.
"""

import json
import logging
import logging.config
import os
from contextvars import ContextVar
from datetime import datetime, timezone

from eventhub.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request id"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        # request_id plus anything passed through extra=
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value

        return json.dumps(entry, default=str)


def _file_handler() -> dict:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": settings.LOG_LEVEL,
        "formatter": "json",
        "filters": ["request_context"],
        "filename": os.path.join(settings.LOG_DIR, "eventhub.log"),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
    }


def setup_logging() -> None:
    """
    Configure application logging. The rotating file handler is only
    installed outside the testing environment.
    """
    app_handlers = ["console"]
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "json" if settings.LOG_FORMAT == "json" else "text",
            "filters": ["request_context"],
            "stream": "ext://sys.stdout",
        }
    }
    if not settings.is_testing:
        handlers["file"] = _file_handler()
        app_handlers.append("file")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": RequestContextFilter},
        },
        "formatters": {
            "text": {
                "format": "%(asctime)s [%(request_id)s] %(name)s %(levelname)s %(message)s"
            },
            "json": {"()": JSONFormatter},
        },
        "handlers": handlers,
        "loggers": {
            "eventhub": {"level": settings.LOG_LEVEL, "handlers": app_handlers, "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "sqlalchemy": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    })
