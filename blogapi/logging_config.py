"""
Logging setup for the blog API.

Every record is stamped with the id of the request it was emitted in and the
principal that request authenticated as. Development gets one readable line
per record, production one JSON object per line.

    from blogapi.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Post hidden", extra={"post_id": str(post.id)})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Set by RequestIdMiddleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
# Set by AuthenticationMiddleware once the credential resolves to a user
principal_id_var: ContextVar[Optional[str]] = ContextVar("principal_id", default=None)

# Placeholder for records emitted outside a request or anonymously
UNSET = "-"

_CONTEXT_FIELDS = ("request_id", "principal_id")

# Attributes every LogRecord has; the rest came in through extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", *_CONTEXT_FIELDS}


def current_log_context() -> Dict[str, str]:
    """Request and principal ids for the running task, UNSET where missing."""
    return {
        "request_id": request_id_var.get() or UNSET,
        "principal_id": principal_id_var.get() or UNSET,
    }


class LogContextFilter(logging.Filter):
    """Copy the request and principal ids onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in current_log_context().items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            value = getattr(record, key, UNSET)
            if value != UNSET:
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            entry[key] = value

        return json.dumps(entry)


DEV_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s user=%(principal_id)s %(message)s"


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        log_level: level name; unknown names fall back to INFO
        environment: 'production' selects JSON output
        debug: force DEBUG
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    # create_app runs once per test and on every uvicorn reload
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(LogContextFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
