# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured logging for the planning core: one JSON object per line.

Besides the message, each line names the service, its version and the
module that logged it. Store context passed through `extra=` (the
rejected operation and reason, the storage namespace) is lifted into
top-level keys so rejections and persistence failures can be grepped
by field.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from planning.core.config import settings

# `extra=` keys promoted to top-level fields.
CONTEXT_FIELDS = ("operation", "reason", "namespace")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info and record.exc_info[1]:
            log_data["error"] = str(record.exc_info[1])
            log_data["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(log_data, ensure_ascii=False, default=str)


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the `planning` hierarchy writing JSON lines to stdout."""
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if not logger.handlers:
        logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
