"""Crossing Times — Structured JSON Logging."""

import logging
import json
import sys
from datetime import datetime, timezone
from crossings.config import settings

EXTRA_FIELDS = ("stage", "table", "rows", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; pipeline records carry their stage."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        stage = getattr(record, "stage", None)
        if stage:
            message = f"[{stage}] {message}"

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        log_entry.update(
            {key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)}
        )
        # Datetimes and enums in extras
        return json.dumps(log_entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Return `crossings.<name>` with the JSON handler attached once."""
    logger = logging.getLogger(f"crossings.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
