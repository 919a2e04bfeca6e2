"""Bridge Logging — one JSON object per line, with the bridge's diagnostic fields lifted out.

Invariants:
    - Every line has timestamp (record creation time, UTC), level, logger, message
    - Retry and cache context (attempt, status_code, path, tier, space_id, error_code)
      appears as top-level keys when the call site passed it via extra=
    - LOG_FORMAT=text switches to a single-line human format for local runs

Design Decisions:
    - stdlib logging only; setup_logging runs once from the lifespan
"""

import json
import logging
from datetime import datetime, timezone

BRIDGE_FIELDS = (
    "attempt", "status_code", "path", "tier", "space_id", "error_code",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [docmost-bridge] %(message)s"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in BRIDGE_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Attach a stream handler to the root logger in the configured format."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
