"""Root logger setup for the CLI scripts.

Library modules only call ``logging.getLogger(__name__)``; handlers and
levels are configured here, once, from Settings (LOG_LEVEL, LOG_JSON).
Log output goes to stderr so the scripts' printed summaries stay on stdout.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from .settings import Settings, get_settings

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Record attributes copied into JSON lines when passed via ``extra=``
CONTEXT_FIELDS = ("store_id", "session_id", "sheet")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with store/session context when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Store and item names are Indonesian text; keep them readable
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Replace the root handlers with a single stderr handler.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=PLAIN_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
