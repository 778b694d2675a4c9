"""
EduGen - Logging Configuration
Structured JSON logs in production, readable lines when DEBUG is on.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config.settings import get_settings

# Attributes copied from `extra={...}` into the JSON object when present
CONTEXT_FIELDS = ("operation", "question_id", "upload_name", "exam_filename")

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access", "fontTools")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, suitable for container log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        settings = get_settings()

        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "env": "dev" if settings.debug else "prod",
            "service": "edugen-api"
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value

        # Free-form fields: extra={"extra_data": {...}}
        extra_data = getattr(record, "extra_data", None)
        if isinstance(extra_data, dict):
            payload.update(extra_data)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def resolve_level(debug: bool, level_name: str) -> int:
    if debug:
        return logging.DEBUG
    level = getattr(logging, level_name.upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once per process start.

    Existing root handlers are replaced, so calling it again (tests,
    uvicorn reload) never duplicates output.

    Args:
        level: Overrides settings.log_level
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_level(settings.debug, level or settings.log_level))

    handler = logging.StreamHandler(sys.stdout)
    if settings.debug:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
    else:
        handler.setFormatter(JSONFormatter())

    root_logger.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
