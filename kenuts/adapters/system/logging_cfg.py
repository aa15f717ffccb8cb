# /kenuts/adapters/system/logging_cfg.py
from __future__ import annotations

import json
import logging
import sys
from typing import Any

from kenuts.config import settings


class JSONHandler(logging.StreamHandler):
    """One JSON object per record; `extra={"extra": {...}}` is merged into it."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload: dict[str, Any] = {
                "ts": round(record.created, 3),
                "level": record.levelname,
                "msg": record.getMessage(),
                "logger": record.name,
            }
            extra = getattr(record, "extra", None)
            if isinstance(extra, dict):
                payload.update(extra)
            if record.exc_info:
                payload["exc"] = logging.Formatter().formatException(record.exc_info)
            self.stream.write(json.dumps(payload, default=str, ensure_ascii=False) + "\n")
            self.flush()
        except Exception:
            self.handleError(record)


def configure_logger(level: int | str | None = None) -> None:
    if level is None:
        level = settings.LOG_LEVEL.upper()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(JSONHandler(stream=sys.stdout))
