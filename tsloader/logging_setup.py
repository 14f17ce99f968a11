"""
JSONL logging bootstrap for the tsloader CLI.
Installs one JSONL sink on the root logger; library code only ever logs.
"""

import json
import logging
import os
import re
from datetime import UTC
from datetime import datetime
from pathlib import Path

DEFAULT_PATH = os.environ.get("TSLOADER_LOG_PATH", "./tsloader.log.jsonl")
DEFAULT_LEVEL = os.environ.get("TSLOADER_LOG_LEVEL", "INFO").upper()

_RECORD_FIELDS = frozenset(
    {
        "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName", "processName",
        "process", "name", "taskName",
    }
)  # fmt: skip

# Leading "[resolve]"-style tag on engine messages
_EVENT_TAG = re.compile(r"^\[([\w-]+)\] ")


class JsonlHandler(logging.Handler):
    """Appends one JSON object per record to ``path``."""

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        message = record.getMessage()
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "tsloader.log", "ver": "1.0.0"},
            "logger": record.name,
            "message": message,
        }
        tag = _EVENT_TAG.match(message)
        if tag:
            payload["event"] = tag.group(1)
        if record.exc_info:
            payload["exception"] = logging.Formatter().formatException(record.exc_info)
        # Extra fields passed via logger.x(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _RECORD_FIELDS:
                payload.setdefault(key, value)
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | None = None, level: str | None = None) -> JsonlHandler:
    path = path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    # Avoid duplicate sinks when called twice
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
    handler = JsonlHandler(path)
    root.addHandler(handler)
    return handler
