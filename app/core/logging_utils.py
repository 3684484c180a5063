import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

# LogRecord attributes that are not user-supplied `extra=` fields
_RESERVED = frozenset(
    (
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    )
)

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for k, v in record.__dict__.items():
            if k in _RESERVED:
                continue
            # Decimals, datetimes and similar are logged as strings
            try:
                json.dumps(v)
                base[k] = v
            except (TypeError, ValueError):
                base[k] = str(v)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def _formatter(settings) -> logging.Formatter:
    if getattr(settings, "LOG_JSON", True):
        return JsonFormatter()
    return logging.Formatter(PLAIN_FORMAT)


def configure_logging(settings) -> None:
    level = getattr(
        logging, (getattr(settings, "LOG_LEVEL", "INFO") or "INFO").upper(), logging.INFO
    )
    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers to avoid duplicates on reload
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setFormatter(_formatter(settings))
    root.addHandler(console)

    log_file = getattr(settings, "LOG_FILE", "") or ""
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=int(getattr(settings, "LOG_MAX_BYTES", 5_000_000)),
            backupCount=int(getattr(settings, "LOG_BACKUP_COUNT", 5)),
            encoding="utf-8",
        )
        file_handler.setFormatter(_formatter(settings))
        root.addHandler(file_handler)

    for noisy in ("uvicorn", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(level)
