"""Structured JSON logging for meal plan generation.

This module provides:
- JSON-lines loggers under /tmp/meal_plan_logs/ with daily rotation
- log_operation: start/complete/error records around service operations
- log_rejected_response: truncated copy of model output the validator refused
- log_generation_tier: which tier produced a plan or replacement meal
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

LOG_DIR = Path(os.getenv("LOG_DIR", "/tmp/meal_plan_logs"))
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "7"))
STRUCTURED_LOG_LEVEL = os.getenv("STRUCTURED_LOG_LEVEL", "INFO").upper()

# A full week response is ~20k chars; keep log lines readable
MAX_LOGGED_RESPONSE_CHARS = 5000


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra_fields` are merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_structured_logger(name: str) -> logging.Logger:
    """Return a logger writing JSON lines to LOG_DIR/<name>.jsonl.

    Falls back to stderr when the log directory cannot be created, so a
    read-only filesystem never breaks generation.

    Args:
        name: Logger name (e.g., "meal_plan.generator", "meal_plan.service")
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, STRUCTURED_LOG_LEVEL, logging.INFO))
    if logger.handlers:
        return logger

    handler: logging.Handler
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(
            filename=LOG_DIR / f"{name}.jsonl",
            when="midnight",
            backupCount=LOG_RETENTION_DAYS,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"⚠️  Structured log file unavailable ({e}), logging to stderr", file=sys.stderr)
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    return logger


def cleanup_old_logs(log_dir: Optional[Path] = None) -> int:
    """Delete rotated log files past the retention window.

    Returns:
        Number of files removed
    """
    log_dir = log_dir or LOG_DIR
    if not log_dir.exists():
        return 0

    cutoff = (datetime.now() - timedelta(days=LOG_RETENTION_DAYS)).timestamp()
    removed = 0
    for log_file in log_dir.glob("*.jsonl*"):
        try:
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                removed += 1
        except OSError as e:
            print(f"⚠️  Could not remove old log {log_file.name}: {e}", file=sys.stderr)
    if removed:
        print(f"🗑️  Removed {removed} old log file(s)", file=sys.stderr)
    return removed


def _emit(logger: logging.Logger, level: int, message: str, exc_info: bool = False, **fields) -> None:
    logger.log(level, message, extra={"extra_fields": fields}, exc_info=exc_info)


@contextmanager
def log_operation(logger: logging.Logger, operation: str, **context):
    """Log start, completion (with duration) or failure of a service operation.

    Exceptions are logged and re-raised unchanged.

    Example:
        with log_operation(logger, "create_plan", user_id="u-1"):
            ...
    """
    started = time.monotonic()
    _emit(logger, logging.INFO, f"{operation} started", operation=operation, phase="start", **context)

    try:
        yield
    except Exception as e:
        _emit(
            logger,
            logging.ERROR,
            f"{operation} failed",
            exc_info=True,
            operation=operation,
            phase="error",
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise

    _emit(
        logger,
        logging.INFO,
        f"{operation} completed",
        operation=operation,
        phase="complete",
        duration_ms=round((time.monotonic() - started) * 1000, 1),
        **context,
    )


def log_rejected_response(logger: logging.Logger, label: str, text: Any) -> None:
    """Keep a truncated copy of a response that failed validation."""
    raw = text if isinstance(text, str) else repr(text)
    _emit(
        logger,
        logging.WARNING,
        f"Rejected response: {label}",
        response_label=label,
        response_chars=len(raw),
        response_preview=raw[:MAX_LOGGED_RESPONSE_CHARS],
        truncated=len(raw) > MAX_LOGGED_RESPONSE_CHARS,
    )


def log_generation_tier(logger: logging.Logger, tier: str, degraded: bool, **context) -> None:
    """Record which generation tier produced a plan or meal.

    Plans from every tier look identical to callers, so this log line is
    the only place degraded output shows up.
    """
    _emit(
        logger,
        logging.INFO,
        f"Generation tier used: {tier}",
        generation_tier=tier,
        degraded=degraded,
        **context,
    )


cleanup_old_logs()
