"""
LeadMiner Structured Logging Configuration
==========================================

Configures logging for the pipeline with support for:
- JSON lines output (for log aggregation)
- Human-readable output with lead/stage context (for terminals)
- Optional rotating log file
- Run context: every record logged inside `run_context(run_id)` carries
  that run id, including per-lead logs from the enricher and scorer

Usage:
    from leadminer.orchestrator.logging_config import run_context, setup_logging

    setup_logging(json_output=True, log_file="logs/leadminer.log")
    with run_context(run_id):
        ...
"""

import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

# Attributes passed through logger.*(..., extra={...}) that end up in the output
EXTRA_FIELDS = ("run_id", "stage", "lead_id", "score", "duration")

# Shown after the message in console output
CONSOLE_CONTEXT_FIELDS = ("stage", "lead_id", "score")

_active_run_id: Optional[str] = None


@contextmanager
def run_context(run_id: str) -> Iterator[None]:
    """Attach run_id to every record emitted while the block runs."""
    global _active_run_id
    previous = _active_run_id
    _active_run_id = run_id
    try:
        yield
    finally:
        _active_run_id = previous


def get_active_run_id() -> Optional[str]:
    return _active_run_id


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """The EXTRA_FIELDS set on a record, in declaration order."""
    return {
        key: getattr(record, key)
        for key in EXTRA_FIELDS
        if getattr(record, key, None) is not None
    }


class RunContextFilter(logging.Filter):
    """Stamps the active run id on records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "run_id", None) is None and _active_run_id is not None:
            record.run_id = _active_run_id
        return True


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON lines.

    Output format:
        {"ts": "2026-...", "level": "INFO", "logger": "leadminer.scoring.lead_scorer",
         "msg": "Scored gm_1: 92 (critical)", "run_id": "...", "lead_id": "gm_1", "score": 92}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        log_entry.update(extra_fields(record))

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """One line per record; lead and stage context appended as key=value."""

    def __init__(self):
        super().__init__(
            "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = extra_fields(record)
        pairs = [f"{key}={context[key]}" for key in CONSOLE_CONTEXT_FIELDS if key in context]
        if pairs:
            line = f"{line} [{' '.join(pairs)}]"
        return line


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 3,
):
    """
    Configure application logging.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON lines format
        log_file: Optional file path for log output (with rotation)
        max_bytes: Max file size before rotation
        backup_count: Number of rotated files to keep
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = JSONFormatter() if json_output else ConsoleFormatter()
    run_filter = RunContextFilter()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))

    # Filters sit on handlers so records propagated from leadminer.* are stamped too
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(run_filter)
        root.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    root.debug(
        "Logging configured: level=%s json=%s file=%s",
        level, json_output, log_file or "none",
    )
