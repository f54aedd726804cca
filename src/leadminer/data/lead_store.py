"""
JSON lead files.

Every artifact of a run (raw, enriched, scored, top) is a JSON array on
disk. Failures are surfaced as LeadStoreError, never as an empty list.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .data_models import BusinessRecord
from .record_schema import parse_records
from ..errors import LeadStoreError, RecordValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_json(path: PathLike) -> Any:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise LeadStoreError(f"Lead file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise LeadStoreError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise LeadStoreError(f"Failed to read {path}: {e}") from e


def load_payloads(path: PathLike) -> List[Dict[str, Any]]:
    """Load a JSON array of objects."""
    data = load_json(path)
    if not isinstance(data, list):
        raise LeadStoreError(f"Expected a JSON array in {path}, got {type(data).__name__}")
    return data


def load_records(path: PathLike, now=None) -> List[BusinessRecord]:
    """
    Load and validate raw business records from a JSON file.

    Raises:
        LeadStoreError: Unreadable file, invalid JSON or invalid record
    """
    payloads = load_payloads(path)
    try:
        records = parse_records(payloads, now=now)
    except RecordValidationError as e:
        raise LeadStoreError(f"{path}: {e}") from e
    logger.info(f"Loaded {len(records)} records from {path}")
    return records


def save_json(data: Any, path: PathLike, indent: Optional[int] = 2) -> Path:
    """Write data as pretty-printed JSON, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
    except (OSError, TypeError) as e:
        raise LeadStoreError(f"Failed to write {path}: {e}") from e
    logger.info(f"Saved {path}")
    return path


def save_text(text: str, path: PathLike) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise LeadStoreError(f"Failed to write {path}: {e}") from e
    logger.info(f"Saved {path}")
    return path
