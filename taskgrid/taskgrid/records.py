"""Loading record sets exported from the remote store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .normalize import unwrap_record

_ENVELOPE_KEYS = ("items", "data", "documents")


def records_from_payload(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare list or an API envelope (`items`, `data`, `documents`)."""
    items: Any = payload
    if isinstance(payload, dict):
        items = next((payload[k] for k in _ENVELOPE_KEYS if isinstance(payload.get(k), list)), None)
    if not isinstance(items, list):
        raise ValueError("expected a list of records or an object with an 'items', 'data' or 'documents' list")
    return [unwrap_record(item) for item in items if isinstance(item, dict)]


def load_records(path: Path) -> list[dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ValueError(f"{path}: invalid JSON ({e})") from e
    try:
        return records_from_payload(payload)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
