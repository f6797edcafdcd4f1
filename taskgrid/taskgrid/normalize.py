"""Field normalizers for semi-structured record fields.

Tags, reference lists and owner fields reach the engine in several legacy
encodings: real lists, JSON-encoded strings, comma-separated text and typed
wrapper objects. Every function here is total: bad input degrades to an empty
or partial result, never to an exception.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Mapping, Sequence

logger = logging.getLogger(__name__)

# DynamoDB-style attribute value tags, as delivered by the remote store.
_TYPED_TAGS = {"S", "N", "BOOL", "NULL", "L", "M", "SS", "NS"}

# Store bookkeeping, never part of the record.
_INTERNAL_KEYS = {"_metadata", "timestamp"}

_LIST_MEMBERS = ("items", "data")
_ID_KEYS = ("id", "$id")
_IDENTITY_KEYS = ("id", "$id", "name", "email")
_LABEL_KEYS = ("name", "label", "value", "title")


def _parse_number(text: Any) -> int | float | None:
    try:
        num = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return int(num) if num.is_integer() else num


def unwrap_typed_value(value: Any) -> Any:
    """Unwrap a single typed attribute value (`{"S": "x"}` -> `"x"`), recursively."""
    if not isinstance(value, Mapping) or len(value) != 1:
        return value

    tag, inner = next(iter(value.items()))
    if tag not in _TYPED_TAGS:
        return value

    if tag == "S":
        return inner
    if tag == "N":
        return _parse_number(inner)
    if tag == "BOOL":
        return bool(inner)
    if tag == "NULL":
        return None
    if tag == "L":
        return [unwrap_typed_value(v) for v in inner] if isinstance(inner, list) else []
    if tag == "M":
        return unwrap_record(inner) if isinstance(inner, Mapping) else {}
    if tag == "SS":
        return [str(v) for v in inner] if isinstance(inner, list) else []
    # NS
    return [n for n in (_parse_number(v) for v in inner) if n is not None] if isinstance(inner, list) else []


def unwrap_record(item: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a typed-wrapper record into a plain dict, dropping store bookkeeping."""
    return {key: unwrap_typed_value(value) for key, value in item.items() if key not in _INTERNAL_KEYS}


def _list_member(obj: Mapping[str, Any]) -> list[Any] | None:
    for key in _LIST_MEMBERS:
        member = obj.get(key)
        if isinstance(member, (list, tuple)):
            return list(member)
    return None


def _split_csv(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def normalize_list(raw: Any) -> list[Any]:
    """
    Canonicalize a list-like field.

    Tiers, most structured first: sequence as-is; wrapper object with an
    `items`/`data` member; JSON decode (array, or object with a list member);
    comma split as the terminal fallback.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if isinstance(raw, (set, frozenset)):
        return sorted(raw, key=str)

    if isinstance(raw, Mapping):
        unwrapped = unwrap_typed_value(raw)
        if isinstance(unwrapped, list):
            return unwrapped
        if isinstance(unwrapped, str):
            return normalize_list(unwrapped)
        if isinstance(unwrapped, Mapping):
            return _list_member(unwrapped) or []
        return []

    if not isinstance(raw, str):
        logger.debug("normalize_list: ignoring non-list value of type %s", type(raw).__name__)
        return []

    text = raw.strip()
    if not text:
        return []

    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError):
        decoded = None
        logger.debug("normalize_list: %r is not JSON, splitting on commas", text[:40])

    if isinstance(decoded, list):
        return decoded
    if isinstance(decoded, dict):
        member = _list_member(decoded)
        if member is not None:
            return member
    if isinstance(decoded, str):
        return _split_csv(decoded)
    return _split_csv(text)


def _label(entry: Any) -> str:
    if isinstance(entry, Mapping):
        for key in _LABEL_KEYS:
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return ""
    if entry is None:
        return ""
    return str(entry).strip()


def normalize_tags(raw: Any) -> list[str]:
    """Tag labels in original order, stripped, empties dropped."""
    return [label for label in (_label(entry) for entry in normalize_list(raw)) if label]


def tag_set(raw: Any) -> frozenset[str]:
    """Canonical, order-free, case-folded tag set."""
    return frozenset(t.lower() for t in normalize_tags(raw))


def index_records(all_records: Sequence[Mapping[str, Any]] | None) -> dict[str, Mapping[str, Any]]:
    """Index records by `id` (or `$id`) for reference resolution."""
    index: dict[str, Mapping[str, Any]] = {}
    for rec in all_records or ():
        if not isinstance(rec, Mapping):
            continue
        for key in _ID_KEYS:
            rec_id = rec.get(key)
            if rec_id is not None and str(rec_id).strip():
                index.setdefault(str(rec_id).strip(), rec)
    return index


def resolve_references(
    items: Sequence[Any],
    all_records: Sequence[Mapping[str, Any]] | Mapping[str, Mapping[str, Any]] | None,
) -> list[Any]:
    """
    Replace bare identifiers with the full record they name.

    `all_records` is either a record sequence or an index from `index_records`.
    Unresolved identifiers and embedded objects pass through unchanged, so the
    caller can detect unresolved entries by type.
    """
    if not all_records:
        return list(items)
    index = all_records if isinstance(all_records, Mapping) else index_records(all_records)

    resolved: list[Any] = []
    for item in items:
        if isinstance(item, (str, int)) and not isinstance(item, bool):
            resolved.append(index.get(str(item).strip(), item))
        else:
            resolved.append(item)
    return resolved


def identity_set(value: Any) -> set[str]:
    """Every identity a stored owner field could be naming, lower-cased."""
    if value is None:
        return set()
    if isinstance(value, Mapping):
        value = unwrap_typed_value(value)
        if isinstance(value, Mapping):
            return {str(value[k]).strip().lower() for k in _IDENTITY_KEYS if value.get(k)}

    members: set[str] = set()
    if isinstance(value, str):
        text = value.strip()
        if text and not text.startswith(("[", "{")):
            members.add(text.lower())
        entries: list[Any] = normalize_list(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        entries = list(value)
    else:
        return {str(value).strip().lower()}

    for entry in entries:
        if isinstance(entry, Mapping):
            members.update(str(entry[k]).strip().lower() for k in _IDENTITY_KEYS if entry.get(k))
        elif entry is not None and str(entry).strip():
            members.add(str(entry).strip().lower())
    return members


def member_set(value: Any) -> set[str]:
    """Whole values of a single-valued or list field, lower-cased. Never splits on commas."""
    if isinstance(value, Mapping):
        value = unwrap_typed_value(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        entries = list(value)
    elif isinstance(value, str) and value.strip().startswith("["):
        entries = normalize_list(value)
    else:
        entries = [value]
    return {label.lower() for label in (_label(e) for e in entries) if label}


def contains_identity(value: Any, identity: str | Sequence[str] | None) -> bool:
    """
    Loose membership: does an owner field name `identity`?

    Matches exact equality, list membership, or substring containment inside a
    composite string field. Case-insensitive.
    """
    if identity is None:
        return False
    wanted = [identity] if isinstance(identity, str) else list(identity)
    candidates = [w.strip().lower() for w in wanted if isinstance(w, str) and w.strip()]
    if not candidates:
        return False

    members = identity_set(value)
    if any(c in members for c in candidates):
        return True
    if isinstance(value, str):
        lowered = value.lower()
        return any(c in lowered for c in candidates)
    return False


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO date/datetime (or epoch milliseconds) into an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
            except ValueError:
                logger.debug("parse_date: unparseable date %r", text[:40])
                return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_day(value: Any) -> date | None:
    dt = parse_date(value)
    return dt.date() if dt else None


def epoch_ms(value: Any) -> int:
    """Epoch milliseconds for sorting; missing or bad dates are 0."""
    dt = parse_date(value)
    return int(dt.timestamp() * 1000) if dt else 0


def to_number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    num = _parse_number(str(value).strip()) if value is not None else None
    return float(num) if num is not None else default
