"""Helpers shared by the API records."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping


def parse_date(value: Any) -> date | None:
    """Parse the dates sent by the backend.

    MySQL ``DATE`` columns come through as ``YYYY-MM-DD`` while ``DATETIME``
    columns are serialised as full ISO timestamps (``2024-03-01T23:00:00.000Z``).
    Anything unparseable is treated as missing.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        parsed = parse_date(text)
        if parsed is None:
            return None
        return datetime.combine(parsed, datetime.min.time())


def format_date(value: date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def nested(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if isinstance(value, Mapping):
        return value
    return {}
