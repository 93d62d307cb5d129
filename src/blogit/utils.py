"""Helpers for slugs, payload decoding and timestamp normalization."""

from __future__ import annotations

import base64
import binascii
import re
import unicodedata
from datetime import date, datetime, time, timezone

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int | None = None) -> str:
    """Lower-kebab-case ``value``; non-alphanumeric runs collapse to one hyphen."""
    value = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode()
    value = value.lower()
    value = SLUG_PATTERN.sub("-", value).strip("-")
    if max_length:
        value = value[:max_length].rstrip("-")
    return value


def decode_base64_text(payload: str) -> str:
    """Decode a GitHub base64 blob (which is wrapped with newlines) to text."""
    if not payload:
        return ""
    try:
        raw = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 content: {exc}") from exc
    return raw.decode("utf-8")


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_timestamp(value: object) -> datetime:
    """Turn a YAML scalar (date, datetime or ISO string) into an aware UTC datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        return ensure_utc(datetime.fromisoformat(value.strip()))
    raise ValueError(f"Cannot interpret {value!r} as a timestamp")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
