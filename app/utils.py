"""Utility helpers for the ReelScout service."""

from __future__ import annotations

import re
import unicodedata
from typing import Any


ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)
YEAR_RE = re.compile(r"^(\d{4})")


def slugify(value: str) -> str:
    """Return a URL-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower()


def extract_year(date_value: Any) -> str | None:
    """Return the four-digit year prefix of a ``YYYY-MM-DD`` date string."""

    if not isinstance(date_value, str):
        return None
    match = YEAR_RE.match(date_value.strip())
    if not match:
        return None
    return match.group(1)


def parse_iso8601_duration(value: Any) -> int | None:
    """Convert an ISO 8601 duration such as ``PT2H16M`` into seconds.

    Only the day and time components are supported, which covers every value
    the video platform reports. Anything else yields ``None``.
    """

    if not isinstance(value, str):
        return None
    text = value.strip().upper()
    if text in {"", "P", "PT"}:
        return None
    match = ISO_DURATION_RE.match(text)
    if not match:
        return None
    parts = {key: int(amount) for key, amount in match.groupdict(default="0").items()}
    return (
        parts["days"] * 86_400
        + parts["hours"] * 3_600
        + parts["minutes"] * 60
        + parts["seconds"]
    )


def coerce_int(value: Any, *, default: int = 0) -> int:
    """Return ``value`` as an integer, falling back to ``default``."""

    try:
        return int(value)
    except (TypeError, ValueError):
        return default
