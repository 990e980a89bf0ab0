from __future__ import annotations

"""Field-name resolution and numeric value extraction over video records."""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

from ..models import parse_duration

METRIC_ALIASES = {
    "likecount": "like_count", "likes": "like_count", "likecounts": "like_count",
    "viewcount": "view_count", "views": "view_count", "viewcounts": "view_count",
    "commentcount": "comment_count", "comments": "comment_count",
    "commentcounts": "comment_count",
    "releasedate": "release_date", "published": "release_date",
    "publishedat": "release_date", "date": "release_date",
    "length": "duration",
}

SNAKE_TO_CAMEL = {
    "like_count": "likeCount",
    "view_count": "viewCount",
    "comment_count": "commentCount",
    "release_date": "releaseDate",
}
CAMEL_TO_SNAKE = {camel: snake for snake, camel in SNAKE_TO_CAMEL.items()}

DATE_FIELDS = ("release_date", "releaseDate", "publishedAt", "published_at")
DURATION_FIELDS = ("duration",)

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_name(name: str) -> str:
    return re.sub(r"[\s_-]+", "", str(name).lower())


def resolve_field(records: list[dict], name: str) -> str:
    """Map a user-supplied field name onto a key present in the records."""
    if not name or not isinstance(name, str):
        return name
    keys = list(records[0].keys()) if records else []
    if name in keys:
        return name

    target = normalize_name(name)
    aliased = METRIC_ALIASES.get(target)
    if aliased:
        if aliased in keys:
            return aliased
        camel = SNAKE_TO_CAMEL.get(aliased)
        if camel in keys:
            return camel

    for key in keys:
        if normalize_name(key) == target:
            return key

    return aliased or name


def field_value(record: dict, name: str) -> Any:
    """Read a field, bridging snake_case and camelCase spellings."""
    value = record.get(name)
    if value is not None:
        return value
    for other in (SNAKE_TO_CAMEL.get(name), CAMEL_TO_SNAKE.get(name)):
        if other and record.get(other) is not None:
            return record[other]
    return None


def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_date_ms(value: Any) -> Optional[int]:
    """Parse a release timestamp into milliseconds since the epoch (UTC)."""
    if isinstance(value, bool) or value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        try:
            datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None
        return int(value)
    text = str(value).strip()
    if _DATE_ONLY_RE.match(text):
        text += "T00:00:00"
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def release_ms(record: dict) -> Optional[int]:
    for key in DATE_FIELDS:
        if record.get(key):
            return parse_date_ms(record[key])
    return None


def numeric_value(record: dict, name: str) -> Optional[float]:
    """Extract one numeric value; None means the record is excluded."""
    raw = field_value(record, name)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw if math.isfinite(raw) else None
    if name in DURATION_FIELDS:
        return parse_duration(raw)
    if name in DATE_FIELDS:
        return parse_date_ms(raw)
    return parse_number(raw)


def day_bucket(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
