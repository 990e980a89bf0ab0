from __future__ import annotations

"""Resolve a selector such as "first", "3", "most viewed" or a title fragment."""

import re
from typing import Optional

from .fields import field_value, parse_number

MOST_VIEWED_RE = re.compile(r"^most\s*viewed$")
ORDINAL_RE = re.compile(r"^(\d+)(?:st|nd|rd|th)?$")

ORDINAL_WORDS = {
    "first": 0, "1st": 0,
    "second": 1, "2nd": 1,
    "third": 2, "3rd": 2,
}


def _views(record: dict) -> float:
    return parse_number(field_value(record, "view_count")) or 0


def most_viewed(records: list[dict]) -> Optional[dict]:
    # sorted() is stable, so ties keep list order
    ranked = sorted(records, key=_views, reverse=True)
    return ranked[0] if ranked else None


def select_video(records: list[dict], selector: str) -> Optional[dict]:
    """Return exactly one record for the selector, or None if nothing matches."""
    sel = str(selector or "").strip().lower()

    if MOST_VIEWED_RE.match(sel):
        return most_viewed(records)

    if sel in ORDINAL_WORDS:
        index = ORDINAL_WORDS[sel]
        return records[index] if index < len(records) else None

    match = ORDINAL_RE.match(sel)
    if match and int(match.group(1)) >= 1:
        index = int(match.group(1)) - 1
        return records[index] if index < len(records) else None

    for record in records:
        if sel in str(record.get("title") or "").lower():
            return record
    return None
