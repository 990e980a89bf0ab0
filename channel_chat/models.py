from __future__ import annotations

"""Channel document types produced by ingestion and consumed by the tools."""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Optional

TRANSCRIPT_UNAVAILABLE = "Transcript unavailable."

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(value: Any) -> Optional[int]:
    """Parse an ISO-8601 duration like PT1H2M3S into seconds.

    Returns None for anything that is not a string starting with "PT".
    """
    if not isinstance(value, str) or not value.startswith("PT"):
        return None
    match = _DURATION_RE.match(value)
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


@dataclass(frozen=True)
class VideoRecord:
    video_id: str
    title: str = ""
    description: str = ""
    transcript: Optional[str] = None
    duration: Optional[str] = None
    release_date: Optional[str] = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    video_url: str = ""
    thumbnail_url: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @property
    def duration_seconds(self) -> Optional[int]:
        return parse_duration(self.duration)

    @property
    def watch_url(self) -> str:
        return self.video_url or WATCH_URL.format(video_id=self.video_id)

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "VideoRecord":
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known and v is not None}
        kwargs.setdefault("video_id", "")
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **kwargs)


@dataclass
class ChannelDocument:
    channel_id: str
    channel_title: str
    videos: list[VideoRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "channel_id": self.channel_id,
            "channel_title": self.channel_title,
            "videos": [v.to_dict() for v in self.videos],
        }

    @classmethod
    def from_dict(cls, data) -> "ChannelDocument":
        if isinstance(data, list):
            data = {"videos": data}
        return cls(
            channel_id=data.get("channel_id") or "",
            channel_title=data.get("channel_title") or "",
            videos=[VideoRecord.from_dict(v) for v in data.get("videos") or []],
        )


def records_from(channel) -> list[dict]:
    """Coerce whatever the caller holds into the list of mappings the tools read.

    Raw dicts pass through untouched so that keys the ingestion never
    produced (camelCase exports, custom columns) stay visible.
    """
    if channel is None:
        return []
    if isinstance(channel, ChannelDocument):
        return [v.to_dict() for v in channel.videos]
    if isinstance(channel, dict):
        channel = channel.get("videos") or []
    if not isinstance(channel, (list, tuple)):
        return []
    records = []
    for item in channel:
        if isinstance(item, VideoRecord):
            records.append(item.to_dict())
        elif isinstance(item, dict):
            records.append(item)
    return records
