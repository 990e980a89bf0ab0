from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests

from ..models import WATCH_URL, VideoRecord
from ..utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50

CHANNEL_ID_RE = re.compile(r"^UC[\w-]{22}$")
RESERVED_PATHS = re.compile(r"^(watch|playlist|results|channel|user|feed|shorts|live|embed|v|c)$", re.I)

URL_PATTERNS = [
    ("id", re.compile(r"youtube\.com/channel/([a-zA-Z0-9_-]+)")),
    ("handle", re.compile(r"youtube\.com/@([a-zA-Z0-9_.-]+)")),
    ("username", re.compile(r"youtube\.com/user/([a-zA-Z0-9_-]+)")),
    ("custom", re.compile(r"youtube\.com/c/([a-zA-Z0-9_-]+)")),
]
BARE_PATH_RE = re.compile(r"youtube\.com/([a-zA-Z0-9_-]+)(?:/|$|\?)")

USAGE = (
    "Invalid YouTube channel URL. Use format: https://www.youtube.com/@channelname, "
    "https://www.youtube.com/channel/CHANNEL_ID, or https://www.youtube.com/PewDiePie"
)


class YouTubeAPIError(Exception):
    """Non-success response from the YouTube Data API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"YouTube API: {status_code} {message}")
        self.status_code = status_code


@dataclass(frozen=True)
class ChannelReference:
    kind: str  # id | handle | username | custom
    value: str


def parse_channel_reference(channel_input: str) -> ChannelReference:
    """Accept a channel URL, @handle, channel ID or bare name."""
    text = (channel_input or "").strip()
    if not text:
        raise ValueError(USAGE)

    if "youtube.com" in text:
        for kind, pattern in URL_PATTERNS:
            match = pattern.search(text)
            if match:
                return ChannelReference(kind, match.group(1))
        match = BARE_PATH_RE.search(text)
        if match and not RESERVED_PATHS.match(match.group(1)):
            return ChannelReference("custom", match.group(1))
        raise ValueError(USAGE)

    if text.startswith("@") and len(text) > 1:
        return ChannelReference("handle", text[1:])
    if CHANNEL_ID_RE.match(text):
        return ChannelReference("id", text)
    if re.match(r"^[a-zA-Z0-9_.-]+$", text):
        return ChannelReference("handle", text)
    raise ValueError(USAGE)


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def video_from_item(item: dict) -> VideoRecord:
    """Build a VideoRecord from a videos.list item (snippet, contentDetails, statistics)."""
    vid = item["id"]
    snippet = item.get("snippet") or {}
    stats = item.get("statistics") or {}
    content = item.get("contentDetails") or {}
    thumbs = snippet.get("thumbnails") or {}
    thumbnail = next(
        (thumbs[size]["url"] for size in ("high", "medium", "default")
         if (thumbs.get(size) or {}).get("url")),
        None,
    )
    return VideoRecord(
        video_id=vid,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        duration=content.get("duration"),
        release_date=snippet.get("publishedAt"),
        view_count=_to_int(stats.get("viewCount")),
        like_count=_to_int(stats.get("likeCount")),
        comment_count=_to_int(stats.get("commentCount")),
        video_url=WATCH_URL.format(video_id=vid),
        thumbnail_url=thumbnail,
    )


class YouTubeDataClient:
    """Thin client for the YouTube Data API v3 endpoints the ingestion needs."""

    def __init__(self, api_key: Optional[str], timeout: float = 15,
                 session: Optional[requests.Session] = None,
                 max_retries: int = 3, retry_base_delay: float = 2.0):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self._get = retry_with_backoff(max_retries, retry_base_delay)(self._get_once)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_once(self, endpoint: str, params: dict) -> dict:
        resp = self.session.get(
            f"{API_BASE}/{endpoint}",
            params={**params, "key": self.api_key},
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise YouTubeAPIError(resp.status_code, resp.text[:300])
        return resp.json()

    # ------------------------------------------------------------------
    # Channel resolution
    # ------------------------------------------------------------------

    def _channel_by(self, **params) -> Optional[dict]:
        data = self._get("channels", {"part": "contentDetails,snippet", **params})
        items = data.get("items") or []
        return items[0] if items else None

    def _search_channel_id(self, query: str) -> Optional[str]:
        data = self._get("search", {"part": "snippet", "type": "channel", "q": query})
        items = data.get("items") or []
        if not items:
            return None
        return (items[0].get("snippet") or {}).get("channelId")

    def resolve_channel(self, ref: ChannelReference) -> dict:
        """Look up a channel. Returns channel_id, uploads_playlist_id and title."""
        channel = None
        if ref.kind == "id":
            channel = self._channel_by(id=ref.value)
        elif ref.kind == "handle":
            channel = self._channel_by(forHandle=f"@{ref.value}")
        elif ref.kind == "username":
            channel = self._channel_by(forUsername=ref.value)

        if channel is None and ref.kind != "id":
            query = f"@{ref.value}" if ref.kind == "handle" else ref.value
            found_id = self._search_channel_id(query)
            if found_id:
                channel = self._channel_by(id=found_id)

        if channel is None:
            raise ValueError(f"Channel not found: {ref.value}")

        uploads = (
            (channel.get("contentDetails") or {})
            .get("relatedPlaylists", {})
            .get("uploads")
        )
        if not uploads:
            raise ValueError(f"Uploads playlist not found for channel {channel.get('id')}")

        logger.info(f"Resolved channel {ref.value} -> {channel['id']}")
        return {
            "channel_id": channel["id"],
            "uploads_playlist_id": uploads,
            "title": (channel.get("snippet") or {}).get("title") or "",
        }

    # ------------------------------------------------------------------
    # Listing and metadata
    # ------------------------------------------------------------------

    def list_upload_ids(self, playlist_id: str, max_videos: int) -> list[str]:
        """Page through the uploads playlist until max_videos ids are collected.

        An empty page or a missing continuation token ends the listing,
        even if fewer than max_videos ids were found.
        """
        video_ids: list[str] = []
        seen = set()
        page_token = ""
        while len(video_ids) < max_videos:
            params = {
                "part": "contentDetails",
                "playlistId": playlist_id,
                "maxResults": min(PAGE_SIZE, max_videos - len(video_ids)),
            }
            if page_token:
                params["pageToken"] = page_token
            data = self._get("playlistItems", params)

            items = data.get("items") or []
            for item in items:
                vid = (item.get("contentDetails") or {}).get("videoId")
                if vid and vid not in seen and len(video_ids) < max_videos:
                    seen.add(vid)
                    video_ids.append(vid)

            page_token = data.get("nextPageToken") or ""
            logger.debug(f"Listed {len(video_ids)} uploads so far")
            if not page_token or not items:
                break
        return video_ids

    def fetch_videos(self, video_ids: list[str]) -> list[VideoRecord]:
        """Fetch snippet, contentDetails and statistics, one call per 50 ids.

        Ids the API no longer knows (deleted or private videos) are simply
        missing from the result.
        """
        videos = []
        for start in range(0, len(video_ids), PAGE_SIZE):
            data = self._get("videos", {
                "part": "snippet,contentDetails,statistics",
                "id": ",".join(video_ids[start:start + PAGE_SIZE]),
            })
            videos.extend(video_from_item(item) for item in data.get("items") or [])
        return videos
