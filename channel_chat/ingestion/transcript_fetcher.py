from __future__ import annotations

import logging
import random
import re
import time
from typing import Optional

from requests import Session

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    IpBlocked,
    NoTranscriptFound,
    RequestBlocked,
    TranscriptsDisabled,
    VideoUnavailable,
)

from ..models import TRANSCRIPT_UNAVAILABLE

logger = logging.getLogger(__name__)

VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")
VIDEO_ID_IN_URL_RE = re.compile(r"(?:v=|/)([a-zA-Z0-9_-]{11})(?:[?&#/]|$)")


def normalize_video_id(value: str) -> Optional[str]:
    """Extract the 11-character video id from a bare id or a watch/share URL."""
    value = (value or "").strip()
    if VIDEO_ID_RE.match(value):
        return value
    match = VIDEO_ID_IN_URL_RE.search(value)
    return match.group(1) if match else None


class TranscriptFetcher:
    """Fetches caption text using youtube-transcript-api.

    Uses a fresh requests Session per fetch and an optional random delay
    between requests to avoid YouTube IP-blocking. Every failure degrades
    to the TRANSCRIPT_UNAVAILABLE marker; nothing is raised to the caller.
    """

    def __init__(self, preferred_languages: list[str] = None,
                 fallback_to_any_language: bool = True,
                 delay_range: tuple[float, float] = (0.0, 0.0)):
        self.preferred_languages = preferred_languages or ["en", "en-US", "en-GB"]
        self.fallback_to_any_language = fallback_to_any_language
        self._ip_blocked = False
        self._delay_range = delay_range
        self._request_count = 0

    def _make_api(self) -> YouTubeTranscriptApi:
        """Create a fresh API instance with a new session to rotate cookies."""
        session = Session()
        session.headers.update({
            "Accept-Language": "en-US,en;q=0.9",
        })
        return YouTubeTranscriptApi(http_client=session)

    @property
    def is_blocked(self) -> bool:
        """True if the most recent failure was YouTube blocking our requests."""
        return self._ip_blocked

    def _throttle(self):
        if self._request_count > 0 and max(self._delay_range) > 0:
            time.sleep(random.uniform(*self._delay_range))
        self._request_count += 1

    def _fetch_snippets(self, api: YouTubeTranscriptApi, video_id: str) -> list:
        try:
            return api.fetch(video_id, languages=self.preferred_languages).to_raw_data()
        except NoTranscriptFound:
            if not self.fallback_to_any_language:
                raise
        # No preferred language; take whatever track the video has
        for transcript in api.list(video_id):
            logger.debug(f"Falling back to {transcript.language_code} captions for {video_id}")
            return transcript.fetch().to_raw_data()
        return []

    def fetch_transcript(self, video_id: str) -> str:
        """Return the transcript as plain text, or TRANSCRIPT_UNAVAILABLE."""
        vid = normalize_video_id(video_id)
        if not vid:
            logger.info(f"Not a video id: {video_id!r}")
            return TRANSCRIPT_UNAVAILABLE

        self._throttle()

        try:
            snippets = self._fetch_snippets(self._make_api(), vid)
        except (TranscriptsDisabled, NoTranscriptFound, VideoUnavailable) as e:
            logger.info(f"No transcript for {vid}: {type(e).__name__}")
            return TRANSCRIPT_UNAVAILABLE
        except (IpBlocked, RequestBlocked):
            self._ip_blocked = True
            logger.warning(f"YouTube is blocking transcript requests (video {vid})")
            return TRANSCRIPT_UNAVAILABLE
        except Exception as e:
            logger.warning(f"Unexpected error fetching transcript for {vid}: {e}")
            return TRANSCRIPT_UNAVAILABLE

        self._ip_blocked = False
        text = " ".join(s["text"] for s in snippets if s.get("text")).strip()
        return text or TRANSCRIPT_UNAVAILABLE
