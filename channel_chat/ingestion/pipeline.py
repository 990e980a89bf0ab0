from __future__ import annotations

import enum
import logging
from dataclasses import replace

from ..models import TRANSCRIPT_UNAVAILABLE, ChannelDocument
from .transcript_fetcher import TranscriptFetcher
from .youtube_client import PAGE_SIZE, YouTubeDataClient, parse_channel_reference

logger = logging.getLogger(__name__)

DEFAULT_MAX_VIDEOS = 10
MAX_VIDEOS_CAP = 100


class RunState(enum.Enum):
    RESOLVING_CHANNEL = "resolving channel"
    LISTING_VIDEOS = "listing videos"
    FETCHING_METADATA = "fetching metadata"
    FETCHING_TRANSCRIPTS = "fetching transcripts"
    COMPLETE = "complete"


def clamp_max_videos(value, default: int = DEFAULT_MAX_VIDEOS, cap: int = MAX_VIDEOS_CAP) -> int:
    """Clamp a requested video count to [1, cap]; missing, zero or junk means default.

    Decimal strings truncate toward zero ("2.5" -> 2).
    """
    try:
        requested = int(float(value))
    except (TypeError, ValueError, OverflowError):
        requested = 0
    if not requested:
        requested = default
    return min(max(1, requested), cap)


def progress(step: str, current: int, total: int) -> dict:
    return {"type": "progress", "step": step, "current": current, "total": total}


class ChannelIngestionPipeline:
    """Builds a ChannelDocument for one channel: resolve -> list -> metadata -> transcripts.

    ``run`` is a generator of progress events ending in exactly one
    terminal ``complete`` or ``error`` event. Calls are made one after
    another; closing the generator abandons the run at the next event.
    """

    def __init__(self, youtube_client: YouTubeDataClient,
                 transcript_fetcher: TranscriptFetcher,
                 default_max_videos: int = DEFAULT_MAX_VIDEOS,
                 max_videos_cap: int = MAX_VIDEOS_CAP):
        self.youtube = youtube_client
        self.transcripts = transcript_fetcher
        self.default_max_videos = default_max_videos
        self.max_videos_cap = max_videos_cap

    def run(self, channel_input: str, max_videos=None):
        """Yield progress dicts, then {"type": "complete", "data": ...} or {"type": "error"}.

        Events:
            {"type": "progress", "step": "channel", "current": 0, "total": max}
            {"type": "progress", "step": "videos", "current": int, "total": int}
            {"type": "progress", "step": "transcript", "current": int, "total": int}
            {"type": "complete", "data": ChannelDocument dict}
            {"type": "error", "error": str}
        """
        state = RunState.RESOLVING_CHANNEL
        try:
            if not self.youtube.configured:
                raise ValueError("YouTube API key not configured")

            limit = clamp_max_videos(max_videos, self.default_max_videos, self.max_videos_cap)
            ref = parse_channel_reference(channel_input)

            yield progress("channel", 0, limit)
            channel = self.youtube.resolve_channel(ref)

            state = RunState.LISTING_VIDEOS
            video_ids = self.youtube.list_upload_ids(channel["uploads_playlist_id"], limit)
            logger.info(f"Listed {len(video_ids)} uploads for {channel['title']}")

            state = RunState.FETCHING_METADATA
            document = ChannelDocument(channel["channel_id"], channel["title"])
            seen = set()
            for start in range(0, len(video_ids), PAGE_SIZE):
                yield progress("videos", len(document.videos), len(video_ids))
                batch = self.youtube.fetch_videos(video_ids[start:start + PAGE_SIZE])

                state = RunState.FETCHING_TRANSCRIPTS
                for video in batch:
                    if video.video_id in seen:
                        continue
                    seen.add(video.video_id)
                    yield progress("transcript", len(document.videos) + 1, len(video_ids))
                    document.videos.append(self._with_transcript(video))
                state = RunState.FETCHING_METADATA

            state = RunState.COMPLETE
            logger.info(
                f"Ingested {len(document.videos)} videos from {document.channel_title}"
            )
            yield {"type": "complete", "data": document.to_dict()}
        except Exception as e:
            logger.error(f"Ingestion failed while {state.value}: {e}", exc_info=True)
            yield {"type": "error", "error": str(e) or "Failed to fetch channel data"}

    def _with_transcript(self, video):
        try:
            transcript = self.transcripts.fetch_transcript(video.video_id)
        except Exception as e:
            logger.warning(f"Transcript fetch for {video.video_id} failed: {e}")
            transcript = TRANSCRIPT_UNAVAILABLE
        return replace(video, transcript=transcript)
