from __future__ import annotations

"""Channel download (NDJSON progress stream) and on-demand transcript routes."""

import json
import logging

from flask import Blueprint, Response, request, jsonify, current_app, stream_with_context

from ...ingestion.transcript_fetcher import normalize_video_id
from ...models import TRANSCRIPT_UNAVAILABLE
from ..app import get_pipeline, get_transcript_fetcher

logger = logging.getLogger(__name__)

youtube_bp = Blueprint("youtube", __name__)


@youtube_bp.route("/youtube/channel", methods=["POST"])
def download_channel():
    """Stream one JSON object per line until a complete or error event.

    Body: {"channelUrl": str, "maxVideos": int}
    """
    pipeline = get_pipeline(current_app)
    data = request.get_json(silent=True) or {}
    channel_url = data.get("channelUrl") or ""
    max_videos = data.get("maxVideos")

    def generate():
        events = pipeline.run(channel_url, max_videos)
        try:
            for event in events:
                yield json.dumps(event) + "\n"
        finally:
            # Client went away or the run finished; either way stop the pipeline
            events.close()

    return Response(
        stream_with_context(generate()),
        mimetype="application/x-ndjson",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@youtube_bp.route("/transcript", methods=["GET"])
def get_transcript():
    raw_id = (request.args.get("video_id") or "").strip()
    if not raw_id:
        return jsonify({"error": "video_id required"}), 400
    video_id = normalize_video_id(raw_id)
    if not video_id:
        return jsonify({"transcript": TRANSCRIPT_UNAVAILABLE})
    fetcher = get_transcript_fetcher(current_app)
    try:
        transcript = fetcher.fetch_transcript(video_id)
    except Exception as e:
        logger.exception(f"Transcript fetch failed for {video_id}")
        return jsonify({"error": str(e) or "Transcript fetch failed"}), 500
    return jsonify({"transcript": transcript})
