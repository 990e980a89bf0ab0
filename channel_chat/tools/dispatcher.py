from __future__ import annotations

import logging
import math
from typing import Optional

from ..agents.image_generator import ImageGenerationError
from ..models import VideoRecord, parse_duration, records_from
from .declarations import TOOL_NAMES, canonical_tool_name, required_arguments
from .fields import day_bucket, field_value, parse_number, release_ms, resolve_field
from .results import (
    CHART_METRIC_VS_TIME,
    GENERATED_IMAGE,
    PLAY_VIDEO,
    ToolError,
    ToolResult,
    ToolSuccess,
)
from .selector import select_video
from .stats import describe, numeric_values

logger = logging.getLogger(__name__)


def transcript_text(transcript) -> Optional[str]:
    """Flatten a stored transcript (string or caption segments) to plain text."""
    if transcript is None:
        return None
    if isinstance(transcript, (list, tuple)):
        parts = []
        for segment in transcript:
            if isinstance(segment, str):
                parts.append(segment)
            elif isinstance(segment, dict):
                parts.append(str(segment.get("text") or ""))
        return " ".join(parts)
    return str(transcript)


class ToolDispatcher:
    """Routes a named tool call to the matching handler.

    ``dispatch`` never raises: every path, including unexpected failures,
    comes back as a ToolSuccess or a ToolError.
    """

    def __init__(self, image_generator=None):
        self.image_generator = image_generator
        self._handlers = {
            "compute_stats_json": self._compute_stats,
            "plot_metric_vs_time": self._plot_metric_vs_time,
            "play_video": self._play_video,
            "get_transcript": self._get_transcript,
            "generate_image": self._generate_image,
        }

    def dispatch(self, name: str, args: Optional[dict], channel=None) -> ToolResult:
        tool = canonical_tool_name(name)
        if tool not in TOOL_NAMES:
            return ToolError(f"Unknown tool: {name}")

        args = args if isinstance(args, dict) else {}
        for arg in required_arguments(tool):
            value = args.get(arg)
            if value is None or not str(value).strip():
                return ToolError(f'Missing required argument "{arg}" for tool "{tool}"')

        try:
            return self._handlers[tool](args, records_from(channel))
        except Exception as e:
            logger.exception(f"Tool {tool} failed")
            return ToolError(f"{tool} failed: {e}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _compute_stats(self, args: dict, records: list[dict]) -> ToolResult:
        field = resolve_field(records, str(args["field"]))
        values = numeric_values(records, field)
        if not values:
            available = ", ".join(records[0].keys()) if records else ""
            return ToolError(f'No numeric values for field "{field}". Available: {available}')
        return ToolSuccess({"field": field, **describe(values)})

    def _plot_metric_vs_time(self, args: dict, records: list[dict]) -> ToolResult:
        metric = resolve_field(records, str(args["metric"]))
        points = []
        for record in records:
            x = release_ms(record)
            raw = field_value(record, metric)
            if metric == "duration" and isinstance(raw, str):
                y = parse_duration(raw)
            else:
                y = parse_number(raw)
            if x is None or y is None or not math.isfinite(y):
                continue
            points.append((x, y))

        if not points:
            return ToolError(f'No valid data for metric "{metric}" vs time. Check field name.')

        points.sort(key=lambda p: p[0])
        return ToolSuccess(
            {
                "metric": metric,
                "data": [{"date": day_bucket(x), "value": y} for x, y in points],
            },
            kind=CHART_METRIC_VS_TIME,
        )

    def _play_video(self, args: dict, records: list[dict]) -> ToolResult:
        video = select_video(records, args["selector"])
        if video is None:
            return ToolError(f'Could not find video for selector "{args["selector"]}"')
        card = VideoRecord.from_dict(video)
        return ToolSuccess(
            {
                "video_id": card.video_id,
                "title": card.title,
                "thumbnail_url": card.thumbnail_url,
                "video_url": card.watch_url,
            },
            kind=PLAY_VIDEO,
        )

    def _get_transcript(self, args: dict, records: list[dict]) -> ToolResult:
        video = select_video(records, args["selector"])
        if video is None:
            return ToolError(f'Could not find video for selector "{args["selector"]}"')

        text = transcript_text(video.get("transcript"))
        base = {"video_id": video.get("video_id"), "title": video.get("title")}
        if not text or not text.strip():
            return ToolSuccess(
                {**base, "transcript": None},
                warning="No transcript available for this video.",
            )
        return ToolSuccess({**base, "transcript": text})

    def _generate_image(self, args: dict, records: list[dict]) -> ToolResult:
        if self.image_generator is None:
            return ToolError("Image generation is not configured")
        try:
            image = self.image_generator.generate(
                str(args["prompt"]),
                anchor_image=args.get("anchor_image"),
            )
        except ImageGenerationError as e:
            return ToolError(str(e))
        return ToolSuccess(image, kind=GENERATED_IMAGE)
