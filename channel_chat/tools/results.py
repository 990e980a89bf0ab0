from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

CHART_METRIC_VS_TIME = "metric_vs_time"
PLAY_VIDEO = "play_video"
GENERATED_IMAGE = "generated_image"


@dataclass(frozen=True)
class ToolSuccess:
    """A completed tool call.

    ``warning`` marks a partial success: the call resolved its target but
    part of the data (e.g. the transcript) was unavailable.
    """

    payload: dict = field(default_factory=dict)
    kind: Optional[str] = None
    warning: Optional[str] = None

    ok = True

    def to_dict(self) -> dict:
        data = {}
        if self.kind == CHART_METRIC_VS_TIME:
            data["_chartType"] = CHART_METRIC_VS_TIME
        elif self.kind == PLAY_VIDEO:
            data["_playVideo"] = True
        elif self.kind == GENERATED_IMAGE:
            data["_generatedImage"] = True
        data.update(self.payload)
        if self.warning:
            data["error"] = self.warning
        return data


@dataclass(frozen=True)
class ToolError:
    error: str

    ok = False

    def to_dict(self) -> dict:
        return {"error": self.error}


ToolResult = Union[ToolSuccess, ToolError]
