from __future__ import annotations

from .declarations import TOOL_DECLARATIONS, TOOL_NAMES, ollama_tools
from .dispatcher import ToolDispatcher
from .results import ToolError, ToolResult, ToolSuccess

__all__ = [
    "TOOL_DECLARATIONS",
    "TOOL_NAMES",
    "ollama_tools",
    "ToolDispatcher",
    "ToolError",
    "ToolResult",
    "ToolSuccess",
]
