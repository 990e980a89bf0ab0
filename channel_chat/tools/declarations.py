from __future__ import annotations

"""Function-calling declarations for the channel tools.

Tool names and required argument names are a compatibility contract with
existing agent configurations; do not rename them.
"""

FIELD_NOTE = (
    "Use the exact field name from the channel JSON. Common fields: view_count, "
    "like_count, comment_count, duration (ISO 8601), release_date. For duration "
    "you may need to parse to seconds."
)

TOOL_DECLARATIONS = [
    {
        "name": "generate_image",
        "description": (
            "Generate an image from a text prompt. Optionally, the user can attach an "
            "anchor/reference image to modify or use as inspiration. Use when they ask "
            "to generate, create, or make an image."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "Detailed text prompt describing the image to generate.",
                },
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "plot_metric_vs_time",
        "description": (
            "Plot any numeric field (view_count, like_count, comment_count, etc.) vs "
            "time (release_date) for YouTube channel videos. Use when the user asks to "
            "plot, graph, or visualize a metric over time."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "metric": {
                    "type": "string",
                    "description": (
                        "Numeric field to plot on y-axis. Common: view_count, like_count, "
                        "comment_count. " + FIELD_NOTE
                    ),
                },
            },
            "required": ["metric"],
        },
    },
    {
        "name": "play_video",
        "description": (
            "Open/play a YouTube video from the loaded channel data. The user can specify "
            'by: title (e.g. "play the asbestos video"), ordinal (e.g. "play the first '
            'video", "play video 3"), or "most viewed" for the highest view_count video. '
            "Display a clickable card with title and thumbnail."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "selector": {
                    "type": "string",
                    "description": (
                        'How to pick the video: "first", "second", "third", "1", "2", etc. '
                        'for ordinal; "most viewed" for highest views; or a partial title '
                        'match (e.g. "asbestos").'
                    ),
                },
            },
            "required": ["selector"],
        },
    },
    {
        "name": "get_transcript",
        "description": (
            "Get the transcript/captions of a video from the loaded channel data. The "
            'user can specify by ordinal (e.g. "first", "second", "3"), "most viewed" or '
            "a partial title. Use when they ask for transcript, captions, or what was "
            "said in a video."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "selector": {
                    "type": "string",
                    "description": (
                        'How to pick the video: "first", "second", "third", "1", "2", '
                        'etc., "most viewed", or a partial title.'
                    ),
                },
            },
            "required": ["selector"],
        },
    },
    {
        "name": "compute_stats_json",
        "description": (
            "Compute mean, median, std, min, max for any numeric field in the channel "
            "JSON. Use when the user asks for statistics, average, distribution, or "
            "summary of a numeric column (e.g. view_count, like_count, comment_count)."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "field": {
                    "type": "string",
                    "description": "Exact field name from channel JSON. " + FIELD_NOTE,
                },
            },
            "required": ["field"],
        },
    },
]

# Older agent configurations used camelCase for the image tool
TOOL_ALIASES = {"generateImage": "generate_image"}

TOOL_NAMES = tuple(d["name"] for d in TOOL_DECLARATIONS)


def canonical_tool_name(name: str) -> str:
    return TOOL_ALIASES.get(name, name)


def required_arguments(name: str) -> list[str]:
    name = canonical_tool_name(name)
    for declaration in TOOL_DECLARATIONS:
        if declaration["name"] == name:
            return list(declaration["parameters"]["required"])
    return []


def ollama_tools() -> list[dict]:
    """Declarations wrapped in the function-calling format Ollama expects."""
    return [{"type": "function", "function": d} for d in TOOL_DECLARATIONS]
