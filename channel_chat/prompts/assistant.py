ASSISTANT_SYSTEM_PROMPT = """\
You are a YouTube channel analyst. The user has loaded a JSON document describing \
the videos of one channel and wants to explore it with you.

You have tools. Use them instead of guessing:
- compute_stats_json: mean, median, std, min and max of a numeric field
- plot_metric_vs_time: chart a numeric field against release date
- play_video: show a clickable card for one video
- get_transcript: read what was said in one video
- generate_image: create an image from a text prompt

Pick videos with selectors like "first", "3", "most viewed" or part of a title. \
When a tool returns an error, explain it plainly and suggest a field or selector \
that would work. Keep answers short and concrete; quote numbers from tool results \
rather than restating the whole document."""

MAX_TITLES = 25


def build_channel_context(channel_title: str, records: list[dict]) -> str:
    """Summarise the loaded channel so the model knows what it can ask for."""
    if not records:
        return (
            "No channel data is loaded. Tools that read channel data will fail; "
            "image generation still works."
        )

    fields = ", ".join(records[0].keys())
    lines = [
        f"LOADED CHANNEL: {channel_title or 'Unknown'} ({len(records)} videos)",
        f"FIELDS: {fields}",
        "VIDEOS (in list order):",
    ]
    for i, record in enumerate(records[:MAX_TITLES], 1):
        lines.append(f"  {i}. {record.get('title') or '(untitled)'}")
    if len(records) > MAX_TITLES:
        lines.append(f"  ... and {len(records) - MAX_TITLES} more")
    return "\n".join(lines)
