from __future__ import annotations

import sys
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markdown import Markdown
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

from .config import (
    load_config,
    get_image_config,
    get_ollama_config,
    get_transcript_config,
    get_youtube_config,
)
from .agents.assistant import ChannelAssistant
from .agents.image_generator import ImageGenerator
from .ingestion.pipeline import ChannelIngestionPipeline
from .ingestion.transcript_fetcher import TranscriptFetcher
from .ingestion.youtube_client import YouTubeDataClient
from .models import TRANSCRIPT_UNAVAILABLE, ChannelDocument, records_from
from .tools.dispatcher import ToolDispatcher
from .utils.logging_config import setup_logging

console = Console()
logger = logging.getLogger(__name__)

STEP_LABELS = {
    "channel": "Resolving channel",
    "videos": "Fetching video metadata",
    "transcript": "Fetching transcripts",
}


def _build_transcript_fetcher(config: dict) -> TranscriptFetcher:
    tc = get_transcript_config(config)
    return TranscriptFetcher(
        preferred_languages=tc["preferred_languages"],
        fallback_to_any_language=tc["fallback_to_any_language"],
        delay_range=tc["delay_range"],
    )


def _build_pipeline(config: dict) -> ChannelIngestionPipeline:
    """Construct the ingestion pipeline from config."""
    yt = get_youtube_config(config)
    client = YouTubeDataClient(
        api_key=yt["api_key"],
        timeout=yt["request_timeout"],
        max_retries=yt["max_retries"],
        retry_base_delay=yt["retry_base_delay"],
    )
    return ChannelIngestionPipeline(
        client,
        _build_transcript_fetcher(config),
        default_max_videos=yt["default_max_videos"],
        max_videos_cap=yt["max_videos_cap"],
    )


def _build_dispatcher(config: dict) -> ToolDispatcher:
    img = get_image_config(config)
    generator = ImageGenerator(img["api_key"], model=img["model"], timeout=img["request_timeout"])
    return ToolDispatcher(image_generator=generator)


def _load_channel(path: str) -> dict:
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] Could not read channel file {path}: {e}")
        sys.exit(1)


def _format_runtime(seconds: int) -> str:
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes:02d}m {secs:02d}s" if hours else f"{minutes}m {secs:02d}s"


def _parse_tool_args(pairs: tuple) -> dict:
    args = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--arg")
        args[key.strip()] = value
    return args


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to a config.yaml")
@click.pass_context
def cli(ctx, verbose, config_path):
    """Channel Chat - Download a YouTube channel and chat with its data."""
    ctx.ensure_object(dict)
    config = load_config(config_path)
    if verbose:
        config["log_level"] = "DEBUG"
    setup_logging(config.get("log_file"), config["log_level"])
    ctx.obj["config"] = config


@cli.command()
@click.argument("channel")
@click.option("--max-videos", "-n", type=int, default=None, help="Max videos to download (1-100)")
@click.option("--output", "-o", default=None, help="Where to write the channel JSON")
@click.pass_context
def download(ctx, channel, max_videos, output):
    """Download a channel's recent videos with metadata and transcripts.

    CHANNEL can be a URL, @handle, or channel ID.

    \b
    Examples:
        chanchat download @veritasium
        chanchat download https://www.youtube.com/@veritasium -n 25
        chanchat download UCxxxxxxxxxxxxxxxxxxxxxx -o data/channel.json
    """
    config = ctx.obj["config"]
    pipeline = _build_pipeline(config)

    document = None
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Resolving channel", total=None)

        for event in pipeline.run(channel, max_videos):
            if event["type"] == "progress":
                progress.update(
                    task,
                    description=STEP_LABELS.get(event["step"], event["step"]),
                    completed=event["current"],
                    total=event["total"] or None,
                )
            elif event["type"] == "complete":
                document = event["data"]
                progress.update(task, description="Done", completed=len(document["videos"]),
                                total=len(document["videos"]) or 1)
            elif event["type"] == "error":
                progress.console.print(f"[red]Error:[/red] {event['error']}")

    if document is None:
        sys.exit(1)

    if output is None:
        output = f"{document['channel_id']}.json"
    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w") as f:
        json.dump(document, f, indent=2)

    downloaded = ChannelDocument.from_dict(document)
    missing = sum(1 for v in downloaded.videos if v.transcript == TRANSCRIPT_UNAVAILABLE)
    runtime = sum(v.duration_seconds or 0 for v in downloaded.videos)
    console.print()
    console.print(f"[green]Downloaded:[/green] {downloaded.channel_title}")
    console.print(f"  Videos:               {len(downloaded.videos)}")
    console.print(f"  Without transcript:   {missing}")
    console.print(f"  Total runtime:        {_format_runtime(runtime)}")
    console.print(f"  Saved to:             {out_path}")


@cli.command()
@click.argument("video")
@click.pass_context
def transcript(ctx, video):
    """Fetch the transcript for one video (URL or 11-character id)."""
    fetcher = _build_transcript_fetcher(ctx.obj["config"])
    with console.status(f"[bold]Fetching transcript: {video}...[/bold]"):
        text = fetcher.fetch_transcript(video)
    if fetcher.is_blocked:
        console.print("[yellow]YouTube is blocking transcript requests. Try again later.[/yellow]")
    console.print(text)


@cli.command()
@click.argument("name")
@click.option("--data", "-d", "data_file", required=True, help="Channel JSON file")
@click.option("--arg", "-a", "arg_pairs", multiple=True, help="Tool argument as key=value")
@click.pass_context
def tool(ctx, name, data_file, arg_pairs):
    """Run one tool against a downloaded channel and print the result.

    \b
    Examples:
        chanchat tool compute_stats_json -d channel.json -a field=view_count
        chanchat tool plot_metric_vs_time -d channel.json -a metric=likes
        chanchat tool play_video -d channel.json -a "selector=most viewed"
    """
    channel = _load_channel(data_file)
    dispatcher = _build_dispatcher(ctx.obj["config"])
    result = dispatcher.dispatch(name, _parse_tool_args(arg_pairs), channel)
    console.print_json(json.dumps(result.to_dict()))
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.option("--data", "-d", "data_file", required=True, help="Channel JSON file")
@click.pass_context
def chat(ctx, data_file):
    """Start an interactive chat about a downloaded channel.

    \b
    Special commands inside the chat:
        /fields     Show the fields available in the data
        /quit       Exit the chat
    """
    config = ctx.obj["config"]
    channel = _load_channel(data_file)
    records = records_from(channel)
    ollama_cfg = get_ollama_config(config)

    import requests as req
    try:
        req.get(ollama_cfg["ollama_url"], timeout=3)
    except req.RequestException:
        console.print("[red]Error:[/red] Ollama is not running.")
        console.print("Start it with: [bold]ollama serve[/bold]")
        sys.exit(1)

    assistant = ChannelAssistant(
        dispatcher=_build_dispatcher(config),
        ollama_url=ollama_cfg["ollama_url"],
        model=ollama_cfg["model"],
        max_tool_rounds=ollama_cfg["max_tool_rounds"],
    )

    console.print()
    console.print(Panel.fit(
        f"[bold green]{channel.get('channel_title') or 'Channel'}[/bold green]\n"
        f"[cyan]Videos loaded:[/cyan] {len(records)}\n"
        "\n"
        "[dim]Ask about views, trends over time, or a specific video. Type /quit to exit.[/dim]",
        border_style="green",
    ))
    console.print()

    history = []
    while True:
        try:
            user_input = console.input("[bold green]You:[/bold green] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye.[/dim]")
            break

        if not user_input:
            continue
        if user_input.lower() in ("/quit", "/exit", "/q"):
            console.print("[dim]Goodbye.[/dim]")
            break
        if user_input.lower() == "/fields":
            fields = sorted({k for r in records for k in r})
            console.print(", ".join(fields) or "[yellow]No fields[/yellow]")
            continue

        try:
            with console.status("[bold]Thinking...[/bold]"):
                outcome = assistant.chat(user_input, channel=channel, history=history)
        except Exception as e:
            logger.exception("Assistant chat error")
            console.print(f"[red]Error:[/red] {e}")
            continue

        for call in outcome["tool_calls"]:
            status = "[red]error[/red]" if "error" in call["result"] and len(call["result"]) == 1 else "ok"
            console.print(f"  [dim]tool {call['name']} -> {status}[/dim]")
        for chart in outcome["charts"]:
            _print_chart(chart)
        for card in outcome["play_cards"]:
            console.print(f"  [bold]{card.get('title')}[/bold] {card.get('video_url')}")

        console.print()
        console.print(Markdown(outcome["response"]))
        console.print()

        history.append({"role": "user", "content": user_input})
        history.append({"role": "assistant", "content": outcome["response"]})
        history = history[-ollama_cfg["history_limit"]:]


def _print_chart(chart: dict):
    table = Table(title=f"{chart.get('metric')} over time")
    table.add_column("Date")
    table.add_column(str(chart.get("metric")), justify="right")
    for point in chart.get("data", []):
        table.add_row(str(point.get("date")), str(point.get("value")))
    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", "-p", type=int, default=5000, help="Port to bind to")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def web(ctx, host, port, debug):
    """Start the JSON API server.

    \b
    Examples:
        chanchat web                 # Start on localhost:5000
        chanchat web -p 3001         # Start on port 3001
    """
    config = ctx.obj["config"]

    from .web.app import create_app
    app = create_app(config)

    console.print()
    console.print(Panel.fit(
        f"[bold green]Channel Chat API[/bold green]\n"
        f"[dim]Listening on:[/dim] [bold]http://{host}:{port}[/bold]",
        border_style="green",
    ))
    console.print()

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    cli()
