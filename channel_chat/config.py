import os
import logging
from pathlib import Path

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


def _project_path(value: str) -> str:
    path = Path(value).expanduser()
    return str(path if path.is_absolute() else PROJECT_ROOT / path)


def load_config(path: str = None) -> dict:
    """Read config.yaml (or ``path``, or $CHANCHAT_CONFIG) after loading .env.

    Relative database and log paths are anchored at the project root.
    $CHANCHAT_DB overrides the database location.
    """
    load_dotenv(PROJECT_ROOT / ".env")

    config_path = Path(path or os.environ.get("CHANCHAT_CONFIG") or PROJECT_ROOT / "config.yaml")
    config = {}
    if config_path.exists():
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
        logger.debug(f"Loaded config from {config_path}")

    database = config.get("database") or {}
    logging_cfg = config.get("logging") or {}

    config["db_path"] = _project_path(
        _env("CHANCHAT_DB") or database.get("path", "data/channel_chat.db")
    )
    config["log_file"] = _project_path(logging_cfg["file"]) if logging_cfg.get("file") else None
    config["log_level"] = str(logging_cfg.get("level", "INFO")).upper()
    return config


def _env(*names: str):
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def get_youtube_config(config: dict) -> dict:
    """Extract YouTube Data API settings with defaults."""
    yt = config.get("youtube", {})
    return {
        "api_key": _env("YOUTUBE_API_KEY", "REACT_APP_YOUTUBE_API_KEY") or yt.get("api_key"),
        "default_max_videos": yt.get("default_max_videos", 10),
        "max_videos_cap": yt.get("max_videos_cap", 100),
        "request_timeout": yt.get("request_timeout", 15),
        "max_retries": yt.get("max_retries", 3),
        "retry_base_delay": yt.get("retry_base_delay", 2.0),
    }


def get_transcript_config(config: dict) -> dict:
    """Extract transcript-specific settings with defaults."""
    tc = config.get("transcripts", {})
    return {
        "preferred_languages": tc.get("preferred_languages", ["en", "en-US", "en-GB"]),
        "fallback_to_any_language": tc.get("fallback_to_any_language", True),
        "delay_range": tuple(tc.get("delay_range", [0.0, 0.0])),
    }


def get_ollama_config(config: dict) -> dict:
    """Extract Ollama-specific settings with defaults."""
    ollama = config.get("ollama", {})
    return {
        "model": ollama.get("model", "llama3.2"),
        "ollama_url": ollama.get("url", "http://localhost:11434"),
        "max_tool_rounds": ollama.get("max_tool_rounds", 4),
        "history_limit": ollama.get("history_limit", 20),
    }


def get_image_config(config: dict) -> dict:
    """Extract image-generation settings with defaults."""
    img = config.get("images", {})
    return {
        "api_key": _env("GEMINI_API_KEY", "REACT_APP_GEMINI_API_KEY") or img.get("api_key"),
        "model": img.get("model", "gemini-2.5-flash-image"),
        "request_timeout": img.get("request_timeout", 120),
    }
