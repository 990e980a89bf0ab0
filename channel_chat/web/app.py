from __future__ import annotations

"""Flask application factory for the channel chat API."""

import logging

from flask import Flask

from ..config import (
    load_config,
    get_image_config,
    get_ollama_config,
    get_transcript_config,
    get_youtube_config,
)
from ..database.repository import Repository
from ..agents.assistant import ChannelAssistant
from ..agents.image_generator import ImageGenerator
from ..ingestion.pipeline import ChannelIngestionPipeline
from ..ingestion.transcript_fetcher import TranscriptFetcher
from ..ingestion.youtube_client import YouTubeDataClient
from ..tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

LANDING_PAGE = """\
<html>
  <body style="font-family:sans-serif;padding:2rem">
    <h1>Channel Chat API Server</h1>
    <p>Backend is running. <a href="/api/status">Check DB status</a></p>
  </body>
</html>
"""


def create_app(config: dict = None) -> Flask:
    """Create and configure the Flask application."""
    if config is None:
        config = load_config()

    app = Flask(__name__)

    app.config["DB_PATH"] = config["db_path"]
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024  # 10MB JSON bodies
    app.config["YOUTUBE"] = get_youtube_config(config)
    app.config["TRANSCRIPTS"] = get_transcript_config(config)
    app.config["OLLAMA"] = get_ollama_config(config)
    app.config["IMAGES"] = get_image_config(config)

    from .routes.users import users_bp
    from .routes.sessions import sessions_bp
    from .routes.chat import chat_bp
    from .routes.youtube import youtube_bp
    from .routes.tools import tools_bp
    from .routes.images import images_bp
    from .routes.status import status_bp

    app.register_blueprint(users_bp, url_prefix="/api")
    app.register_blueprint(sessions_bp, url_prefix="/api")
    app.register_blueprint(chat_bp, url_prefix="/api")
    app.register_blueprint(youtube_bp, url_prefix="/api")
    app.register_blueprint(tools_bp, url_prefix="/api")
    app.register_blueprint(images_bp, url_prefix="/api")
    app.register_blueprint(status_bp, url_prefix="/api")

    @app.route("/")
    def index():
        return LANDING_PAGE

    return app


def get_repo(app: Flask) -> Repository:
    """Get or create Repository instance for the app."""
    if getattr(app, "_repo", None) is None:
        app._repo = Repository(app.config["DB_PATH"])
    return app._repo


def get_transcript_fetcher(app: Flask) -> TranscriptFetcher:
    if getattr(app, "_transcript_fetcher", None) is None:
        tc = app.config["TRANSCRIPTS"]
        app._transcript_fetcher = TranscriptFetcher(
            preferred_languages=tc["preferred_languages"],
            fallback_to_any_language=tc["fallback_to_any_language"],
            delay_range=tc["delay_range"],
        )
    return app._transcript_fetcher


def get_pipeline(app: Flask) -> ChannelIngestionPipeline:
    if getattr(app, "_pipeline", None) is None:
        yt = app.config["YOUTUBE"]
        client = YouTubeDataClient(
            api_key=yt["api_key"],
            timeout=yt["request_timeout"],
            max_retries=yt["max_retries"],
            retry_base_delay=yt["retry_base_delay"],
        )
        app._pipeline = ChannelIngestionPipeline(
            client,
            get_transcript_fetcher(app),
            default_max_videos=yt["default_max_videos"],
            max_videos_cap=yt["max_videos_cap"],
        )
    return app._pipeline


def get_image_generator(app: Flask) -> ImageGenerator:
    if getattr(app, "_image_generator", None) is None:
        img = app.config["IMAGES"]
        app._image_generator = ImageGenerator(
            api_key=img["api_key"],
            model=img["model"],
            timeout=img["request_timeout"],
        )
    return app._image_generator


def get_dispatcher(app: Flask) -> ToolDispatcher:
    if getattr(app, "_dispatcher", None) is None:
        app._dispatcher = ToolDispatcher(image_generator=get_image_generator(app))
    return app._dispatcher


def get_assistant(app: Flask) -> ChannelAssistant:
    if getattr(app, "_assistant", None) is None:
        ollama = app.config["OLLAMA"]
        app._assistant = ChannelAssistant(
            dispatcher=get_dispatcher(app),
            ollama_url=ollama["ollama_url"],
            model=ollama["model"],
            max_tool_rounds=ollama["max_tool_rounds"],
        )
    return app._assistant
