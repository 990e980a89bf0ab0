"""Shared test fixtures for Channel Chat tests."""
from __future__ import annotations

import pytest
import requests

from channel_chat.database.connection import init_database
from channel_chat.database.repository import Repository
from channel_chat.models import VideoRecord


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database with the full schema."""
    db_path = str(tmp_path / "test.db")
    conn = init_database(db_path)
    conn.close()
    return db_path


@pytest.fixture
def repo(tmp_db):
    """Create a Repository backed by the temp database."""
    r = Repository(tmp_db)
    yield r
    r.close()


@pytest.fixture
def records():
    """Three videos in upload order (newest first, as the API lists them)."""
    return [
        {
            "video_id": "aaaaaaaaaa1",
            "title": "Intro",
            "description": "Welcome to the channel",
            "transcript": "hello and welcome",
            "duration": "PT1H2M3S",
            "release_date": "2024-03-05T12:00:00Z",
            "view_count": 10,
            "like_count": 1,
            "comment_count": 0,
            "video_url": "https://www.youtube.com/watch?v=aaaaaaaaaa1",
            "thumbnail_url": "https://i.ytimg.com/vi/aaaaaaaaaa1/hqdefault.jpg",
        },
        {
            "video_id": "bbbbbbbbbb2",
            "title": "Deep Dive",
            "description": "The long one",
            "transcript": [{"text": "part one"}, {"text": "part two"}],
            "duration": "PT15M33S",
            "release_date": "2024-01-01T08:30:00Z",
            "view_count": 50,
            "like_count": 7,
            "comment_count": 3,
            "video_url": "https://www.youtube.com/watch?v=bbbbbbbbbb2",
            "thumbnail_url": None,
        },
        {
            "video_id": "cccccccccc3",
            "title": "Finale",
            "description": "",
            "transcript": "",
            "duration": "PT45S",
            "release_date": "2024-02-10T00:00:00Z",
            "view_count": 5,
            "like_count": 2,
            "comment_count": 1,
            "video_url": "https://www.youtube.com/watch?v=cccccccccc3",
            "thumbnail_url": "https://i.ytimg.com/vi/cccccccccc3/hqdefault.jpg",
        },
    ]


@pytest.fixture
def channel(records):
    return {"channel_id": "UC_test", "channel_title": "Test Channel", "videos": records}


# ----------------------------------------------------------------------
# Fakes for external collaborators
# ----------------------------------------------------------------------


class FakeYouTubeClient:
    """In-memory stand-in for YouTubeDataClient."""

    def __init__(self, upload_count=12, configured=True, fail_on=None):
        self.upload_ids = [f"vid{i:08d}" for i in range(upload_count)]
        self.configured = configured
        self.fail_on = fail_on
        self.calls = []

    def resolve_channel(self, ref):
        self.calls.append(("resolve_channel", ref))
        if self.fail_on == "resolve":
            raise ValueError(f"Channel not found: {ref.value}")
        return {
            "channel_id": "UC_fake",
            "uploads_playlist_id": "UU_fake",
            "title": "Fake Channel",
        }

    def list_upload_ids(self, playlist_id, max_videos):
        self.calls.append(("list_upload_ids", playlist_id, max_videos))
        if self.fail_on == "list":
            raise RuntimeError("YouTube API: 403 quotaExceeded")
        return self.upload_ids[:max_videos]

    def fetch_videos(self, video_ids):
        self.calls.append(("fetch_videos", list(video_ids)))
        return [
            VideoRecord(
                video_id=vid,
                title=f"Video {vid}",
                duration="PT1M",
                release_date="2024-01-01T00:00:00Z",
                view_count=100,
                video_url=f"https://www.youtube.com/watch?v={vid}",
            )
            for vid in video_ids
        ]


class FakeTranscriptFetcher:
    def __init__(self, transcripts=None, raise_for=()):
        self.transcripts = transcripts or {}
        self.raise_for = set(raise_for)
        self.fetched = []
        self.is_blocked = False

    def fetch_transcript(self, video_id):
        self.fetched.append(video_id)
        if video_id in self.raise_for:
            raise RuntimeError("connection reset")
        return self.transcripts.get(video_id, f"transcript of {video_id}")


class FakeImageGenerator:
    configured = True

    def __init__(self, error=None):
        self.error = error
        self.prompts = []

    def generate(self, prompt, anchor_image=None):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return {"imageBase64": "aW1n", "mimeType": "image/png", "text": "Here you go"}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self._payload = payload if payload is not None else {}
        self.status_code = status_code
        self.text = text
        self.headers = {}

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Routes GETs to canned responses keyed by endpoint name."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def get(self, url, params=None, timeout=None):
        endpoint = url.rsplit("/", 1)[-1]
        self.requests.append({"endpoint": endpoint, "params": dict(params or {}), "timeout": timeout})
        handler = self.routes[endpoint]
        return handler(params or {}) if callable(handler) else handler


@pytest.fixture
def fake_youtube():
    return FakeYouTubeClient()


@pytest.fixture
def fake_transcripts():
    return FakeTranscriptFetcher()


@pytest.fixture
def fake_images():
    return FakeImageGenerator()


@pytest.fixture
def flask_app(tmp_db, monkeypatch):
    """Create a Flask test app with all routes registered and no API keys."""
    from channel_chat.web.app import create_app

    for var in ("YOUTUBE_API_KEY", "REACT_APP_YOUTUBE_API_KEY",
                "GEMINI_API_KEY", "REACT_APP_GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)

    config = {
        "db_path": tmp_db,
        "ollama": {
            "url": "http://localhost:11434",
            "model": "llama3.2",
        },
    }
    app = create_app(config)
    app.config["TESTING"] = True
    yield app
    if getattr(app, "_repo", None) is not None:
        app._repo.close()


@pytest.fixture
def client(flask_app):
    """Flask test client."""
    return flask_app.test_client()
