"""Tests for the Gemini image generator. HTTP is replaced with canned responses."""
from __future__ import annotations

import pytest
import requests

from channel_chat.agents.image_generator import ImageGenerationError, ImageGenerator

from conftest import FakeResponse

IMAGE_RESPONSE = {
    "candidates": [{
        "finishReason": "STOP",
        "content": {"parts": [
            {"text": "A red fox in snow"},
            {"inlineData": {"mimeType": "image/jpeg", "data": "Zm94"}},
        ]},
    }],
}


@pytest.fixture
def post(monkeypatch):
    calls = []

    def install(response):
        def fake_post(url, params=None, json=None, timeout=None):
            calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr("channel_chat.agents.image_generator.requests.post", fake_post)
        return calls
    return install


class TestImageGenerator:
    def test_not_configured(self):
        generator = ImageGenerator(None)
        assert not generator.configured
        with pytest.raises(ImageGenerationError, match="GEMINI_API_KEY"):
            generator.generate("a fox")

    def test_success(self, post):
        calls = post(FakeResponse(IMAGE_RESPONSE))
        result = ImageGenerator("key", model="m1", timeout=30).generate("a fox")
        assert result == {"imageBase64": "Zm94", "mimeType": "image/jpeg", "text": "A red fox in snow"}

        call = calls[0]
        assert call["url"].endswith("/models/m1:generateContent")
        assert call["params"] == {"key": "key"}
        assert call["timeout"] == 30
        parts = call["json"]["contents"][0]["parts"]
        assert parts == [{"text": "Generate an image: a fox"}]
        assert call["json"]["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]

    def test_anchor_image_goes_first(self, post):
        calls = post(FakeResponse(IMAGE_RESPONSE))
        ImageGenerator("key").generate("", anchor_image={"data": "YW5j"})
        parts = calls[0]["json"]["contents"][0]["parts"]
        assert parts[0] == {"inline_data": {"mime_type": "image/png", "data": "YW5j"}}
        assert parts[1] == {"text": "Generate an image based on this reference."}

    def test_no_image_part(self, post):
        post(FakeResponse({"candidates": [{"content": {"parts": [{"text": "sorry"}]}}]}))
        with pytest.raises(ImageGenerationError, match="No image in response"):
            ImageGenerator("key").generate("a fox")

    def test_blocked(self, post):
        post(FakeResponse({"candidates": [{"finishReason": "SAFETY"}]}))
        with pytest.raises(ImageGenerationError, match="blocked: SAFETY"):
            ImageGenerator("key").generate("a fox")

    def test_http_error(self, post):
        post(FakeResponse(status_code=400))
        with pytest.raises(ImageGenerationError, match="Image generation failed"):
            ImageGenerator("key").generate("a fox")

    def test_network_error(self, post):
        post(requests.ConnectionError("down"))
        with pytest.raises(ImageGenerationError):
            ImageGenerator("key").generate("a fox")

    def test_default_mime_type(self, post):
        post(FakeResponse({"candidates": [{"content": {"parts": [{"inlineData": {"data": "eA=="}}]}}]}))
        result = ImageGenerator("key").generate("x")
        assert result == {"imageBase64": "eA==", "mimeType": "image/png"}
