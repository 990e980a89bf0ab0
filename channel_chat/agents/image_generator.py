from __future__ import annotations

"""Image generation through the Gemini generateContent REST endpoint."""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OK_FINISH_REASONS = {None, "STOP", "END_TURN"}


class ImageGenerationError(Exception):
    """Raised when no image could be produced for a prompt."""


class ImageGenerator:
    """Single-provider image generator. One call per prompt, no chat history."""

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash-image",
                 timeout: int = 120):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _build_parts(self, prompt: str, anchor_image: Optional[dict]) -> list[dict]:
        text = (
            f"Generate an image: {prompt}"
            if prompt and prompt.strip()
            else "Generate an image based on this reference."
        )
        parts = [{"text": text}]
        # The reference image has to come before the text part
        if anchor_image and anchor_image.get("data"):
            parts.insert(0, {
                "inline_data": {
                    "mime_type": anchor_image.get("mimeType") or "image/png",
                    "data": anchor_image["data"],
                }
            })
        return parts

    def generate(self, prompt: str, anchor_image: Optional[dict] = None) -> dict:
        """Generate one image. Returns {"imageBase64", "mimeType", "text"?}."""
        if not self.configured:
            raise ImageGenerationError("Add GEMINI_API_KEY to .env to enable image generation")

        body = {
            "contents": [{"role": "user", "parts": self._build_parts(prompt, anchor_image)}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        try:
            resp = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Image request to {self.model} failed: {e}")
            raise ImageGenerationError(f"Image generation failed: {e}") from e

        candidate = (data.get("candidates") or [{}])[0]
        block_reason = candidate.get("finishReason") or (
            data.get("promptFeedback") or {}
        ).get("blockReason")
        if block_reason not in OK_FINISH_REASONS:
            raise ImageGenerationError(f"Image generation blocked: {block_reason}")

        parts = (candidate.get("content") or {}).get("parts") or []
        image_part = next((p for p in parts if (p.get("inlineData") or {}).get("data")), None)
        if image_part is None:
            raise ImageGenerationError("No image in response")

        result = {
            "imageBase64": image_part["inlineData"]["data"],
            "mimeType": image_part["inlineData"].get("mimeType") or "image/png",
        }
        text_part = next((p for p in parts if p.get("text")), None)
        if text_part:
            result["text"] = text_part["text"]
        return result
