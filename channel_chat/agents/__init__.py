from __future__ import annotations

from .image_generator import ImageGenerator, ImageGenerationError
from .assistant import ChannelAssistant

__all__ = [
    "ImageGenerator",
    "ImageGenerationError",
    "ChannelAssistant",
]
