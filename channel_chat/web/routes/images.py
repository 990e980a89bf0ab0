from __future__ import annotations

"""Image generation route."""

import logging

from flask import Blueprint, request, jsonify, current_app

from ...agents.image_generator import ImageGenerationError
from ..app import get_image_generator

logger = logging.getLogger(__name__)

images_bp = Blueprint("images", __name__)


@images_bp.route("/generate-image", methods=["POST"])
def generate_image():
    """Body: {"prompt": str, "anchorImageBase64": str?, "mimeType": str?}"""
    data = request.get_json(silent=True) or {}
    prompt = data.get("prompt") or ""
    anchor = data.get("anchorImage")
    if not (isinstance(anchor, dict) and anchor.get("data")):
        anchor = None
        if data.get("anchorImageBase64"):
            anchor = {
                "data": data["anchorImageBase64"],
                "mimeType": data.get("mimeType") or "image/png",
            }
    if not prompt and anchor is None:
        return jsonify({"error": "prompt or anchorImageBase64 required"}), 400

    generator = get_image_generator(current_app)
    if not generator.configured:
        return jsonify({"error": "Add GEMINI_API_KEY to .env to enable image generation"}), 500

    try:
        result = generator.generate(prompt, anchor_image=anchor)
    except ImageGenerationError as e:
        logger.warning(f"Image generation failed: {e}")
        return jsonify({"error": str(e)}), 500
    return jsonify(result)
