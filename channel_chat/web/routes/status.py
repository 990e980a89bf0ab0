from __future__ import annotations

"""Status API route."""

from flask import Blueprint, jsonify, current_app

from ..app import get_repo

status_bp = Blueprint("status", __name__)


@status_bp.route("/status", methods=["GET"])
def get_status():
    """Row counts, plus which external services have credentials."""
    repo = get_repo(current_app)
    counts = repo.get_counts()
    return jsonify({
        "usersCount": counts["users"],
        "sessionsCount": counts["sessions"],
        "messagesCount": counts["messages"],
        "youtubeConfigured": bool(current_app.config["YOUTUBE"]["api_key"]),
        "imagesConfigured": bool(current_app.config["IMAGES"]["api_key"]),
    })
