from __future__ import annotations

"""Chat session and message history routes."""

import logging

from flask import Blueprint, request, jsonify, current_app

from ..app import get_repo

logger = logging.getLogger(__name__)

sessions_bp = Blueprint("sessions", __name__)


def session_to_wire(session: dict) -> dict:
    return {
        "id": session["id"],
        "agent": session.get("agent"),
        "title": session.get("title"),
        "createdAt": session.get("created_at"),
        "messageCount": session.get("message_count", 0),
    }


def message_to_wire(message: dict) -> dict:
    """Shape a stored message for the client; empty attachments are left out."""
    wire = {
        "id": message["id"],
        "role": message["role"],
        "content": message["content"],
        "timestamp": message.get("created_at"),
    }
    for column, key in (("images", "images"), ("charts", "charts"),
                        ("tool_calls", "toolCalls"),
                        ("generated_images", "generatedImages")):
        if message.get(column):
            wire[key] = message[column]
    return wire


@sessions_bp.route("/sessions", methods=["GET"])
def list_sessions():
    """List a user's sessions, newest first."""
    username = request.args.get("username")
    if not username:
        return jsonify({"error": "username required"}), 400
    repo = get_repo(current_app)
    return jsonify([session_to_wire(s) for s in repo.get_sessions(username)])


@sessions_bp.route("/sessions", methods=["POST"])
def create_session():
    repo = get_repo(current_app)
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    if not username:
        return jsonify({"error": "username required"}), 400
    session_id = repo.create_chat_session(
        username, agent=data.get("agent") or None, title=data.get("title") or None,
    )
    return jsonify({"id": session_id}), 201


@sessions_bp.route("/sessions/<int:session_id>", methods=["DELETE"])
def delete_session(session_id):
    """Delete a chat session and its messages."""
    repo = get_repo(current_app)
    if not repo.get_session(session_id):
        return jsonify({"error": "Session not found"}), 404
    repo.delete_session(session_id)
    return jsonify({"ok": True})


@sessions_bp.route("/sessions/<int:session_id>", methods=["PATCH"])
def rename_session(session_id):
    repo = get_repo(current_app)
    if not repo.get_session(session_id):
        return jsonify({"error": "Session not found"}), 404
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    if not title:
        return jsonify({"error": "title required"}), 400
    repo.rename_session(session_id, title)
    return jsonify({"ok": True})


@sessions_bp.route("/messages", methods=["GET"])
def list_messages():
    session_id = request.args.get("session_id", type=int)
    if not session_id:
        return jsonify({"error": "session_id required"}), 400
    repo = get_repo(current_app)
    return jsonify([message_to_wire(m) for m in repo.get_session_messages(session_id)])


@sessions_bp.route("/messages", methods=["POST"])
def append_message():
    """Append a message. Body: {session_id, role, content, images?, charts?, toolCalls?, generatedImages?}"""
    repo = get_repo(current_app)
    data = request.get_json(silent=True) or {}
    session_id = data.get("session_id")
    role = data.get("role")
    content = data.get("content")
    if not session_id or not role or content is None:
        return jsonify({"error": "session_id, role, content required"}), 400
    try:
        session_id = int(session_id)
    except (TypeError, ValueError):
        return jsonify({"error": "session_id must be an integer"}), 400
    if not repo.get_session(session_id):
        return jsonify({"error": "Session not found"}), 404

    images = data.get("images") or data.get("imageData")
    if isinstance(images, dict):
        images = [images]
    message_id = repo.insert_chat_message(
        session_id, role, content,
        images=images,
        charts=data.get("charts"),
        tool_calls=data.get("toolCalls"),
        generated_images=data.get("generatedImages"),
    )
    return jsonify({"ok": True, "id": message_id}), 201
