from __future__ import annotations

"""Assistant chat route: one user turn in, one assistant turn out."""

import logging

from flask import Blueprint, request, jsonify, current_app

from ..app import get_assistant, get_repo

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


@chat_bp.route("/chat", methods=["POST"])
def send_message():
    """Send a message and get the assistant's reply.

    Body: {"session_id": int, "message": str, "channel": ChannelDocument?}
    """
    repo = get_repo(current_app)
    assistant = get_assistant(current_app)
    data = request.get_json(silent=True) or {}

    session_id = data.get("session_id")
    message = (data.get("message") or "").strip()
    channel = data.get("channel")

    if not session_id or not message:
        return jsonify({"error": "session_id and message required"}), 400

    session = repo.get_session(session_id)
    if not session:
        return jsonify({"error": "Session not found"}), 404

    history_limit = current_app.config["OLLAMA"]["history_limit"]
    history = repo.get_session_messages(session_id, limit=history_limit)

    user_msg_id = repo.insert_chat_message(session_id, "user", message)

    try:
        outcome = assistant.chat(message, channel=channel, history=history)
    except Exception as e:
        logger.exception("Assistant chat error")
        outcome = {
            "response": f"Sorry, I encountered an error: {str(e)}",
            "tool_calls": [],
            "charts": [],
            "play_cards": [],
            "generated_images": [],
        }

    assistant_msg_id = repo.insert_chat_message(
        session_id, "assistant", outcome["response"],
        charts=outcome["charts"],
        tool_calls=outcome["tool_calls"],
        generated_images=outcome["generated_images"],
    )

    # Title the session from its first message
    if not session.get("title"):
        repo.rename_session(session_id, message[:50] + ("..." if len(message) > 50 else ""))

    return jsonify({
        "response": outcome["response"],
        "user_message_id": user_msg_id,
        "assistant_message_id": assistant_msg_id,
        "toolCalls": outcome["tool_calls"],
        "charts": outcome["charts"],
        "playCards": outcome["play_cards"],
        "generatedImages": outcome["generated_images"],
    })
