from __future__ import annotations

"""Direct tool invocation routes."""

from flask import Blueprint, request, jsonify, current_app

from ...tools.declarations import TOOL_DECLARATIONS
from ..app import get_dispatcher

tools_bp = Blueprint("tools", __name__)


@tools_bp.route("/tools", methods=["GET"])
def list_tools():
    return jsonify({"tools": TOOL_DECLARATIONS})


@tools_bp.route("/tools/<name>", methods=["POST"])
def run_tool(name):
    """Run one tool against the posted channel. Failures come back as {"error"} with 200.

    Body: {"args": dict, "channel": ChannelDocument}
    """
    data = request.get_json(silent=True) or {}
    args = data.get("args")
    if not isinstance(args, dict):
        args = {}
    result = get_dispatcher(current_app).dispatch(name, args, data.get("channel"))
    return jsonify(result.to_dict())
