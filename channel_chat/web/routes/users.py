from __future__ import annotations

"""User registration and login routes."""

import logging

from flask import Blueprint, request, jsonify, current_app
from werkzeug.security import check_password_hash, generate_password_hash

from ..app import get_repo

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)


def _clean(value):
    return str(value).strip() if value else None


@users_bp.route("/users", methods=["POST"])
def create_user():
    """Register a user. Body: {username, password, email?, firstName?, lastName?}"""
    repo = get_repo(current_app)
    data = request.get_json(silent=True) or {}
    username = _clean(data.get("username"))
    password = data.get("password")
    if not username or not password:
        return jsonify({"error": "Username and password required"}), 400

    username = username.lower()
    user_id = repo.create_user({
        "username": username,
        "password_hash": generate_password_hash(password),
        "email": (_clean(data.get("email")) or "").lower() or None,
        "first_name": _clean(data.get("firstName")),
        "last_name": _clean(data.get("lastName")),
    })
    if user_id is None:
        return jsonify({"error": "Username already exists"}), 400

    logger.info(f"Registered user {username}")
    return jsonify({"ok": True}), 201


@users_bp.route("/users/login", methods=["POST"])
def login():
    repo = get_repo(current_app)
    data = request.get_json(silent=True) or {}
    username = _clean(data.get("username"))
    password = data.get("password")
    if not username or not password:
        return jsonify({"error": "Username and password required"}), 400

    username = username.lower()
    user = repo.get_user(username)
    if not user:
        return jsonify({"error": "User not found"}), 401
    if not check_password_hash(user["password_hash"], password):
        return jsonify({"error": "Invalid password"}), 401

    return jsonify({
        "ok": True,
        "username": username,
        "firstName": user["first_name"],
        "lastName": user["last_name"],
    })
