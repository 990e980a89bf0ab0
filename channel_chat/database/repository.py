from __future__ import annotations

import json
import sqlite3
import logging
from typing import Optional

from .connection import init_database

logger = logging.getLogger(__name__)

JSON_COLUMNS = ("images", "charts", "tool_calls", "generated_images")


def _dump(value) -> Optional[str]:
    return json.dumps(value) if value else None


def _load(value):
    if not value:
        return None
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return None


class Repository:
    """Users, chat sessions and chat messages."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = init_database(self.db_path)
        return self._conn

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, data: dict) -> Optional[int]:
        """Insert a user. Returns the new id, or None if the username is taken."""
        try:
            cur = self.conn.execute(
                """INSERT INTO users (username, password_hash, email, first_name, last_name)
                   VALUES (:username, :password_hash, :email, :first_name, :last_name)""",
                {
                    "username": data["username"],
                    "password_hash": data["password_hash"],
                    "email": data.get("email"),
                    "first_name": data.get("first_name"),
                    "last_name": data.get("last_name"),
                },
            )
        except sqlite3.IntegrityError:
            return None
        self.conn.commit()
        return cur.lastrowid

    def get_user(self, username: str) -> Optional[dict]:
        row = self.conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()
        return dict(row) if row else None

    # ------------------------------------------------------------------
    # Chat Sessions
    # ------------------------------------------------------------------

    def create_chat_session(self, username: str, agent: Optional[str] = None,
                            title: Optional[str] = None) -> int:
        cur = self.conn.execute(
            "INSERT INTO chat_sessions (username, agent, title) VALUES (?, ?, ?)",
            (username, agent, title),
        )
        self.conn.commit()
        return cur.lastrowid

    def get_session(self, session_id: int) -> Optional[dict]:
        row = self.conn.execute(
            "SELECT * FROM chat_sessions WHERE id = ?", (session_id,)
        ).fetchone()
        return dict(row) if row else None

    def get_sessions(self, username: str) -> list[dict]:
        """A user's sessions, newest first, with message counts."""
        rows = self.conn.execute("""
            SELECT cs.*,
                   (SELECT COUNT(*) FROM chat_messages cm
                    WHERE cm.session_id = cs.id) as message_count
            FROM chat_sessions cs
            WHERE cs.username = ?
            ORDER BY cs.created_at DESC, cs.id DESC
        """, (username,)).fetchall()
        return [dict(r) for r in rows]

    def rename_session(self, session_id: int, title: str):
        self.conn.execute(
            """UPDATE chat_sessions
               SET title = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
               WHERE id = ?""",
            (title, session_id),
        )
        self.conn.commit()

    def delete_session(self, session_id: int):
        """Delete a chat session and all its messages."""
        self.conn.execute("DELETE FROM chat_sessions WHERE id = ?", (session_id,))
        self.conn.commit()

    # ------------------------------------------------------------------
    # Chat Messages
    # ------------------------------------------------------------------

    def insert_chat_message(self, session_id: int, role: str, content: str,
                            images: Optional[list] = None,
                            charts: Optional[list] = None,
                            tool_calls: Optional[list] = None,
                            generated_images: Optional[list] = None) -> int:
        """Append a message and bump the session timestamp."""
        cur = self.conn.execute("""
            INSERT INTO chat_messages
                (session_id, role, content, images, charts, tool_calls, generated_images)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            session_id, role, content,
            _dump(images), _dump(charts), _dump(tool_calls), _dump(generated_images),
        ))
        self.conn.execute(
            """UPDATE chat_sessions SET updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
               WHERE id = ?""",
            (session_id,),
        )
        self.conn.commit()
        return cur.lastrowid

    def get_session_messages(self, session_id: int,
                             limit: Optional[int] = None) -> list[dict]:
        """Messages in the order they were written; with a limit, the most recent ones."""
        sql = "SELECT * FROM chat_messages WHERE session_id = ? ORDER BY id"
        params: list = [session_id]
        if limit:
            sql = f"SELECT * FROM ({sql} DESC LIMIT ?) ORDER BY id"
            params.append(limit)
        rows = self.conn.execute(sql, params).fetchall()
        messages = []
        for row in rows:
            msg = dict(row)
            for column in JSON_COLUMNS:
                msg[column] = _load(msg[column])
            messages.append(msg)
        return messages

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_counts(self) -> dict:
        counts = {}
        for key, table in (("users", "users"), ("sessions", "chat_sessions"),
                           ("messages", "chat_messages")):
            row = self.conn.execute(f"SELECT COUNT(*) as cnt FROM {table}").fetchone()
            counts[key] = row["cnt"]
        return counts
