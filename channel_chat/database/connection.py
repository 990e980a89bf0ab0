import sqlite3
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
MEMORY = ":memory:"
SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with rows as sqlite3.Row and foreign keys enforced.

    File databases get WAL journaling and their parent directory created.
    The connection may be shared across Flask worker threads.
    """
    if db_path != MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    if db_path != MEMORY:
        conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_database(db_path: str) -> sqlite3.Connection:
    """Open the database, creating users/sessions/messages tables on first use."""
    conn = get_connection(db_path)
    version = conn.execute("PRAGMA user_version").fetchone()[0]
    if version < SCHEMA_VERSION:
        conn.executescript(SCHEMA_PATH.read_text())
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        logger.info(f"Created chat schema v{SCHEMA_VERSION} in {db_path}")
    return conn
