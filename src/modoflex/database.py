import os
import sqlite3

from .config import settings


def get_db_connection():
    """Establishes a connection to the SQLite database."""
    db_path = os.path.join(settings.DB_DIR, settings.DB_FILE)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_log_table():
    """Creates the log table if it doesn't exist."""
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                session_id TEXT,
                message TEXT
            );
        """
        )
    conn.close()


def create_score_table():
    """Creates the table of named persistent counters."""
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS scores (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL DEFAULT 0
            );
        """
        )
    conn.close()


def init_db():
    """Initializes the database and creates necessary tables."""
    if not os.path.exists(settings.DB_DIR):
        os.makedirs(settings.DB_DIR)
    create_log_table()
    create_score_table()


def get_high_score(name: str = settings.HIGH_SCORE_KEY) -> int:
    conn = get_db_connection()
    try:
        row = conn.execute("SELECT value FROM scores WHERE name = ?", (name,)).fetchone()
    except sqlite3.OperationalError:
        # Table not created yet
        return 0
    finally:
        conn.close()
    return int(row["value"]) if row else 0


def save_high_score(value: int, name: str = settings.HIGH_SCORE_KEY):
    """Stores ``value`` unless a higher score is already recorded."""
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            INSERT INTO scores (name, value) VALUES (?, ?)
            ON CONFLICT(name) DO UPDATE SET value = MAX(value, excluded.value)
            """,
            (name, value),
        )
    conn.close()


def get_session_events(session_id: str):
    """Returns ``(level, logger, message)`` rows logged for one session."""
    conn = get_db_connection()
    try:
        rows = conn.execute(
            "SELECT level, logger, message FROM logs WHERE session_id = ? ORDER BY id",
            (session_id,),
        ).fetchall()
    finally:
        conn.close()
    return [(r["level"], r["logger"], r["message"]) for r in rows]
