"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from joy_quiz.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS quiz_sessions (
    id TEXT NOT NULL PRIMARY KEY,
    quiz_name TEXT NOT NULL,
    current_index INTEGER NOT NULL DEFAULT 0,
    total_questions INTEGER NOT NULL,
    correct_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_answers (
    id TEXT NOT NULL PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES quiz_sessions(id) ON DELETE CASCADE ON UPDATE CASCADE,
    question_index INTEGER NOT NULL,
    selected_option TEXT NOT NULL,
    is_correct INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE(session_id, question_index)
);

CREATE TABLE IF NOT EXISTS flagged_quizzes (
    id TEXT NOT NULL PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES quiz_sessions(id) ON DELETE CASCADE ON UPDATE CASCADE,
    question_index INTEGER NOT NULL,
    is_flagged INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(session_id, question_index)
);
"""

QUIZ_TABLES = ("quiz_sessions", "user_answers", "flagged_quizzes")


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def missing_tables(db_path: str = DEFAULT_DB_PATH) -> list[str]:
    """Quiz tables not present in the database, in schema order."""
    conn = get_connection(db_path)
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    conn.close()
    existing = {row["name"] for row in rows}
    return [t for t in QUIZ_TABLES if t not in existing]
