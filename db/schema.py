"""
SQLite schema for the coaching simulator.
Save slots hold a JSON season snapshot; finished seasons are appended to season_results.
"""
import sqlite3
from pathlib import Path

import config


def get_db_path() -> Path:
    """Return absolute path to the save DB file."""
    return config.get_db_path()


def _ensure_db_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def get_connection(path: Path | str | None = None) -> sqlite3.Connection:
    """Open a connection to the save DB. Creates dir and file if needed.
    timeout: seconds to wait for lock (avoids 'database is locked' under concurrent requests).
    """
    path = Path(path) if path is not None else get_db_path()
    _ensure_db_dir(path)
    conn = sqlite3.connect(str(path), timeout=15.0)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection | None = None) -> None:
    """Create all tables if they do not exist."""
    close = False
    if conn is None:
        conn = get_connection()
        close = True
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS saves (
                slot TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                week INTEGER NOT NULL,
                budget INTEGER NOT NULL,
                reputation INTEGER NOT NULL,
                phase TEXT NOT NULL,
                updated_at TEXT DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS season_results (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                slot TEXT NOT NULL,
                seed INTEGER,
                province TEXT,
                difficulty INTEGER NOT NULL,
                ending_reason TEXT NOT NULL,
                final_ending TEXT NOT NULL,
                week INTEGER NOT NULL,
                budget INTEGER NOT NULL,
                reputation INTEGER NOT NULL,
                performance_score REAL NOT NULL,
                students_remaining INTEGER NOT NULL,
                summary TEXT NOT NULL,
                created_at TEXT DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_season_results_slot ON season_results(slot);
        """)
        conn.commit()
    finally:
        if close:
            conn.close()
