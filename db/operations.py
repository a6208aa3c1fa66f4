"""
Database operations for the coaching simulator.
"""
import json
import sqlite3
from typing import Any

from models import GameState
from simulation.snapshot import dumps, loads
from .schema import get_connection

DEFAULT_SLOT = "autosave"


def save_game(conn: sqlite3.Connection, state: GameState, slot: str = DEFAULT_SLOT) -> None:
    """Insert or replace the snapshot stored in slot."""
    conn.execute(
        """
        INSERT INTO saves (slot, payload, week, budget, reputation, phase, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, datetime('now'))
        ON CONFLICT(slot) DO UPDATE SET
            payload = excluded.payload,
            week = excluded.week,
            budget = excluded.budget,
            reputation = excluded.reputation,
            phase = excluded.phase,
            updated_at = excluded.updated_at
        """,
        (slot, dumps(state), state.week, state.budget, state.reputation, state.phase.value),
    )
    conn.commit()


def load_game(conn: sqlite3.Connection | None = None, slot: str = DEFAULT_SLOT) -> GameState | None:
    """Return the season stored in slot, or None if the slot is empty. Corrupt payloads raise SnapshotError."""
    close = False
    if conn is None:
        conn = get_connection()
        close = True
    try:
        row = conn.execute("SELECT payload FROM saves WHERE slot = ?", (slot,)).fetchone()
        if row is None:
            return None
        return loads(row["payload"])
    finally:
        if close:
            conn.close()


def list_saves(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(
        "SELECT slot, week, budget, reputation, phase, updated_at FROM saves ORDER BY updated_at DESC, slot"
    ).fetchall()
    return [dict(r) for r in rows]


def delete_save(conn: sqlite3.Connection, slot: str) -> bool:
    cur = conn.execute("DELETE FROM saves WHERE slot = ?", (slot,))
    conn.commit()
    return cur.rowcount > 0


def record_season_result(conn: sqlite3.Connection, state: GameState, slot: str = DEFAULT_SLOT) -> int:
    """Append a finished season to the history table and return its id."""
    if state.summary is None:
        raise ValueError("season has not ended; nothing to record")
    summary = state.summary
    cur = conn.execute(
        """
        INSERT INTO season_results (slot, seed, province, difficulty, ending_reason, final_ending,
            week, budget, reputation, performance_score, students_remaining, summary)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            slot,
            state.seed,
            state.province_name,
            state.difficulty,
            summary.ending_reason,
            summary.final_ending,
            summary.week,
            summary.budget,
            summary.reputation,
            summary.performance_score,
            len(state.active_students()),
            json.dumps(summary.to_dict(), sort_keys=True),
        ),
    )
    conn.commit()
    return cur.lastrowid


def get_season_history(conn: sqlite3.Connection, slot: str | None = None, limit: int = 20) -> list[dict[str, Any]]:
    """Most recent finished seasons first. The stored summary JSON is not included."""
    cols = ("id, slot, seed, province, difficulty, ending_reason, final_ending, week, budget, "
            "reputation, performance_score, students_remaining, created_at")
    if slot is None:
        rows = conn.execute(f"SELECT {cols} FROM season_results ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
    else:
        rows = conn.execute(
            f"SELECT {cols} FROM season_results WHERE slot = ? ORDER BY id DESC LIMIT ?", (slot, limit)
        ).fetchall()
    return [dict(r) for r in rows]
