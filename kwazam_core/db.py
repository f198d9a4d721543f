from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .snapshot import GameSnapshot, snapshot_from_text, snapshot_to_text

logger = logging.getLogger(__name__)


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _connect(db_path: str) -> sqlite3.Connection:
    _ensure_db_dir(db_path)
    conn = sqlite3.connect(db_path)
    _ensure_db(conn)
    return conn


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the save-slot table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS saves (
            slot TEXT PRIMARY KEY,
            turn_count INTEGER NOT NULL,
            current_player TEXT NOT NULL,
            state TEXT NOT NULL,
            saved_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z')


def db_store_game(db_path: str, slot: str, snapshot: GameSnapshot) -> None:
    """Stores a snapshot under ``slot``, replacing any previous save there."""
    if not slot:
        raise ValueError('slot name required')
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            INSERT OR REPLACE INTO saves (slot, turn_count, current_player, state, saved_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (slot, snapshot.turn_count, snapshot.current_player, snapshot_to_text(snapshot), _now()),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info('stored game in slot %r (%s)', slot, db_path)


def db_load_game(db_path: str, slot: str) -> Optional[GameSnapshot]:
    """Loads the snapshot saved under ``slot``; None if there is no such slot."""
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT state FROM saves WHERE slot = ?", (slot,)).fetchone()
    finally:
        conn.close()
    if not row:
        return None
    return snapshot_from_text(row[0])


def db_list_games(db_path: str) -> List[Tuple[str, int, str, str]]:
    """Lists (slot, turn_count, current_player, saved_at), newest first."""
    conn = _connect(db_path)
    try:
        cur = conn.execute(
            "SELECT slot, turn_count, current_player, saved_at FROM saves ORDER BY saved_at DESC, slot"
        )
        return [(str(s), int(t), str(p), str(at)) for s, t, p, at in cur.fetchall()]
    finally:
        conn.close()


def db_delete_game(db_path: str, slot: str) -> bool:
    conn = _connect(db_path)
    try:
        cur = conn.execute("DELETE FROM saves WHERE slot = ?", (slot,))
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()
