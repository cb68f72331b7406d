"""
Save slot and KPI log.

Saves are one JSON document per storage key in a sqlite `saves` table, so
the whole state tree lives under a single key. The `kpis` table gets one
row per simulated day for charts and the KPI API.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from config import CONFIG

logger = logging.getLogger(__name__)


class SaveStore:
    """Flat key/value store for serialized game states."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or CONFIG.persistence.db_path
        conn = sqlite3.connect(self.db_path)
        c = conn.cursor()
        c.execute("""
            CREATE TABLE IF NOT EXISTS saves (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
        conn.close()

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        conn = sqlite3.connect(self.db_path)
        c = conn.cursor()
        c.execute("""
            INSERT INTO saves (key, payload) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, saved_at = CURRENT_TIMESTAMP
        """, (key, json.dumps(payload)))
        conn.commit()
        conn.close()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """The saved document, or None when the key is absent or unreadable."""
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute("SELECT payload FROM saves WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            logger.error(f"Corrupt save under {key}: {exc}")
            return None


# KPI log

def init_db(db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or CONFIG.persistence.db_path)
    c = conn.cursor()
    c.execute("""
        CREATE TABLE IF NOT EXISTS kpis (
            day INTEGER PRIMARY KEY,
            date TEXT,
            money REAL,
            reputation REAL,
            revenue REAL,
            avg_morale REAL,
            employees INTEGER,
            phase TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()
    conn.close()


def log_day(state, db_path: Optional[str] = None) -> None:
    """Record one row for the state's current day. Re-logging a day replaces it."""
    conn = sqlite3.connect(db_path or CONFIG.persistence.db_path)
    c = conn.cursor()
    c.execute("""
        INSERT OR REPLACE INTO kpis (day, date, money, reputation, revenue, avg_morale, employees, phase)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        state.days_played,
        state.current_date.isoformat(),
        state.money,
        state.reputation,
        state.revenue_this_day,
        state.average_morale(),
        len(state.employees),
        state.company_phase,
    ))
    conn.commit()
    conn.close()


def latest_kpis(limit: int = 1, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Most recent KPI rows, newest first."""
    conn = sqlite3.connect(db_path or CONFIG.persistence.db_path)
    conn.row_factory = sqlite3.Row
    try:
        rows = conn.execute("SELECT * FROM kpis ORDER BY day DESC LIMIT ?", (limit,)).fetchall()
    finally:
        conn.close()
    return [dict(row) for row in rows]
