"""
SQLite audit log of sync runs and the ledger mutations they attempted.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS sync_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    mode TEXT NOT NULL CHECK(mode IN ('sync', 'delete')),
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    dry_run INTEGER NOT NULL DEFAULT 0,
    added INTEGER,
    deleted INTEGER,
    skipped INTEGER,
    failed INTEGER
);

CREATE TABLE IF NOT EXISTS sync_actions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id INTEGER NOT NULL,
    date TEXT NOT NULL,
    action TEXT NOT NULL CHECK(action IN ('add', 'delete', 'skip', 'error')),
    project TEXT,
    task TEXT,
    duration TEXT,
    note TEXT,
    report_id INTEGER,
    message TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (run_id) REFERENCES sync_runs(id)
);

CREATE INDEX IF NOT EXISTS idx_sync_actions_run ON sync_actions(run_id);
CREATE INDEX IF NOT EXISTS idx_sync_actions_date ON sync_actions(date);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(db_path)


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the audit tables if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    conn.executescript(SCHEMA)
    conn.commit()


class AuditLog:
    """Records one sync run and every ledger mutation attempted during it."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.run_id: int | None = None

    def start_run(self, mode: str, start_date: str, end_date: str, dry_run: bool = False) -> int:
        """Create run record and return run_id."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO sync_runs (started_at, mode, start_date, end_date, dry_run)
            VALUES (?, ?, ?, ?, ?)
            """,
            (_now(), mode, start_date, end_date, int(dry_run)),
        )
        self.conn.commit()
        self.run_id = cursor.lastrowid
        return self.run_id

    def record(
        self,
        date: str,
        action: str,
        *,
        project: str | None = None,
        task: str | None = None,
        duration: str | None = None,
        note: str | None = None,
        report_id: int | None = None,
        message: str | None = None,
    ) -> None:
        if self.run_id is None:
            raise RuntimeError("start_run() must be called before record()")
        self.conn.execute(
            """
            INSERT INTO sync_actions (
                run_id, date, action, project, task, duration, note, report_id, message
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (self.run_id, date, action, project, task, duration, note, report_id, message),
        )
        self.conn.commit()

    def finish_run(self, added: int, deleted: int, skipped: int, failed: int) -> None:
        if self.run_id is None:
            return
        self.conn.execute(
            """
            UPDATE sync_runs
            SET finished_at = ?, added = ?, deleted = ?, skipped = ?, failed = ?
            WHERE id = ?
            """,
            (_now(), added, deleted, skipped, failed, self.run_id),
        )
        self.conn.commit()

    def deleted_reports(self, run_id: int | None = None) -> list[dict]:
        """Reports deleted during a run, for restoring by hand after a failed replace."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT date, project, task, duration, note, report_id
            FROM sync_actions
            WHERE run_id = ? AND action = 'delete'
            ORDER BY id
            """,
            (run_id or self.run_id,),
        )
        columns = ["date", "project", "task", "duration", "note", "report_id"]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]
