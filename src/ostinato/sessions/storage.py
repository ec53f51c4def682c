"""SQLite storage for serialized traces."""

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from ostinato.agent.trace import Trace


class SessionSummary(BaseModel):
    """One row of ``TraceStore.list_sessions``."""

    session_id: str
    prompt: str | None
    route: str
    pending: bool
    updated_at: datetime


class TraceStore:
    """SQLite-based storage keyed by session id."""

    def __init__(self, db_path: str | Path):
        """Initialize storage with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()

    def _initialize_db(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS traces (
                    session_id TEXT PRIMARY KEY,
                    prompt TEXT,
                    route TEXT NOT NULL,
                    pending INTEGER NOT NULL,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_traces_updated ON traces(updated_at)")
            conn.commit()

    def save(self, trace: Trace) -> None:
        """Insert or replace the stored copy of ``trace``.

        Args:
            trace: Trace to persist
        """
        now = datetime.now(UTC).isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO traces (session_id, prompt, route, pending, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    prompt = excluded.prompt,
                    route = excluded.route,
                    pending = excluded.pending,
                    data = excluded.data,
                    updated_at = excluded.updated_at
            """,
                (
                    trace.session_id,
                    trace.prompt,
                    str(trace.route),
                    int(trace.pending),
                    trace.model_dump_json(),
                    now,
                    now,
                ),
            )
            conn.commit()

    def load(self, session_id: str) -> Trace | None:
        """Load a trace by session id.

        Args:
            session_id: Session identifier

        Returns:
            The trace, or None if nothing is stored under ``session_id``
        """
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT data FROM traces WHERE session_id = ?", (session_id,)
            ).fetchone()

        if not row:
            return None
        return Trace.model_validate_json(row[0])

    def delete(self, session_id: str) -> bool:
        """Delete a stored trace.

        Returns:
            True if a trace was deleted
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM traces WHERE session_id = ?", (session_id,))
            conn.commit()
            return cursor.rowcount > 0

    def list_sessions(self, limit: int = 20) -> list[SessionSummary]:
        """Most recently updated sessions first.

        Args:
            limit: Maximum number of sessions to return
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                """
                SELECT session_id, prompt, route, pending, updated_at
                FROM traces
                ORDER BY updated_at DESC
                LIMIT ?
            """,
                (limit,),
            ).fetchall()

        return [
            SessionSummary(
                session_id=row["session_id"],
                prompt=row["prompt"],
                route=row["route"],
                pending=bool(row["pending"]),
                updated_at=datetime.fromisoformat(row["updated_at"]),
            )
            for row in rows
        ]
