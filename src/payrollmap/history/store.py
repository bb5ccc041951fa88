"""SQLite-based run history store."""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiosqlite

from ..config import settings
from .models import RunAction, RunRecord


class RunHistoryStore:
    """Persistent audit log of reconciliation runs and structure changes."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path is not None else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS runs (
                id TEXT PRIMARY KEY,
                timestamp TEXT NOT NULL,
                action TEXT NOT NULL,
                source_file TEXT,
                output_file TEXT,
                description TEXT,
                details TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_runs_timestamp ON runs(timestamp);
            CREATE INDEX IF NOT EXISTS idx_runs_action ON runs(action);
            """
        )
        await self._connection.commit()

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def record_run(self, run: RunRecord) -> RunRecord:
        """Record a run entry."""
        if not run.id:
            run.id = str(uuid.uuid4())

        await self._connection.execute(
            """
            INSERT INTO runs
            (id, timestamp, action, source_file, output_file, description, details)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                run.id,
                run.timestamp.isoformat(),
                run.action.value,
                run.source_file,
                run.output_file,
                run.description,
                json.dumps(run.details),
            ),
        )
        await self._connection.commit()
        return run

    async def get_runs(
        self, action: Optional[RunAction] = None, limit: int = 100
    ) -> list[RunRecord]:
        """Get run entries, newest first, optionally filtered by action."""
        query = "SELECT * FROM runs"
        params: list = []

        if action:
            query += " WHERE action = ?"
            params.append(RunAction(action).value)

        query += " ORDER BY timestamp DESC LIMIT ?"
        params.append(limit)

        async with self._connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_run(row) for row in rows]

    def _row_to_run(self, row) -> RunRecord:
        return RunRecord(
            id=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            action=RunAction(row[2]),
            source_file=row[3],
            output_file=row[4],
            description=row[5] or "",
            details=json.loads(row[6]) if row[6] else {},
        )
