"""Async SQLite persistence for the append-only history log."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from history import HistoryRecord, PlanCommitment

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = """
    record_id, created_at, title, summary, organized_json, next_step_prompt, memory_snippet,
    plan_timeframe, plan_priority, plan_committed_action, plan_committed_at
"""


class RecordNotFoundError(LookupError):
    """Raised when a history record id is unknown to the store."""


class PlanAlreadyCommittedError(RuntimeError):
    """Raised when a record already carries a plan commitment."""


class HistoryStore:
    """History log: append, full snapshot reads, one-time plan commitment, bulk clear."""

    def __init__(self, sqlite_path: str | Path) -> None:
        self.sqlite_path = Path(sqlite_path)
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self.sqlite_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL;")
        await self._conn.commit()
        await self.init_schema()

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> HistoryStore:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def init_schema(self) -> None:
        conn = self._require_conn()
        async with self._lock:
            await conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS history (
                    record_id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    title TEXT NOT NULL,
                    summary TEXT NOT NULL,
                    organized_json TEXT NOT NULL,
                    next_step_prompt TEXT NOT NULL,
                    memory_snippet TEXT,
                    plan_timeframe TEXT,
                    plan_priority TEXT,
                    plan_committed_action TEXT,
                    plan_committed_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_history_time ON history(created_at DESC);
                """
            )
            await conn.commit()

    async def append(self, record: HistoryRecord) -> uuid.UUID:
        """Insert a new record; appends are serialized so readers never see a partial write."""

        conn = self._require_conn()
        async with self._lock:
            await conn.execute(
                """
                INSERT INTO history(
                    record_id, created_at, title, summary, organized_json, next_step_prompt, memory_snippet
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(record.id),
                    _iso(record.created_at),
                    record.title,
                    record.summary,
                    json.dumps(record.organized, ensure_ascii=False),
                    record.next_step_prompt,
                    record.memory_snippet,
                ),
            )
            await conn.commit()
        logger.info("Appended history record %s", record.id)
        return record.id

    async def fetch_all(self) -> list[HistoryRecord]:
        """Complete snapshot, newest first."""

        conn = self._require_conn()
        async with self._lock:
            cursor = await conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM history ORDER BY created_at DESC, rowid DESC"
            )
            rows = await cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    async def get(self, record_id: uuid.UUID | str) -> HistoryRecord:
        conn = self._require_conn()
        cursor = await conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM history WHERE record_id = ?",
            (str(record_id),),
        )
        row = await cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"No history record with id {record_id}")
        return _row_to_record(row)

    async def search(self, query: str, limit: int = 50) -> list[HistoryRecord]:
        """Case-insensitive substring match on title and summary."""

        needle = query.strip().lower()
        if not needle:
            return (await self.fetch_all())[:limit]

        pattern = "%" + needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        conn = self._require_conn()
        cursor = await conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM history
            WHERE lower(title) LIKE ? ESCAPE '\\' OR lower(summary) LIKE ? ESCAPE '\\'
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (pattern, pattern, limit),
        )
        rows = await cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    async def commit_plan(self, record_id: uuid.UUID | str, commitment: PlanCommitment) -> HistoryRecord:
        """Attach a plan commitment; a record accepts exactly one."""

        conn = self._require_conn()
        async with self._lock:
            cursor = await conn.execute(
                """
                UPDATE history SET
                    plan_timeframe = ?,
                    plan_priority = ?,
                    plan_committed_action = ?,
                    plan_committed_at = ?
                WHERE record_id = ? AND plan_committed_action IS NULL
                """,
                (
                    commitment.timeframe.value,
                    commitment.priority.value,
                    commitment.committed_action,
                    _iso(commitment.committed_at),
                    str(record_id),
                ),
            )
            updated = cursor.rowcount
            await conn.commit()

        if updated == 0:
            existing = await self.get(record_id)
            action = existing.plan_commitment.committed_action if existing.plan_commitment else None
            raise PlanAlreadyCommittedError(f"Record {record_id} already committed to {action!r}")
        logger.info("Committed plan for record %s", record_id)
        return await self.get(record_id)

    async def clear_all(self) -> int:
        conn = self._require_conn()
        async with self._lock:
            cursor = await conn.execute("DELETE FROM history")
            deleted = cursor.rowcount
            await conn.commit()
        logger.info("Cleared %d history records", deleted)
        return deleted

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("HistoryStore is not connected. Call connect() first.")
        return self._conn


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_record(row: Any) -> HistoryRecord:
    commitment = None
    if row["plan_committed_action"] is not None:
        commitment = PlanCommitment(
            timeframe=row["plan_timeframe"],
            priority=row["plan_priority"],
            committed_action=row["plan_committed_action"],
            committed_at=datetime.fromisoformat(row["plan_committed_at"]),
        )
    return HistoryRecord(
        id=uuid.UUID(row["record_id"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        title=row["title"],
        summary=row["summary"],
        organized=json.loads(row["organized_json"]),
        next_step_prompt=row["next_step_prompt"],
        memory_snippet=row["memory_snippet"],
        plan_commitment=commitment,
    )
