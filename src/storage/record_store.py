"""
Record store for subjects and materials.

Two implementations share one small async interface (insert, ordered select,
delete by id):

- PostgresRecordStore runs against an asyncpg pool from storage.db and relies
  on the schema's ON DELETE CASCADE for subject -> material cleanup.
- InMemoryRecordStore keeps process-local tables for development and tests and
  applies the same cascade itself.

Every failure surfaces as StoreError.
"""

from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List

from study_schedule.errors import StoreError

logger = logging.getLogger(__name__)

# Whitelisted tables/columns; names are interpolated into SQL.
TABLE_COLUMNS: Dict[str, tuple] = {
    "subjects": ("id", "name", "color", "created_at"),
    "materials": (
        "id",
        "title",
        "description",
        "subject_id",
        "file_url",
        "file_name",
        "date",
        "created_at",
    ),
}

# child table, foreign key column, parent table
CASCADES = [("materials", "subject_id", "subjects")]


def _check_table(table: str) -> tuple:
    try:
        return TABLE_COLUMNS[table]
    except KeyError:
        raise StoreError(f"unknown table: {table}")


def _check_columns(table: str, names) -> None:
    columns = _check_table(table)
    for name in names:
        if name not in columns:
            raise StoreError(f"unknown column {table}.{name}")


class RecordStore(ABC):
    @abstractmethod
    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row; the store assigns id and created_at. Returns the stored row."""
        raise NotImplementedError

    @abstractmethod
    async def select(
        self, table: str, order_by: str, ascending: bool = True
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        raise NotImplementedError


def _as_uuid(value: Any, what: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise StoreError(f"invalid {what}: {value!r}") from e


class PostgresRecordStore(RecordStore):
    """Runs against an asyncpg pool (see storage.db.open_pool)."""

    def __init__(self, pool):
        self.pool = pool

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        row = {k: v for k, v in row.items() if k not in ("id", "created_at")}
        _check_columns(table, row.keys())

        names = list(row.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(names) + 1))
        query = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders}) RETURNING *"
        # uuid columns need UUID objects, everything else is text
        values = [
            _as_uuid(v, k) if k == "subject_id" and v is not None else v
            for k, v in row.items()
        ]

        try:
            record = await self.pool.fetchrow(query, *values)
        except Exception as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise StoreError(f"insert into {table} failed: {e}") from e

        return dict(record)

    async def select(
        self, table: str, order_by: str, ascending: bool = True
    ) -> List[Dict[str, Any]]:
        _check_columns(table, [order_by])
        direction = "ASC" if ascending else "DESC"
        # equal keys fall back to insertion order
        query = f"SELECT * FROM {table} ORDER BY {order_by} {direction}, created_at ASC"

        try:
            records = await self.pool.fetch(query)
        except Exception as e:
            logger.error(f"Select from {table} failed: {e}")
            raise StoreError(f"select from {table} failed: {e}") from e

        return [dict(r) for r in records]

    async def delete(self, table: str, record_id: str) -> None:
        _check_table(table)
        key = _as_uuid(record_id, "id")

        try:
            result = await self.pool.execute(f"DELETE FROM {table} WHERE id = $1", key)
        except Exception as e:
            logger.error(f"Delete from {table} failed: {e}")
            raise StoreError(f"delete from {table} failed: {e}") from e

        logger.info(f"Deleted {table}/{record_id} ({result})")


class InMemoryRecordStore(RecordStore):
    """Process-local tables with the same cascade behavior as schema.sql."""

    def __init__(self):
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: [] for name in TABLE_COLUMNS
        }

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        _check_columns(table, row.keys())
        stored = {name: None for name in TABLE_COLUMNS[table]}
        stored.update(row)
        stored["id"] = str(uuid.uuid4())
        stored["created_at"] = datetime.now(timezone.utc).isoformat()

        self._tables[table].append(stored)
        return copy.deepcopy(stored)

    async def select(
        self, table: str, order_by: str, ascending: bool = True
    ) -> List[Dict[str, Any]]:
        _check_columns(table, [order_by])
        rows = self._tables[table]
        # stable sort keeps insertion order for equal keys, nulls last
        ordered = sorted(
            rows,
            key=lambda r: (r[order_by] is None, r[order_by] or ""),
            reverse=not ascending,
        )
        return copy.deepcopy(ordered)

    async def delete(self, table: str, record_id: str) -> None:
        _check_table(table)
        self._tables[table] = [r for r in self._tables[table] if r["id"] != record_id]

        for child, column, parent in CASCADES:
            if parent != table:
                continue
            before = len(self._tables[child])
            self._tables[child] = [
                r for r in self._tables[child] if r[column] != record_id
            ]
            removed = before - len(self._tables[child])
            if removed:
                logger.info(f"Cascade removed {removed} {child} row(s) for {table}/{record_id}")
