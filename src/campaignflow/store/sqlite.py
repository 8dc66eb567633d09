from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from campaignflow.domain.types import EntityKind
from campaignflow.store.base import StoreError, check_identifiers
from campaignflow.store.migrations import apply_schema

# Columns an upsert never overwrites on an existing row.
_UPSERT_PRESERVED = {"id", "created_at"}


class SqliteSession:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def execute(self, query: str, params: Iterable[Any] | None = None) -> None:
        self._conn.execute(query, params or [])

    def fetch_all(self, query: str, params: Iterable[Any] | None = None) -> list[sqlite3.Row]:
        cur = self._conn.execute(query, params or [])
        return cur.fetchall()

    def fetch_one(self, query: str, params: Iterable[Any] | None = None) -> sqlite3.Row | None:
        cur = self._conn.execute(query, params or [])
        return cur.fetchone()


class SqliteStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def connect(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def session(self) -> SqliteSession:
        with self.connect() as conn:
            yield SqliteSession(conn)

    def apply_schema(self, schema_path: Path) -> None:
        with self.connect() as conn:
            apply_schema(conn, schema_path)

    def execute(self, query: str, params: Iterable[Any] | None = None) -> None:
        with self.connect() as conn:
            conn.execute(query, params or [])

    def fetch_all(self, query: str, params: Iterable[Any] | None = None) -> list[sqlite3.Row]:
        with self.connect() as conn:
            cur = conn.execute(query, params or [])
            return cur.fetchall()

    def fetch_one(self, query: str, params: Iterable[Any] | None = None) -> sqlite3.Row | None:
        with self.connect() as conn:
            cur = conn.execute(query, params or [])
            return cur.fetchone()

    def select(
        self,
        kind: EntityKind,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        filters = filters or {}
        check_identifiers(list(filters))
        where = ""
        if filters:
            where = " WHERE " + " AND ".join(f"{name} = ?" for name in filters)
        order = ""
        if order_by:
            check_identifiers([order_by])
            order = f" ORDER BY {order_by}"
        query = f"SELECT * FROM {_table(kind)}{where}{order}"
        return [dict(row) for row in self._run_read(query, list(filters.values()))]

    def insert(self, kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
        names = list(fields)
        check_identifiers(names)
        query = (
            f"INSERT INTO {_table(kind)} ({', '.join(names)}) "
            f"VALUES ({', '.join('?' for _ in names)})"
        )
        with self._write() as session:
            session.execute(query, list(fields.values()))
            row = session.fetch_one(f"SELECT * FROM {_table(kind)} WHERE id = ?", (fields["id"],))
        return dict(row)

    def update(self, kind: EntityKind, entity_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        names = list(fields)
        check_identifiers(names)
        query = f"UPDATE {_table(kind)} SET {', '.join(f'{name} = ?' for name in names)} WHERE id = ?"
        with self._write() as session:
            session.execute(query, [*fields.values(), entity_id])
            row = session.fetch_one(f"SELECT * FROM {_table(kind)} WHERE id = ?", (entity_id,))
        if row is None:
            raise StoreError(f"{kind.value} record not found: {entity_id}")
        return dict(row)

    def upsert(
        self,
        kind: EntityKind,
        conflict_keys: Sequence[str],
        fields: Mapping[str, Any],
    ) -> dict[str, Any]:
        names = list(fields)
        check_identifiers([*names, *conflict_keys])
        updates = [
            f"{name}=excluded.{name}"
            for name in names
            if name not in conflict_keys and name not in _UPSERT_PRESERVED
        ]
        query = (
            f"INSERT INTO {_table(kind)} ({', '.join(names)}) "
            f"VALUES ({', '.join('?' for _ in names)}) "
            f"ON CONFLICT({', '.join(conflict_keys)}) DO UPDATE SET {', '.join(updates)}"
        )
        where = " AND ".join(f"{key} = ?" for key in conflict_keys)
        with self._write() as session:
            session.execute(query, list(fields.values()))
            row = session.fetch_one(
                f"SELECT * FROM {_table(kind)} WHERE {where}",
                [fields[key] for key in conflict_keys],
            )
        return dict(row)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        with self._write() as session:
            session.execute(f"DELETE FROM {_table(kind)} WHERE id = ?", (entity_id,))

    @contextmanager
    def _write(self):
        try:
            with self.session() as session:
                yield session
        except sqlite3.DatabaseError as exc:
            raise StoreError(str(exc)) from exc

    def _run_read(self, query: str, params: list[Any]) -> list[sqlite3.Row]:
        try:
            return self.fetch_all(query, params)
        except sqlite3.DatabaseError as exc:
            raise StoreError(str(exc)) from exc


def _table(kind: EntityKind) -> str:
    return EntityKind(kind).value
