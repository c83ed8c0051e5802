"""
Configuración de fixtures para pytest.

Los tests no usan PostgreSQL real: FakeConnection imita la parte de
psycopg.Connection que usa el código (execute -> cursor, transaction) y
guarda tablas en memoria para los statements que generan los ejecutores.
"""
from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import psycopg
import pytest

_INSERT = re.compile(r'^INSERT INTO "(\w+)" \((.*?)\) VALUES')
_UPDATE = re.compile(r'^UPDATE "(\w+)" SET (.*) WHERE "airtable_record_id" = %s')
_DELETE = re.compile(r'^DELETE FROM "(\w+)"')
_SELECT_ALL = re.compile(r'^SELECT \* FROM "(\w+)"')
_LOOKUP = re.compile(r'^SELECT "airtable_record_id" FROM "(\w+)" WHERE "(\w+)" = %s')
_LIMIT = re.compile(r"LIMIT (\d+)")
_OFFSET = re.compile(r"OFFSET (\d+)")
_COLUMN = re.compile(r'"(\w+)"')


class FakeCursor:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self._rows = rows

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)


class FakeConnection:
    """
    Conexion en memoria (filas como dict, igual que dict_row).

    El WHERE de los listados no se evalua: los tests de filtros verifican
    el SQL generado, no las filas.
    """

    def __init__(self) -> None:
        self.executed: List[Tuple[str, Any]] = []
        self.tables: Dict[str, Dict[str, Any]] = {}
        self.transactions = 0
        self._handlers: List[Tuple[str, Any]] = []

    def add_table(self, name: str, columns: List[str], rows: Optional[List[Dict[str, Any]]] = None) -> "FakeConnection":
        self.tables[name] = {"columns": list(columns), "rows": [dict(r) for r in rows or []]}
        return self

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables[table]["rows"]

    def on(self, fragment: str, result: Any) -> "FakeConnection":
        """Respuesta fija (filas o excepcion) para SQL que contenga `fragment`."""
        self._handlers.append((fragment, result))
        return self

    @contextmanager
    def transaction(self) -> Iterator["FakeConnection"]:
        self.transactions += 1
        yield self

    def execute(self, sql: str, params: Any = None) -> FakeCursor:
        sql = " ".join(sql.split())
        self.executed.append((sql, params))

        for fragment, result in self._handlers:
            if fragment in sql:
                if isinstance(result, Exception):
                    raise result
                return FakeCursor(list(result))

        if "information_schema.columns" in sql:
            table = self.tables.get(params[0])
            return FakeCursor([{"column_name": c} for c in table["columns"]] if table else [])

        for pattern, handler in (
            (_INSERT, self._insert),
            (_UPDATE, self._update),
            (_DELETE, self._delete),
            (_LOOKUP, self._lookup),
            (_SELECT_ALL, self._select),
        ):
            match = pattern.match(sql)
            if match:
                table = self.tables.get(match.group(1))
                if table is None:
                    raise psycopg.errors.UndefinedTable(f'relation "{match.group(1)}" does not exist')
                return FakeCursor(handler(table, match, sql, list(params or [])))

        raise AssertionError(f"SQL no soportado por FakeConnection: {sql}")

    @property
    def last_sql(self) -> str:
        return self.executed[-1][0]

    @staticmethod
    def _insert(table, match, sql, params):
        columns = _COLUMN.findall(match.group(2))
        row = {c: None for c in table["columns"]}
        row["id"] = len(table["rows"]) + 1
        row.update(zip(columns, params))
        table["rows"].append(row)
        return [dict(row)]

    @staticmethod
    def _update(table, match, sql, params):
        columns = _COLUMN.findall(match.group(2))
        record_id = params[-1]
        for row in table["rows"]:
            if row["airtable_record_id"] == record_id:
                row.update(zip(columns, params[:-1]))
                return [dict(row)]
        return []

    @staticmethod
    def _delete(table, match, sql, params):
        ids = set(params[0])
        deleted = [r for r in table["rows"] if r["airtable_record_id"] in ids]
        table["rows"] = [r for r in table["rows"] if r["airtable_record_id"] not in ids]
        return [{"airtable_record_id": r["airtable_record_id"]} for r in deleted]

    @staticmethod
    def _lookup(table, match, sql, params):
        column = match.group(2)
        for row in table["rows"]:
            if row.get(column) == params[0]:
                return [{"airtable_record_id": row["airtable_record_id"]}]
        return []

    @staticmethod
    def _select(table, match, sql, params):
        rows = sorted(table["rows"], key=lambda r: r["id"])
        if 'WHERE "airtable_record_id" = %s' in sql:
            rows = [r for r in rows if r["airtable_record_id"] == params[0]]
        offset = _OFFSET.search(sql)
        limit = _LIMIT.search(sql)
        start = int(offset.group(1)) if offset else 0
        end = start + int(limit.group(1)) if limit else None
        return [dict(r) for r in rows[start:end]]


class FakeRegistry:
    """Reemplazo de PoolRegistry que entrega siempre la misma conexion."""

    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.checkouts: List[str] = []

    @contextmanager
    def connection(self, database: str) -> Iterator[FakeConnection]:
        self.checkouts.append(database)
        yield self.conn


def make_rows(count: int, **extra: Any) -> List[Dict[str, Any]]:
    return [
        {
            "id": i,
            "airtable_record_id": f"rec{i:014d}",
            "airtable_created_time": "2024-01-01T00:00:00.000Z",
            "name": f"row-{i}",
            **extra,
        }
        for i in range(1, count + 1)
    ]


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def fake_registry(fake_conn: FakeConnection) -> FakeRegistry:
    return FakeRegistry(fake_conn)


@pytest.fixture
def rows_factory() -> Callable[..., List[Dict[str, Any]]]:
    return make_rows
