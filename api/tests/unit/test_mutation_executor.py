"""
Tests de escrituras: create / update / destroy.
"""
from __future__ import annotations

import psycopg
import pytest

from airtable_pg.infrastructure.records.linked_records import looks_like_record_id
from airtable_pg.infrastructure.repositories.mutation_executor import (
    MutationExecutor,
    generate_record_id,
)
from airtable_pg.infrastructure.schema.introspector import SchemaIntrospector
from airtable_pg.shared.exceptions.domain import EntityNotFoundException, ValidationException
from airtable_pg.shared.exceptions.infrastructure import UpstreamFailureException

COLUMNS = ["id", "airtable_record_id", "airtable_created_time", "name", "status", "tags"]


@pytest.fixture
def executor() -> MutationExecutor:
    return MutationExecutor(introspector=SchemaIntrospector(schemas=["public"]))


@pytest.fixture
def table(fake_conn, rows_factory):
    return fake_conn.add_table("markers", COLUMNS, rows_factory(3, status="new", tags=None))


def test_generated_ids_have_airtable_shape() -> None:
    ids = {generate_record_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(looks_like_record_id(i) for i in ids)


def test_create_assigns_id_and_created_time(executor, fake_conn, table) -> None:
    record = executor.create(fake_conn, "Markers", {"Name": "nuevo", "tags": ["recA"]})

    assert looks_like_record_id(record.id)
    assert record.created_time.endswith("Z")
    assert record.fields["name"] == "nuevo"
    assert record.fields["tags"] == ["recA"]

    stored = fake_conn.rows("markers")[-1]
    assert stored["tags"] == '["recA"]'
    assert fake_conn.last_sql.startswith('INSERT INTO "markers" ("airtable_record_id", "airtable_created_time", "name", "tags")')
    assert fake_conn.last_sql.endswith("RETURNING *")


def test_create_ignores_client_supplied_id(executor, fake_conn, table) -> None:
    record = executor.create(fake_conn, "markers", {"airtable_record_id": "recFORGED00000000", "name": "x"})

    assert record.id != "recFORGED00000000"


def test_update_is_partial_and_idempotent(executor, fake_conn, table) -> None:
    first = executor.update(fake_conn, "markers", "rec00000000000002", {"status": "done"})
    second = executor.update(fake_conn, "markers", "rec00000000000002", {"status": "done"})

    assert first == second
    assert first.fields["status"] == "done"
    assert first.fields["name"] == "row-2"
    assert first.created_time == "2024-01-01T00:00:00.000Z"

    sql, params = fake_conn.executed[-1]
    assert sql == 'UPDATE "markers" SET "status" = %s WHERE "airtable_record_id" = %s RETURNING *'
    assert params == ["done", "rec00000000000002"]


def test_update_unknown_record_raises_not_found(executor, fake_conn, table) -> None:
    with pytest.raises(EntityNotFoundException):
        executor.update(fake_conn, "markers", "recMISSING0000000", {"status": "x"})


@pytest.mark.parametrize("record_id, fields", [("", {"status": "x"}), ("rec00000000000001", {}), ("rec00000000000001", {"pg_id": 5})])
def test_update_requires_id_and_fields(executor, fake_conn, table, record_id, fields) -> None:
    with pytest.raises(ValidationException):
        executor.update(fake_conn, "markers", record_id, fields)


def test_destroy_removes_existing_ids_only(executor, fake_conn, table) -> None:
    deleted = executor.destroy(fake_conn, "markers", ["rec00000000000001", "recMISSING0000000"])

    assert deleted == [{"id": "rec00000000000001", "deleted": True}]
    assert [r["airtable_record_id"] for r in fake_conn.rows("markers")] == [
        "rec00000000000002",
        "rec00000000000003",
    ]


def test_destroy_accepts_single_id(executor, fake_conn, table) -> None:
    assert executor.destroy(fake_conn, "markers", "rec00000000000003") == [
        {"id": "rec00000000000003", "deleted": True}
    ]


def test_destroy_requires_ids(executor, fake_conn, table) -> None:
    with pytest.raises(ValidationException):
        executor.destroy(fake_conn, "markers", [])


def test_write_to_missing_table_is_upstream_failure(executor, fake_conn) -> None:
    with pytest.raises(UpstreamFailureException):
        executor.create(fake_conn, "ghosts", {"name": "x"})


def test_statement_error_is_upstream_failure(executor, fake_conn, table) -> None:
    fake_conn.on("INSERT INTO", psycopg.errors.UndefinedColumn('column "nope" does not exist'))

    with pytest.raises(UpstreamFailureException) as exc_info:
        executor.create(fake_conn, "markers", {"nope": 1})

    assert exc_info.value.details == {"table": "markers"}
