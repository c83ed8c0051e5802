"""
Tests de lecturas: SQL paginado, completitud de la paginacion y find.
"""
from __future__ import annotations

import psycopg
import pytest

from airtable_pg.domain.entities.filter_clause import FilterClause
from airtable_pg.domain.entities.pagination import PaginationCursor
from airtable_pg.infrastructure.formula.translator import FormulaTranslator
from airtable_pg.infrastructure.records.linked_records import LinkedRecordResolver
from airtable_pg.infrastructure.repositories.query_executor import (
    QueryExecutor,
    SortSpec,
    build_select_sql,
)
from airtable_pg.infrastructure.schema.introspector import SchemaIntrospector
from airtable_pg.shared.constants.record_constants import SortDirection
from airtable_pg.shared.exceptions.domain import EntityNotFoundException, ValidationException
from airtable_pg.shared.exceptions.infrastructure import UpstreamFailureException

COLUMNS = ["id", "airtable_record_id", "airtable_created_time", "name", "status"]


@pytest.fixture
def executor() -> QueryExecutor:
    return QueryExecutor(
        introspector=SchemaIntrospector(schemas=["public"]),
        translator=FormulaTranslator(LinkedRecordResolver(mappings={}), strict=False),
    )


def test_build_select_sql_orders_with_pk_tiebreak_and_fetches_one_extra() -> None:
    clause = FilterClause(sql='"status"::text = %s', params=["a"])
    sql, params = build_select_sql(
        "markers", clause, [("name", SortDirection.DESC)], page_size=10, offset=20
    )

    assert sql == (
        'SELECT * FROM "markers" WHERE "status"::text = %s '
        'ORDER BY "name" DESC NULLS LAST, "id" ASC LIMIT 11 OFFSET 20'
    )
    assert params == ["a"]


def test_build_select_sql_without_filter_or_offset() -> None:
    sql, params = build_select_sql("markers", None, [], page_size=5, offset=0)

    assert sql == 'SELECT * FROM "markers" ORDER BY "id" ASC LIMIT 6'
    assert params == []


def test_sort_spec_parse() -> None:
    assert SortSpec.parse({"field": "name", "direction": "DESC"}) == SortSpec("name", SortDirection.DESC)
    assert SortSpec.parse({"field": "name"}) == SortSpec("name", SortDirection.ASC)
    with pytest.raises(ValidationException):
        SortSpec.parse({"direction": "asc"})


def test_pagination_visits_every_row_exactly_once(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(23))

    pages = list(executor.iter_pages(fake_conn, "markers", page_size=5))
    ids = [r.id for page in pages for r in page.records]

    assert len(pages) == 5
    assert [len(p.records) for p in pages] == [5, 5, 5, 5, 3]
    assert len(ids) == 23
    assert len(set(ids)) == 23
    assert pages[-1].next_cursor is None
    assert pages[0].next_cursor == PaginationCursor(5)


def test_exact_multiple_has_no_trailing_cursor(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(10))

    page = executor.list_page(fake_conn, "markers", page_size=10)

    assert len(page.records) == 10
    assert not page.has_more


def test_list_page_translates_formula_and_sort(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(2))

    executor.list_page(
        fake_conn,
        "Markers",
        formula="{status} = 'active'",
        sort=[{"field": "Name", "direction": "desc"}],
        page_size=100,
        cursor=PaginationCursor(0),
    )

    sql, params = fake_conn.executed[-1]
    assert sql.startswith('SELECT * FROM "markers" WHERE ("status"::text = %s')
    assert 'ORDER BY "name" DESC NULLS LAST, "id" ASC LIMIT 101' in sql
    assert params == ["active", '%"active"%']


def test_missing_table_reads_as_empty_page(executor, fake_conn) -> None:
    page = executor.list_page(fake_conn, "ghosts", page_size=10)

    assert page.records == []
    assert page.next_cursor is None


def test_page_size_must_be_positive(executor, fake_conn) -> None:
    with pytest.raises(ValidationException):
        executor.list_page(fake_conn, "markers", page_size=0)


def test_query_failure_is_upstream_failure(executor, fake_conn) -> None:
    fake_conn.add_table("markers", COLUMNS)
    fake_conn.on("SELECT * FROM", psycopg.OperationalError("connection lost"))

    with pytest.raises(UpstreamFailureException):
        executor.list_page(fake_conn, "markers", page_size=10)


def test_find_returns_record_or_raises_not_found(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(3))

    record = executor.find(fake_conn, "markers", "rec00000000000002")
    assert record.fields["name"] == "row-2"

    with pytest.raises(EntityNotFoundException):
        executor.find(fake_conn, "markers", "recNOPE0000000000")
    with pytest.raises(EntityNotFoundException):
        executor.find(fake_conn, "ghosts", "rec00000000000002")


@pytest.mark.parametrize(
    "raw, offset",
    [(None, 0), ("", 0), ("15", 15), ("-3", 0), ("abc", 0)],
)
def test_cursor_decode(raw, offset) -> None:
    assert PaginationCursor.decode(raw).offset == offset


def test_filter_on_missing_column_reads_as_empty_page(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(3))
    fake_conn.on('"ghost"', psycopg.errors.UndefinedColumn('column "ghost" does not exist'))

    page = executor.list_page(fake_conn, "markers", formula='{ghost} = "x"', page_size=10)

    assert page.records == []
    assert page.next_cursor is None


def test_sort_on_missing_column_reads_as_empty_page(executor, fake_conn, rows_factory) -> None:
    fake_conn.add_table("markers", COLUMNS, rows_factory(3))
    fake_conn.on('"ghost"', psycopg.errors.UndefinedColumn('column "ghost" does not exist'))

    page = executor.list_page(fake_conn, "markers", sort=[{"field": "ghost"}], page_size=10)

    assert page.records == []


def test_find_on_table_dropped_after_introspection_is_not_found(executor, fake_conn) -> None:
    fake_conn.add_table("markers", COLUMNS)
    fake_conn.on("SELECT * FROM", psycopg.errors.UndefinedTable('relation "markers" does not exist'))

    with pytest.raises(EntityNotFoundException):
        executor.find(fake_conn, "markers", "rec00000000000001")
