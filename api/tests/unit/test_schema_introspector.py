"""
Tests de la introspeccion de columnas y busqueda de columna por field.
"""
from __future__ import annotations

import pytest

from airtable_pg.infrastructure.schema.introspector import SchemaIntrospector, find_column
from airtable_pg.shared.exceptions.infrastructure import SchemaNotFoundException


def test_column_mapping_is_identity_over_search_path(fake_conn) -> None:
    fake_conn.add_table("markers", ["id", "airtable_record_id", "name", "marker_id"])
    introspector = SchemaIntrospector(schemas=["scoring", "public"])

    mapping = introspector.column_mapping(fake_conn, "markers")

    assert mapping == {
        "id": "id",
        "airtable_record_id": "airtable_record_id",
        "name": "name",
        "marker_id": "marker_id",
    }
    sql, params = fake_conn.executed[0]
    assert "table_schema = ANY(%s)" in sql
    assert params == ("markers", ["scoring", "public"])


def test_unknown_table_raises_schema_not_found(fake_conn) -> None:
    introspector = SchemaIntrospector(schemas=["public"])

    with pytest.raises(SchemaNotFoundException) as exc_info:
        introspector.column_mapping(fake_conn, "ghosts")

    assert exc_info.value.table == "ghosts"


def test_schemas_default_to_settings() -> None:
    assert SchemaIntrospector().schemas == ["scoring", "public"]


@pytest.mark.parametrize(
    "field_name, expected",
    [
        ("name", "name"),
        ("Marker ID", "marker_id"),
        ("Unknown Field", "unknown_field"),
    ],
)
def test_find_column(field_name: str, expected: str) -> None:
    mapping = {"name": "name", "marker_id": "marker_id"}

    assert find_column(field_name, mapping) == expected
