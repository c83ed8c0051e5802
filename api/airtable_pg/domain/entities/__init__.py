"""
Entidades del dominio.
"""
from airtable_pg.domain.entities.record import Record, TypedValue, ValueKind
from airtable_pg.domain.entities.filter_clause import FilterClause
from airtable_pg.domain.entities.linked_record import (
    DEFAULT_LINKED_RECORD_MAP,
    LinkedRecordMapping,
    LinkOutcome,
    LinkResolution,
)
from airtable_pg.domain.entities.pagination import Page, PaginationCursor

__all__ = [
    "Record",
    "TypedValue",
    "ValueKind",
    "FilterClause",
    "DEFAULT_LINKED_RECORD_MAP",
    "LinkedRecordMapping",
    "LinkOutcome",
    "LinkResolution",
    "Page",
    "PaginationCursor",
]
