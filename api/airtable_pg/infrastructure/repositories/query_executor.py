"""
Lecturas: listado paginado con filtro/orden y busqueda por id.

Contrato de paginacion:
- ORDER BY <sort> NULLS LAST, "id" ASC  (el desempate por PK estabiliza las
  paginas cuando el campo de orden tiene empates)
- LIMIT page_size + 1: si vuelve esa cantidad de filas, hay mas paginas y el
  siguiente offset es offset + page_size.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import psycopg
from loguru import logger

from airtable_pg.domain.entities.filter_clause import FilterClause
from airtable_pg.domain.entities.pagination import Page, PaginationCursor
from airtable_pg.domain.entities.record import Record
from airtable_pg.infrastructure.formula.translator import FormulaTranslator
from airtable_pg.infrastructure.records.codec import RecordCodec
from airtable_pg.infrastructure.records.linked_records import LinkedRecordResolver
from airtable_pg.infrastructure.schema.introspector import SchemaIntrospector, find_column
from airtable_pg.shared.constants.record_constants import (
    PRIMARY_KEY_COLUMN,
    RECORD_ID_COLUMN,
    SortDirection,
)
from airtable_pg.shared.exceptions.domain import EntityNotFoundException, ValidationException
from airtable_pg.shared.exceptions.infrastructure import (
    SchemaNotFoundException,
    UpstreamFailureException,
)
from airtable_pg.shared.utils.identifiers import normalize_identifier, quote_ident


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, raw: Union["SortSpec", Mapping[str, Any]]) -> "SortSpec":
        """Acepta SortSpec o {"field": ..., "direction": "asc"|"desc"}."""
        if isinstance(raw, SortSpec):
            return raw
        field_name = raw.get("field")
        if not field_name:
            raise ValidationException("Cada sort requiere 'field'", field="sort")
        direction = str(raw.get("direction") or "asc").lower()
        return cls(
            field=field_name,
            direction=SortDirection.DESC if direction == "desc" else SortDirection.ASC,
        )


def build_select_sql(
    table: str,
    clause: Optional[FilterClause],
    sort_columns: Sequence[Tuple[str, SortDirection]],
    page_size: int,
    offset: int,
) -> Tuple[str, List[Any]]:
    """Arma el SELECT paginado. Retorna (sql, params)."""
    sql = f"SELECT * FROM {quote_ident(table)}"
    params: List[Any] = []

    if clause is not None:
        sql += f" WHERE {clause.sql}"
        params.extend(clause.params)

    order_parts = [
        f"{quote_ident(column)} {direction.value.upper()} NULLS LAST"
        for column, direction in sort_columns
    ]
    order_parts.append(f"{quote_ident(PRIMARY_KEY_COLUMN)} ASC")
    sql += " ORDER BY " + ", ".join(order_parts)

    # Una fila extra para saber si hay otra pagina
    sql += f" LIMIT {int(page_size) + 1}"
    if offset > 0:
        sql += f" OFFSET {int(offset)}"
    return sql, params


class QueryExecutor:
    def __init__(
        self,
        *,
        introspector: Optional[SchemaIntrospector] = None,
        translator: Optional[FormulaTranslator] = None,
        codec: Optional[RecordCodec] = None,
    ) -> None:
        self._introspector = introspector or SchemaIntrospector()
        self._translator = translator or FormulaTranslator(LinkedRecordResolver())
        self._codec = codec or RecordCodec()

    def list_page(
        self,
        conn: psycopg.Connection,
        table_name: str,
        *,
        formula: Optional[str] = None,
        sort: Optional[Iterable[Union[SortSpec, Mapping[str, Any]]]] = None,
        page_size: int,
        cursor: Optional[PaginationCursor] = None,
    ) -> Page:
        """
        Retorna hasta page_size records y, si hay mas, el cursor siguiente.
        Una tabla o columna inexistente (en el schema o al ejecutar) se trata
        como tabla vacia.
        """
        if page_size < 1:
            raise ValidationException("page_size debe ser >= 1", field="maxRecords")

        table = normalize_identifier(table_name)
        cursor = cursor or PaginationCursor(0)
        sort_specs = [SortSpec.parse(s) for s in (sort or [])]

        try:
            mapping = self._introspector.column_mapping(conn, table)
        except SchemaNotFoundException:
            logger.info(f"[GET] {table}: tabla inexistente, se responde sin records")
            return Page(records=[])

        clause = self._translator.translate(conn, formula, table, mapping)
        sort_columns = [(find_column(s.field, mapping), s.direction) for s in sort_specs]
        sql, params = build_select_sql(table, clause, sort_columns, page_size, cursor.offset)

        logger.info(f"[GET] {table}: {sql} (offset: {cursor.offset})")
        try:
            rows = self._fetch_all(conn, sql, params, table)
        except SchemaNotFoundException as e:
            logger.info(f"[GET] {table}: {e.message}, se responde sin records")
            return Page(records=[])

        has_more = len(rows) > page_size
        records = [self._codec.to_external(row, mapping) for row in rows[:page_size]]
        return Page(
            records=records,
            next_cursor=cursor.advance(page_size) if has_more else None,
        )

    def iter_pages(
        self,
        conn: psycopg.Connection,
        table_name: str,
        *,
        formula: Optional[str] = None,
        sort: Optional[Iterable[Union[SortSpec, Mapping[str, Any]]]] = None,
        page_size: int,
    ) -> Iterator[Page]:
        """Recorre todas las paginas siguiendo el cursor hasta agotarlas."""
        sort = list(sort or [])
        cursor: Optional[PaginationCursor] = PaginationCursor(0)
        while cursor is not None:
            page = self.list_page(
                conn, table_name, formula=formula, sort=sort, page_size=page_size, cursor=cursor
            )
            yield page
            cursor = page.next_cursor

    def find(self, conn: psycopg.Connection, table_name: str, record_id: str) -> Record:
        """
        Busca un record por id opaco.

        Raises:
            EntityNotFoundException: si el record o la tabla no existen
        """
        table = normalize_identifier(table_name)
        try:
            mapping = self._introspector.column_mapping(conn, table)
        except SchemaNotFoundException as e:
            raise EntityNotFoundException("Record", record_id) from e

        sql = f"SELECT * FROM {quote_ident(table)} WHERE {quote_ident(RECORD_ID_COLUMN)} = %s LIMIT 1"
        try:
            rows = self._fetch_all(conn, sql, [record_id], table)
        except SchemaNotFoundException as e:
            raise EntityNotFoundException("Record", record_id) from e

        if not rows:
            raise EntityNotFoundException("Record", record_id)
        return self._codec.to_external(rows[0], mapping)

    def _fetch_all(
        self, conn: psycopg.Connection, sql: str, params: List[Any], table: str
    ) -> List[Dict[str, Any]]:
        """
        Raises:
            SchemaNotFoundException: tabla o columna borrada (o inexistente) al
                ejecutar
            UpstreamFailureException: cualquier otro error de la base
        """
        try:
            return conn.execute(sql, params).fetchall()
        except (psycopg.errors.UndefinedTable, psycopg.errors.UndefinedColumn) as e:
            raise SchemaNotFoundException(table, self._introspector.schemas) from e
        except psycopg.Error as e:
            raise UpstreamFailureException(f"Error consultando '{table}': {e}", table=table) from e
