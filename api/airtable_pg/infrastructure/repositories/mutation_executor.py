"""
Escrituras: create / update / destroy.

- create asigna id opaco y createdTime; nunca se reutilizan ids.
- update es parcial (solo los fields enviados) y no toca id ni createdTime.
- destroy es un DELETE definitivo por lote de ids.
"""
from __future__ import annotations

import secrets
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import psycopg
from loguru import logger

from airtable_pg.domain.entities.record import Record
from airtable_pg.infrastructure.records.codec import RecordCodec
from airtable_pg.infrastructure.schema.introspector import SchemaIntrospector
from airtable_pg.shared.constants.record_constants import (
    CREATED_TIME_COLUMN,
    RECORD_ID_ALPHABET,
    RECORD_ID_COLUMN,
    RECORD_ID_LENGTH,
    RECORD_ID_PREFIX,
)
from airtable_pg.shared.exceptions.domain import EntityNotFoundException, ValidationException
from airtable_pg.shared.exceptions.infrastructure import (
    SchemaNotFoundException,
    UpstreamFailureException,
)
from airtable_pg.shared.utils.datetime_utils import DateTimeUtils
from airtable_pg.shared.utils.identifiers import normalize_identifier, quote_ident


def generate_record_id() -> str:
    """Id estilo Airtable: 'rec' + 14 caracteres alfanumericos."""
    return RECORD_ID_PREFIX + "".join(
        secrets.choice(RECORD_ID_ALPHABET) for _ in range(RECORD_ID_LENGTH)
    )


class MutationExecutor:
    def __init__(
        self,
        *,
        introspector: Optional[SchemaIntrospector] = None,
        codec: Optional[RecordCodec] = None,
    ) -> None:
        self._introspector = introspector or SchemaIntrospector()
        self._codec = codec or RecordCodec()

    def create(self, conn: psycopg.Connection, table_name: str, fields: Mapping[str, Any]) -> Record:
        table = normalize_identifier(table_name)
        mapping = self._mapping_for_write(conn, table)

        row = {
            RECORD_ID_COLUMN: generate_record_id(),
            CREATED_TIME_COLUMN: DateTimeUtils.to_iso_string(DateTimeUtils.now_utc()),
        }
        row.update(self._codec.to_storage(fields))

        columns = ", ".join(quote_ident(c) for c in row)
        placeholders = ", ".join(["%s"] * len(row))
        sql = f"INSERT INTO {quote_ident(table)} ({columns}) VALUES ({placeholders}) RETURNING *"

        logger.info(f"[POST] {table}: creando record {row[RECORD_ID_COLUMN]}")
        created = self._execute_one(conn, sql, list(row.values()), table)
        return self._codec.to_external(created, mapping)

    def update(
        self,
        conn: psycopg.Connection,
        table_name: str,
        record_id: str,
        fields: Mapping[str, Any],
    ) -> Record:
        """
        Raises:
            ValidationException: sin record_id o sin fields
            EntityNotFoundException: si ningun record tiene ese id
        """
        if not record_id:
            raise ValidationException("Record ID requerido para update", field="recordId")

        values = self._codec.to_storage(fields or {})
        if not values:
            raise ValidationException("No hay fields para actualizar", field="fields")

        table = normalize_identifier(table_name)
        mapping = self._mapping_for_write(conn, table)

        set_sql = ", ".join(f"{quote_ident(c)} = %s" for c in values)
        sql = (
            f"UPDATE {quote_ident(table)} SET {set_sql} "
            f"WHERE {quote_ident(RECORD_ID_COLUMN)} = %s RETURNING *"
        )

        logger.info(f"[PATCH] {table}/{record_id}: actualizando {len(values)} fields")
        updated = self._execute_one(conn, sql, [*values.values(), record_id], table)
        if updated is None:
            raise EntityNotFoundException("Record", record_id)
        return self._codec.to_external(updated, mapping)

    def destroy(
        self,
        conn: psycopg.Connection,
        table_name: str,
        record_ids: Union[str, Sequence[str]],
    ) -> List[Dict[str, Any]]:
        """
        Borra por lote. Los ids inexistentes simplemente no aparecen en el
        resultado (no se distingue "not found" por id).
        """
        ids = [record_ids] if isinstance(record_ids, str) else [i for i in record_ids if i]
        if not ids:
            raise ValidationException("Record ID requerido para delete", field="recordId")

        table = normalize_identifier(table_name)
        self._mapping_for_write(conn, table)

        sql = (
            f"DELETE FROM {quote_ident(table)} WHERE {quote_ident(RECORD_ID_COLUMN)} = ANY(%s) "
            f"RETURNING {quote_ident(RECORD_ID_COLUMN)}"
        )
        try:
            rows = conn.execute(sql, (ids,)).fetchall()
        except psycopg.Error as e:
            raise UpstreamFailureException(f"Error borrando en '{table}': {e}", table=table) from e

        logger.info(f"[DELETE] {table}: {len(rows)} de {len(ids)} records borrados")
        return [{"id": row[RECORD_ID_COLUMN], "deleted": True} for row in rows]

    def _mapping_for_write(self, conn: psycopg.Connection, table: str) -> Dict[str, str]:
        # En escrituras una tabla inexistente es un error del upstream
        try:
            return self._introspector.column_mapping(conn, table)
        except SchemaNotFoundException as e:
            raise UpstreamFailureException(e.message, table=table) from e

    @staticmethod
    def _execute_one(
        conn: psycopg.Connection, sql: str, params: List[Any], table: str
    ) -> Optional[Dict[str, Any]]:
        try:
            return conn.execute(sql, params).fetchone()
        except psycopg.Error as e:
            raise UpstreamFailureException(f"Error escribiendo en '{table}': {e}", table=table) from e
