"""
Materializacion: fila PostgreSQL <-> record estilo Airtable.

La conversion es deliberadamente "lossy" a nivel de tipos: no hay tipos
declarados, el tipo se infiere por valor al leer.
- Lectura: texto que empieza con '[' o '{' se intenta parsear como JSON
  (si falla, queda como texto); "true"/"false" pasan a booleanos.
- Escritura: listas/objetos se guardan como texto JSON; escalares tal cual.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from airtable_pg.domain.entities.record import Record
from airtable_pg.shared.constants.record_constants import (
    CREATED_TIME_COLUMN,
    INTERNAL_COLUMNS,
    PG_ID_FIELD,
    PRIMARY_KEY_COLUMN,
    RECORD_ID_COLUMN,
)
from airtable_pg.shared.utils.datetime_utils import DateTimeUtils
from airtable_pg.shared.utils.identifiers import normalize_identifier


def decode_value(value: Any) -> Any:
    """Valor almacenado -> valor externo."""
    if isinstance(value, str) and value.startswith(("[", "{")):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            # Texto opaco que casualmente empieza con [ o {
            pass

    if value == "true":
        return True
    if value == "false":
        return False
    return value


def encode_value(value: Any) -> Any:
    """Valor externo -> valor almacenable."""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return value


class RecordCodec:
    """
    Convierte filas en records y fields en filas.

    include_pk: expone el PK numerico como field `pg_id` (API REST).
    """

    def __init__(self, *, include_pk: bool = False) -> None:
        self._include_pk = include_pk

    def to_external(self, row: Mapping[str, Any], mapping: Optional[Dict[str, str]] = None) -> Record:
        fields: Dict[str, Any] = {}

        pk = row.get(PRIMARY_KEY_COLUMN)
        if self._include_pk and pk is not None:
            fields[PG_ID_FIELD] = pk

        for column, value in row.items():
            if column in INTERNAL_COLUMNS:
                continue
            name = mapping.get(column, column) if mapping else column
            fields[name] = decode_value(value)

        record_id = row.get(RECORD_ID_COLUMN) or (str(pk) if pk is not None else None)
        return Record(
            id=record_id,
            fields=fields,
            created_time=DateTimeUtils.created_time(row.get(CREATED_TIME_COLUMN)),
        )

    def to_storage(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Fields externos -> {columna: valor}. Las columnas de bookkeeping y
        `pg_id` se ignoran: id y createdTime son inmutables.
        """
        row: Dict[str, Any] = {}
        for field_name, value in fields.items():
            if field_name == PG_ID_FIELD:
                continue
            column = normalize_identifier(field_name)
            if column in INTERNAL_COLUMNS:
                continue
            row[column] = encode_value(value)
        return row
