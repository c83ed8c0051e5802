"""
Resolucion de linked records: clave natural legible -> id opaco.

Las columnas de link guardan arrays JSON de ids opacos (["recXXXX"]); los
clientes filtran por la clave natural (report_id = "R-001"). El resolver
nunca levanta errores: el caller decide que hacer con NOT_A_LINK/NOT_FOUND
(por defecto, comparar contra el valor literal).
"""
from __future__ import annotations

import json
import re
from typing import Dict, Mapping, Optional

import psycopg
from loguru import logger

from airtable_pg.core.config import settings
from airtable_pg.domain.entities.linked_record import (
    DEFAULT_LINKED_RECORD_MAP,
    LinkedRecordMapping,
    LinkOutcome,
    LinkResolution,
)
from airtable_pg.shared.constants.record_constants import (
    RECORD_ID_ALPHABET,
    RECORD_ID_COLUMN,
    RECORD_ID_LENGTH,
    RECORD_ID_PREFIX,
)
from airtable_pg.shared.utils.identifiers import quote_ident

RECORD_ID_PATTERN = re.compile(
    rf"^{RECORD_ID_PREFIX}[{re.escape(RECORD_ID_ALPHABET)}]{{{RECORD_ID_LENGTH}}}$"
)


def looks_like_record_id(value: str) -> bool:
    return bool(RECORD_ID_PATTERN.match(value))


def load_linked_record_map(raw: str) -> Dict[str, LinkedRecordMapping]:
    """
    Lee el mapeo desde JSON ({"field": {"table": ..., "lookup_column": ...}}).
    Vacio = mapeo por defecto.
    """
    if not raw.strip():
        return dict(DEFAULT_LINKED_RECORD_MAP)
    data = json.loads(raw)
    return {
        name.lower(): LinkedRecordMapping(table=entry["table"], lookup_column=entry["lookup_column"])
        for name, entry in data.items()
    }


class LinkedRecordResolver:
    def __init__(self, mappings: Optional[Mapping[str, LinkedRecordMapping]] = None) -> None:
        if mappings is None:
            mappings = load_linked_record_map(settings.LINKED_RECORD_MAP)
        self._mappings = {k.lower(): v for k, v in mappings.items()}

    def mapping_for(self, field_name: str) -> Optional[LinkedRecordMapping]:
        return self._mappings.get(field_name.lower())

    def resolve(
        self,
        conn: psycopg.Connection,
        field_name: str,
        raw_value: str,
        current_table: str,
    ) -> LinkResolution:
        if looks_like_record_id(raw_value):
            return LinkResolution(LinkOutcome.RESOLVED, raw_value)

        mapping = self.mapping_for(field_name)
        if mapping is None:
            return LinkResolution(LinkOutcome.NOT_A_LINK)

        # No resolver la clave natural de una tabla contra si misma
        if mapping.table == current_table:
            return LinkResolution(LinkOutcome.NOT_A_LINK)

        sql = (
            f"SELECT {quote_ident(RECORD_ID_COLUMN)} FROM {quote_ident(mapping.table)} "
            f"WHERE {quote_ident(mapping.lookup_column)} = %s LIMIT 1"
        )
        try:
            # Savepoint: un lookup fallido no debe invalidar la conexion
            with conn.transaction():
                row = conn.execute(sql, (raw_value,)).fetchone()
        except psycopg.Error as e:
            logger.debug(
                f"Lookup de linked record fallido ({mapping.table}.{mapping.lookup_column}): {e}"
            )
            return LinkResolution(LinkOutcome.NOT_FOUND)

        if not row or not row.get(RECORD_ID_COLUMN):
            return LinkResolution(LinkOutcome.NOT_FOUND)

        record_id = row[RECORD_ID_COLUMN]
        logger.debug(f"Resuelto {field_name}='{raw_value}' -> {record_id}")
        return LinkResolution(LinkOutcome.RESOLVED, record_id)
