"""
Introspeccion del schema: que columnas tiene una tabla.

Se consulta en cada operacion (sin cache entre llamadas) para tolerar
cambios de schema en caliente.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import psycopg
from loguru import logger

from airtable_pg.core.config import get_schema_search_path, settings
from airtable_pg.shared.exceptions.infrastructure import SchemaNotFoundException
from airtable_pg.shared.utils.identifiers import normalize_identifier

COLUMNS_SQL = """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_name = %s AND table_schema = ANY(%s)
    ORDER BY ordinal_position
"""


class SchemaIntrospector:
    def __init__(self, schemas: Optional[List[str]] = None) -> None:
        self._schemas = schemas if schemas is not None else get_schema_search_path(settings.DB_SCHEMAS)

    @property
    def schemas(self) -> List[str]:
        return list(self._schemas)

    def column_mapping(self, conn: psycopg.Connection, table: str) -> Dict[str, str]:
        """
        Retorna {columna PostgreSQL -> nombre de field externo}.

        Por convencion las columnas se llaman igual que los fields de
        Airtable, asi que el mapeo es identidad.

        Raises:
            SchemaNotFoundException: si la tabla no existe en el search path
        """
        rows = conn.execute(COLUMNS_SQL, (table, self._schemas)).fetchall()
        if not rows:
            logger.debug(f"Tabla '{table}' sin columnas en schemas {self._schemas}")
            raise SchemaNotFoundException(table, self._schemas)

        mapping: Dict[str, str] = {}
        for row in rows:
            column = row["column_name"]
            mapping[column] = column
        return mapping


def find_column(field_name: str, mapping: Dict[str, str]) -> str:
    """
    Busca la columna PostgreSQL de un field externo.

    Orden: field con el mismo nombre externo, columna con el nombre
    normalizado, y si no hay match, el nombre normalizado.
    """
    normalized = normalize_identifier(field_name)
    for column, external in mapping.items():
        if external == field_name or column == normalized:
            return column
    return normalized
