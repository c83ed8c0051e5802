"""
Excepciones relacionadas con la base de datos.
"""
from typing import Optional

from airtable_pg.shared.constants.record_constants import ResultStatus
from airtable_pg.shared.exceptions.base import AppException


class UpstreamFailureException(AppException):
    """La base de datos no responde o el statement fallo."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(
            message=message,
            status=ResultStatus.SERVER_ERROR,
            error_code="UPSTREAM_FAILURE",
            details={"table": table} if table else None
        )


class SchemaNotFoundException(AppException):
    """
    La tabla no existe en el search path configurado.

    En lecturas equivale a "sin filas" / not found; en escrituras el caller
    la convierte en UpstreamFailureException.
    """

    def __init__(self, table: str, schemas: list[str]):
        super().__init__(
            message=f"Tabla '{table}' no encontrada en schemas {schemas}",
            status=ResultStatus.NOT_FOUND,
            error_code="TABLE_NOT_FOUND",
            details={"table": table, "schemas": schemas}
        )
        self.table = table
