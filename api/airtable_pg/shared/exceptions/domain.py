"""
Excepciones relacionadas con la logica de dominio.
"""
from typing import Any

from airtable_pg.shared.constants.record_constants import ResultStatus
from airtable_pg.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepcion base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status=ResultStatus.BAD_REQUEST,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepcion cuando no se encuentra un record (o la tabla no existe)."""

    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} no encontrado: {entity_id}",
            error_code="NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status = ResultStatus.NOT_FOUND


class ValidationException(DomainException):
    """Excepcion para errores de validacion del request."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class FormulaSyntaxException(DomainException):
    """Formula no reconocida (solo se levanta en modo estricto)."""

    def __init__(self, formula: str, reason: str):
        super().__init__(
            message=f"filterByFormula no soportada: {reason}",
            error_code="INVALID_FILTER_BY_FORMULA",
            details={"formula": formula, "reason": reason}
        )
