"""
Excepcion base para todas las excepciones personalizadas de la aplicacion.
"""
from typing import Optional, Dict, Any

from airtable_pg.shared.constants.record_constants import ResultStatus


class AppException(Exception):
    """
    Excepcion base de la aplicacion.
    Todas las excepciones personalizadas deben heredar de esta clase.

    No conoce codigos HTTP: solo clasifica el resultado (`status`) y es la
    capa de requests quien decide como representarlo.
    """

    def __init__(
        self,
        message: str,
        status: ResultStatus = ResultStatus.SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Inicializa la excepcion.

        Args:
            message: Mensaje de error descriptivo
            status: Clasificacion del resultado
            error_code: Codigo de error personalizado
            details: Detalles adicionales del error
        """
        self.message = message
        self.status = status
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        """Cuerpo JSON del error."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
