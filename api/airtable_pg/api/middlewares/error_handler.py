"""
Middleware de ultimo recurso: nada que escape de un endpoint llega al
cliente como traza.
"""
import psycopg
from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from airtable_pg.api.responses import error_response, json_response
from airtable_pg.shared.constants.record_constants import ResultStatus
from airtable_pg.shared.exceptions.base import AppException


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Convierte excepciones no capturadas en el cuerpo de error estilo
    Airtable. Los casos de uso ya clasifican sus errores; aqui solo llegan
    fallas fuera de ellos (dependencias, serializacion).
    """

    async def dispatch(self, request: Request, call_next):
        route = f"{request.method} {request.url.path}"
        try:
            return await call_next(request)
        except AppException as exc:
            logger.warning(f"{route}: {exc.error_code} - {exc.message}")
            return json_response(exc.status, exc.to_body())
        except psycopg.Error as exc:
            logger.error(f"{route}: error de base de datos: {exc}")
            return error_response(ResultStatus.SERVER_ERROR, "UPSTREAM_FAILURE", str(exc))
        except Exception as exc:
            logger.opt(exception=exc).error(f"{route}: error no manejado: {exc}")
            return error_response(
                ResultStatus.SERVER_ERROR,
                "INTERNAL_SERVER_ERROR",
                "Ha ocurrido un error interno del servidor",
            )
