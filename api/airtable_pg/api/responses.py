"""
Traduccion de la clasificacion de resultados a respuestas HTTP.
"""
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from airtable_pg.shared.constants.record_constants import ResultStatus


STATUS_CODES = {
    ResultStatus.OK: status.HTTP_200_OK,
    ResultStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultStatus.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ResultStatus.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def json_response(result_status: ResultStatus, body: Any) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES[result_status],
        content=jsonable_encoder(body),
    )


def error_response(result_status: ResultStatus, error: str, message: str) -> JSONResponse:
    """Respuesta de error con el cuerpo {error, message, details}."""
    return json_response(result_status, {"error": error, "message": message, "details": {}})
