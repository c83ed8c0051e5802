"""
Endpoints compatibles con la API REST de Airtable.

- GET    /v0/{baseId}/{tableName}              listado (filterByFormula, sort, paginacion)
- GET    /v0/{baseId}/{tableName}/{recordId}   un record
- POST   /v0/{baseId}/{tableName}              crear
- PATCH  /v0/{baseId}/{tableName}/{recordId}   actualizar (PUT igual)
- DELETE /v0/{baseId}/{tableName}/{recordId}   borrar (o ?records[]=... en lote)
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from airtable_pg.api.responses import error_response, json_response
from airtable_pg.api.v0.dependencies.use_case_deps import get_record_use_cases
from airtable_pg.application.use_cases.record_use_cases import OperationResult, RecordUseCases
from airtable_pg.shared.constants.record_constants import ResultStatus


router = APIRouter(tags=["Records"])


def to_response(result: OperationResult) -> JSONResponse:
    return json_response(result.status, result.body)


def _query_params(request: Request) -> Dict[str, Any]:
    """Los parametros repetidos (records[]=a&records[]=b) quedan como lista."""
    params: Dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values if key.endswith("[]") or len(values) > 1 else values[0]
    return params


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    return json.loads(raw)


async def _dispatch(
    request: Request,
    use_cases: RecordUseCases,
    base_id: str,
    table_name: str,
    record_id: Optional[str] = None,
) -> JSONResponse:
    body: Any = None
    if request.method in ("POST", "PATCH", "PUT"):
        try:
            body = await _json_body(request)
        except ValueError:
            return error_response(ResultStatus.BAD_REQUEST, "INVALID_JSON", "Body JSON invalido")

    # psycopg es sincrono: la operacion corre en el threadpool
    result = await run_in_threadpool(
        use_cases.handle,
        request.method,
        base_id,
        table_name,
        record_id,
        _query_params(request),
        body,
    )
    return to_response(result)


@router.api_route(
    "/{base_id}/{table_name}",
    methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
    summary="Listar / crear records",
)
async def table_endpoint(
    request: Request,
    base_id: str,
    table_name: str,
    use_cases: RecordUseCases = Depends(get_record_use_cases),
) -> JSONResponse:
    """
    GET lista records (maxRecords, offset, filterByFormula, sort[N][field]).
    POST crea un record. PATCH/PUT/DELETE sin recordId son requests invalidos,
    salvo DELETE con records[] (borrado en lote).
    """
    return await _dispatch(request, use_cases, base_id, table_name)


@router.api_route(
    "/{base_id}/{table_name}/{record_id}",
    methods=["GET", "PATCH", "PUT", "DELETE"],
    summary="Obtener / actualizar / borrar un record",
)
async def record_endpoint(
    request: Request,
    base_id: str,
    table_name: str,
    record_id: str,
    use_cases: RecordUseCases = Depends(get_record_use_cases),
) -> JSONResponse:
    """Operaciones sobre un record por id opaco."""
    return await _dispatch(request, use_cases, base_id, table_name, record_id)
