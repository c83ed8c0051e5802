"""
Casos de uso de la API REST compatible con Airtable.

Cada operacion retorna un OperationResult (clasificacion + body JSON). El
core nunca produce codigos HTTP: la capa de requests traduce la
clasificacion.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import psycopg
from loguru import logger

from airtable_pg.application.dto.record_dto import (
    DeletedRecordDTO,
    RecordDTO,
    RecordFieldsRequestDTO,
    RecordListDTO,
    dump,
)
from airtable_pg.core.config import get_base_map, settings
from airtable_pg.domain.entities.pagination import PaginationCursor
from airtable_pg.infrastructure.database.pool_registry import PoolRegistry
from airtable_pg.infrastructure.records.codec import RecordCodec
from airtable_pg.infrastructure.repositories.mutation_executor import MutationExecutor
from airtable_pg.infrastructure.repositories.query_executor import QueryExecutor
from airtable_pg.shared.constants.record_constants import ResultStatus
from airtable_pg.shared.exceptions.base import AppException
from airtable_pg.shared.exceptions.domain import EntityNotFoundException, ValidationException


@dataclass(frozen=True)
class OperationResult:
    status: ResultStatus
    body: Any

    @classmethod
    def ok(cls, body: Any) -> "OperationResult":
        return cls(ResultStatus.OK, body)

    @classmethod
    def from_exception(cls, exc: AppException) -> "OperationResult":
        return cls(exc.status, exc.to_body())


def parse_page_size(raw: Any, default: int, maximum: int) -> int:
    """
    maxRecords: entero positivo acotado a `maximum`. Valores invalidos o
    <= 0 usan el default.
    """
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value <= 0:
        return default
    return min(value, maximum)


def parse_sort_params(query_params: Mapping[str, Any]) -> List[Dict[str, str]]:
    """sort[0][field]=x&sort[0][direction]=desc&sort[1][field]=y ..."""
    sort: List[Dict[str, str]] = []
    index = 0
    while f"sort[{index}][field]" in query_params:
        sort.append(
            {
                "field": query_params[f"sort[{index}][field]"],
                "direction": query_params.get(f"sort[{index}][direction]") or "asc",
            }
        )
        index += 1
    return sort


def extract_fields(body: Any) -> Dict[str, Any]:
    """Body {"fields": {...}} o mapa plano -> fields."""
    if not isinstance(body, dict):
        raise ValidationException("El body debe ser un objeto JSON", field="body")
    return RecordFieldsRequestDTO.model_validate(body).fields


class RecordUseCases:
    """
    Operaciones sobre records de una base Airtable (= base PostgreSQL).
    """

    def __init__(
        self,
        registry: PoolRegistry,
        *,
        base_map: Optional[Mapping[str, str]] = None,
        query_executor: Optional[QueryExecutor] = None,
        mutation_executor: Optional[MutationExecutor] = None,
    ) -> None:
        self.registry = registry
        self.base_map = dict(base_map) if base_map is not None else get_base_map(settings.BASE_MAP)
        # La API REST expone el PK numerico como pg_id
        codec = RecordCodec(include_pk=True)
        self.query_executor = query_executor or QueryExecutor(codec=codec)
        self.mutation_executor = mutation_executor or MutationExecutor(codec=codec)

    def handle(
        self,
        method: str,
        base_id: str,
        table_name: str,
        record_id: Optional[str] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> OperationResult:
        """Ruteo por metodo HTTP (misma semantica que la API REST de Airtable)."""
        method = method.upper()
        query_params = query_params or {}

        if method == "GET":
            if record_id:
                return self.get_record(base_id, table_name, record_id)
            return self.list_records(base_id, table_name, query_params)
        if method == "POST":
            return self.create_record(base_id, table_name, body)
        if method in ("PATCH", "PUT"):
            return self.update_record(base_id, table_name, record_id, body)
        if method == "DELETE":
            if record_id:
                return self.delete_record(base_id, table_name, record_id)
            return self.delete_records(base_id, table_name, _as_list(query_params.get("records[]")))

        return OperationResult(
            ResultStatus.BAD_REQUEST,
            {"error": "METHOD_NOT_ALLOWED", "message": f"Metodo no permitido: {method}", "details": {}},
        )

    def list_records(self, base_id: str, table_name: str, query_params: Mapping[str, Any]) -> OperationResult:
        page_size = parse_page_size(
            query_params.get("maxRecords") or query_params.get("pageSize"),
            settings.DEFAULT_PAGE_SIZE,
            settings.MAX_PAGE_SIZE,
        )
        cursor = PaginationCursor.decode(query_params.get("offset"))

        def op(conn: psycopg.Connection) -> Any:
            page = self.query_executor.list_page(
                conn,
                table_name,
                formula=query_params.get("filterByFormula"),
                sort=parse_sort_params(query_params),
                page_size=page_size,
                cursor=cursor,
            )
            return dump(RecordListDTO.from_page(page))

        return self._run(base_id, op)

    def get_record(self, base_id: str, table_name: str, record_id: str) -> OperationResult:
        def op(conn: psycopg.Connection) -> Any:
            record = self.query_executor.find(conn, table_name, record_id)
            return dump(RecordDTO.from_entity(record))

        return self._run(base_id, op)

    def create_record(self, base_id: str, table_name: str, body: Any) -> OperationResult:
        def op(conn: psycopg.Connection) -> Any:
            record = self.mutation_executor.create(conn, table_name, extract_fields(body))
            return dump(RecordDTO.from_entity(record))

        return self._run(base_id, op)

    def update_record(
        self, base_id: str, table_name: str, record_id: Optional[str], body: Any
    ) -> OperationResult:
        def op(conn: psycopg.Connection) -> Any:
            if not record_id:
                raise ValidationException("Record ID requerido para update", field="recordId")
            record = self.mutation_executor.update(conn, table_name, record_id, extract_fields(body))
            return dump(RecordDTO.from_entity(record))

        return self._run(base_id, op)

    def delete_record(self, base_id: str, table_name: str, record_id: str) -> OperationResult:
        def op(conn: psycopg.Connection) -> Any:
            deleted = self.mutation_executor.destroy(conn, table_name, [record_id])
            if not deleted:
                raise EntityNotFoundException("Record", record_id)
            return dump(DeletedRecordDTO(id=deleted[0]["id"]))

        return self._run(base_id, op)

    def delete_records(self, base_id: str, table_name: str, record_ids: List[str]) -> OperationResult:
        def op(conn: psycopg.Connection) -> Any:
            deleted = self.mutation_executor.destroy(conn, table_name, record_ids)
            return {"records": [dump(DeletedRecordDTO(id=d["id"])) for d in deleted]}

        return self._run(base_id, op)

    def _database_for(self, base_id: str) -> str:
        database = self.base_map.get(base_id)
        if not database:
            raise EntityNotFoundException("Base", base_id)
        return database

    def _run(self, base_id: str, op: Callable[[psycopg.Connection], Any]) -> OperationResult:
        """
        Ejecuta la operacion con una conexion del pool y clasifica el
        resultado. La conexion vuelve al pool en cualquier salida.
        """
        try:
            database = self._database_for(base_id)
            with self.registry.connection(database) as conn:
                return OperationResult.ok(op(conn))
        except AppException as e:
            if e.status is ResultStatus.SERVER_ERROR:
                logger.error(f"{e.error_code}: {e.message}")
            return OperationResult.from_exception(e)
        except psycopg.Error as e:
            logger.error(f"Error de base de datos: {e}")
            return OperationResult(
                ResultStatus.SERVER_ERROR,
                {"error": "UPSTREAM_FAILURE", "message": str(e), "details": {}},
            )
        except Exception as e:
            logger.exception(f"Error no manejado: {e}")
            return OperationResult(
                ResultStatus.SERVER_ERROR,
                {"error": "INTERNAL_SERVER_ERROR", "message": str(e), "details": {}},
            )


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]
