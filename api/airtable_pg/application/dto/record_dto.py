"""
DTOs de la API REST compatible con Airtable.

Formato de respuesta:
- record:  {"id": "rec...", "fields": {...}, "createdTime": "..."}
- listado: {"records": [...], "offset": "..."}  (offset solo si hay mas)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from airtable_pg.domain.entities.pagination import Page
from airtable_pg.domain.entities.record import Record


class RecordDTO(BaseModel):
    """Record en el envelope de Airtable."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str]
    fields: Dict[str, Any] = Field(default_factory=dict)
    created_time: Optional[str] = Field(None, alias="createdTime")

    @classmethod
    def from_entity(cls, record: Record) -> "RecordDTO":
        return cls(id=record.id, fields=record.fields, created_time=record.created_time)


class RecordListDTO(BaseModel):
    """Pagina de records. La ausencia de `offset` indica la ultima pagina."""

    records: List[RecordDTO] = Field(default_factory=list)
    offset: Optional[str] = None

    @classmethod
    def from_page(cls, page: Page) -> "RecordListDTO":
        return cls(
            records=[RecordDTO.from_entity(r) for r in page.records],
            offset=page.next_cursor.encode() if page.next_cursor else None,
        )


class DeletedRecordDTO(BaseModel):
    id: str
    deleted: bool = True


class RecordFieldsRequestDTO(BaseModel):
    """
    Body de create/update. Acepta {"fields": {...}} o el mapa de fields
    directamente (clientes legacy que no envuelven en "fields").
    """

    model_config = ConfigDict(extra="ignore")

    fields: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_fields(cls, data: Any) -> Any:
        if isinstance(data, dict) and not isinstance(data.get("fields"), dict):
            return {"fields": data}
        return data


def dump(dto: BaseModel) -> Dict[str, Any]:
    """Serializa con los nombres de Airtable (createdTime); `offset` nulo se omite."""
    body = dto.model_dump(by_alias=True)
    if "offset" in body and body["offset"] is None:
        del body["offset"]
    return body
