"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .record_dto import (
    DeletedRecordDTO,
    RecordDTO,
    RecordFieldsRequestDTO,
    RecordListDTO,
    dump,
)

__all__ = [
    "DeletedRecordDTO",
    "RecordDTO",
    "RecordFieldsRequestDTO",
    "RecordListDTO",
    "dump",
]
