"""
Constantes relacionadas con records estilo Airtable.
Define el formato de ids, columnas internas y la clasificacion de resultados.
"""
from enum import Enum


# Formato de id opaco: prefijo literal + 14 caracteres alfanumericos
RECORD_ID_PREFIX = "rec"
RECORD_ID_LENGTH = 14
RECORD_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Columnas de bookkeeping (nunca se exponen como fields)
PRIMARY_KEY_COLUMN = "id"
RECORD_ID_COLUMN = "airtable_record_id"
CREATED_TIME_COLUMN = "airtable_created_time"
INTERNAL_COLUMNS = frozenset({PRIMARY_KEY_COLUMN, RECORD_ID_COLUMN, CREATED_TIME_COLUMN})

# Field donde se expone el PK numerico en la API REST
PG_ID_FIELD = "pg_id"


class ResultStatus(str, Enum):
    """Clasificacion del resultado de una operacion (la capa HTTP la traduce)."""
    OK = "ok"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    SERVER_ERROR = "server_error"


class SortDirection(str, Enum):
    """Direcciones de orden aceptadas en `sort`."""
    ASC = "asc"
    DESC = "desc"
