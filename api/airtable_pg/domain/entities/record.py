"""
Entidad de dominio: Record (registro estilo Airtable).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ValueKind(str, Enum):
    """Tipo inferido de un valor de field (se infiere por valor, no por schema)."""
    SCALAR = "scalar"
    LIST = "list"
    OBJECT = "object"
    BOOLEAN = "boolean"
    MISSING = "missing"


@dataclass(frozen=True)
class TypedValue:
    """Valor de un field junto con su tipo inferido."""

    kind: ValueKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "TypedValue":
        # bool antes que escalares: True es instancia de int
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, value)
        if isinstance(value, list):
            return cls(ValueKind.LIST, value)
        if isinstance(value, dict):
            return cls(ValueKind.OBJECT, value)
        return cls(ValueKind.SCALAR, value)


@dataclass
class Record:
    """
    Registro materializado.

    - id: id opaco ("rec" + 14 caracteres), inmutable
    - fields: mapa ordenado con los nombres externos de los fields
    - created_time: ISO 8601 (UTC)
    """

    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    created_time: Optional[str] = None

    def get(self, field_name: str) -> Any:
        """
        Retorna el valor del field tal cual (igual que el SDK de Airtable).
        Los arrays de linked records no se desenvuelven.
        """
        return self.fields.get(field_name)

    def get_typed(self, field_name: str) -> TypedValue:
        """Retorna el valor del field con su tipo explicito."""
        if field_name not in self.fields:
            return TypedValue(ValueKind.MISSING)
        return TypedValue.of(self.fields[field_name])

    def to_envelope(self) -> Dict[str, Any]:
        """Envelope JSON: {id, fields, createdTime}."""
        return {
            "id": self.id,
            "fields": dict(self.fields),
            "createdTime": self.created_time,
        }
