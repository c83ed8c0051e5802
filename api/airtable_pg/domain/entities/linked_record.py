"""
Entidades de dominio para linked records.

Un linked record se guarda como un array JSON de ids opacos que apuntan a
filas de otra tabla. Los clientes filtran por la clave natural legible
(p.ej. report_id = "R-001"), asi que hay que traducirla al id opaco.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class LinkedRecordMapping:
    """Field -> (tabla destino, columna de clave natural)."""

    table: str
    lookup_column: str


class LinkOutcome(str, Enum):
    RESOLVED = "resolved"
    NOT_A_LINK = "not_a_link"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class LinkResolution:
    outcome: LinkOutcome
    record_id: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.outcome is LinkOutcome.RESOLVED


# Mapeo por defecto (clave en minusculas)
DEFAULT_LINKED_RECORD_MAP = {
    "report_id": LinkedRecordMapping(table="reports", lookup_column="report_id"),
    "patient_id": LinkedRecordMapping(table="patients", lookup_column="patient_id"),
    "patient": LinkedRecordMapping(table="patients", lookup_column="patient_id"),
    "marker": LinkedRecordMapping(table="markers", lookup_column="marker_id"),
    "marker_link": LinkedRecordMapping(table="markers", lookup_column="marker_id"),
    "client_id": LinkedRecordMapping(table="partners", lookup_column="partner_id"),
}
