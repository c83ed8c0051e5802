"""
Entidades de dominio para paginacion por offset.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from airtable_pg.domain.entities.record import Record


@dataclass(frozen=True)
class PaginationCursor:
    """
    Cursor opaco de paginacion. Internamente es un offset entero; hacia
    afuera se serializa como string.
    """

    offset: int = 0

    def encode(self) -> str:
        return str(self.offset)

    @classmethod
    def decode(cls, raw: Optional[str]) -> "PaginationCursor":
        """
        Cursor invalido o negativo equivale a la primera pagina
        (mismo comportamiento que parseInt(...) || 0).
        """
        if raw is None or str(raw).strip() == "":
            return cls(0)
        try:
            value = int(str(raw).strip())
        except ValueError:
            return cls(0)
        return cls(max(value, 0))

    def advance(self, page_size: int) -> "PaginationCursor":
        return PaginationCursor(self.offset + page_size)


@dataclass
class Page:
    """Una pagina de records y, si hay mas, el cursor de la siguiente."""

    records: List[Record] = field(default_factory=list)
    next_cursor: Optional[PaginationCursor] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None
