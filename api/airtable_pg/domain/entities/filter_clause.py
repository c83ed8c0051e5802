"""
Entidad de dominio: FilterClause (fragmento SQL + parametros).
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional


@dataclass(frozen=True)
class FilterClause:
    """Predicado SQL con placeholders %s y sus valores, en el mismo orden."""

    sql: str
    params: List[Any] = field(default_factory=list)

    @staticmethod
    def conjunction(clauses: Iterable["FilterClause"]) -> Optional["FilterClause"]:
        """Combina clausulas con AND. Sin clausulas no hay WHERE."""
        clauses = list(clauses)
        if not clauses:
            return None
        params: List[Any] = []
        for clause in clauses:
            params.extend(clause.params)
        return FilterClause(sql=" AND ".join(c.sql for c in clauses), params=params)
