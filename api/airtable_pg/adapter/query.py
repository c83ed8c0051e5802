"""
Consulta diferida: select(...) solo guarda opciones, la consulta corre en
first_page / all / each_page.
"""
from typing import Any, Callable, Dict, List, Mapping, Optional

from airtable_pg.core.config import settings
from airtable_pg.domain.entities.record import Record

# Nombre del SDK -> nombre interno
SELECT_OPTIONS = {
    "filterByFormula": "formula",
    "maxRecords": "max_records",
    "pageSize": "page_size",
    "sort": "sort",
}


class AirtableQuery:
    def __init__(self, base, table_name: str):
        self.base = base
        self.table_name = table_name
        self.options: Dict[str, Any] = {}

    def select(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> "AirtableQuery":
        merged = {**(options or {}), **kwargs}
        unknown = set(merged) - set(SELECT_OPTIONS)
        if unknown:
            raise TypeError(f"Opciones de select no soportadas: {', '.join(sorted(unknown))}")
        self.options = {SELECT_OPTIONS[k]: v for k, v in merged.items()}
        return self

    def first_page(self) -> List[Record]:
        """Hasta maxRecords records (100 si no se indica)."""
        page_size = self._positive("max_records") or settings.SDK_FIRST_PAGE_SIZE
        with self.base.connection() as conn:
            page = self.base.query_executor.list_page(
                conn,
                self.table_name,
                formula=self.options.get("formula"),
                sort=self.options.get("sort"),
                page_size=page_size,
            )
        return page.records

    def all(self) -> List[Record]:
        """Todas las paginas, acotado por maxRecords si se indico."""
        records: List[Record] = []

        def collect(page_records: List[Record]) -> None:
            records.extend(page_records)

        self.each_page(collect)
        return records

    def each_page(self, callback: Callable[[List[Record]], Optional[bool]]) -> None:
        """
        Invoca callback(records) por cada pagina. Si el callback retorna
        False se deja de paginar.
        """
        limit = self._positive("max_records")
        page_size = self._positive("page_size") or settings.SDK_FIRST_PAGE_SIZE
        if limit:
            page_size = min(page_size, limit)

        seen = 0
        with self.base.connection() as conn:
            pages = self.base.query_executor.iter_pages(
                conn,
                self.table_name,
                formula=self.options.get("formula"),
                sort=self.options.get("sort"),
                page_size=page_size,
            )
            for page in pages:
                batch = page.records
                if limit:
                    batch = batch[: limit - seen]
                seen += len(batch)
                if callback(batch) is False:
                    break
                if limit and seen >= limit:
                    break

    def _positive(self, key: str) -> Optional[int]:
        value = self.options.get(key)
        if value is None:
            return None
        value = int(value)
        return value if value > 0 else None
