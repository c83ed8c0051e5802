"""
Operaciones por tabla: select/find/create/update/destroy.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from airtable_pg.adapter.query import AirtableQuery
from airtable_pg.domain.entities.record import Record
from airtable_pg.shared.utils.identifiers import normalize_identifier


class AirtableTable:
    def __init__(self, base, table_name: str):
        self.base = base
        self.table_name = normalize_identifier(table_name)

    def select(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> AirtableQuery:
        """
        Acepta las opciones del SDK (filterByFormula, maxRecords, sort,
        pageSize) como dict o como keyword arguments.
        """
        return AirtableQuery(self.base, self.table_name).select(options, **kwargs)

    def find(self, record_id: str) -> Record:
        """
        Raises:
            EntityNotFoundException: si el record no existe
        """
        with self.base.connection() as conn:
            return self.base.query_executor.find(conn, self.table_name, record_id)

    def create(self, fields: Mapping[str, Any]) -> Record:
        with self.base.connection() as conn:
            return self.base.mutation_executor.create(conn, self.table_name, fields)

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Record:
        with self.base.connection() as conn:
            return self.base.mutation_executor.update(conn, self.table_name, record_id, fields)

    def destroy(self, record_ids: Union[str, Sequence[str]]) -> List[Dict[str, Any]]:
        """Retorna [{"id": ..., "deleted": True}] por cada record borrado."""
        with self.base.connection() as conn:
            return self.base.mutation_executor.destroy(conn, self.table_name, record_ids)
