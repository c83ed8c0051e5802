"""
Ejecutores de lectura y escritura sobre tablas con forma Airtable.
"""
from airtable_pg.infrastructure.repositories.query_executor import QueryExecutor, SortSpec
from airtable_pg.infrastructure.repositories.mutation_executor import MutationExecutor, generate_record_id

__all__ = ["QueryExecutor", "SortSpec", "MutationExecutor", "generate_record_id"]
