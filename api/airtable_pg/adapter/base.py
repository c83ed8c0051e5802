"""
Punto de entrada del adaptador: una base = una base PostgreSQL.
"""
from typing import Optional

from airtable_pg.adapter.table import AirtableTable
from airtable_pg.core.config import get_base_map, settings
from airtable_pg.infrastructure.database.pool_registry import PoolRegistry, pool_registry
from airtable_pg.infrastructure.records.codec import RecordCodec
from airtable_pg.infrastructure.repositories.mutation_executor import MutationExecutor
from airtable_pg.infrastructure.repositories.query_executor import QueryExecutor
from airtable_pg.shared.exceptions.domain import ValidationException


class AirtableBase:
    """
    Callable como `base("tabla")`. Comparte el pool del proceso con la API
    REST; los records del SDK no exponen `pg_id`.
    """

    def __init__(
        self,
        database: str,
        registry: Optional[PoolRegistry] = None,
        query_executor: Optional[QueryExecutor] = None,
        mutation_executor: Optional[MutationExecutor] = None,
    ):
        self.database = database
        self.registry = registry or pool_registry
        codec = RecordCodec()
        self.query_executor = query_executor or QueryExecutor(codec=codec)
        self.mutation_executor = mutation_executor or MutationExecutor(codec=codec)

    def __call__(self, table_name: str) -> AirtableTable:
        return self.table(table_name)

    def table(self, table_name: str) -> AirtableTable:
        return AirtableTable(self, table_name)

    def connection(self):
        return self.registry.connection(self.database)


def create_base(database: str, registry: Optional[PoolRegistry] = None) -> AirtableBase:
    """
    Crea una base para la base PostgreSQL indicada
    (haq_scoring, haq_ontology, haq_knowledge...).
    """
    return AirtableBase(database, registry=registry)


def create_base_from_id(base_id: str, registry: Optional[PoolRegistry] = None) -> AirtableBase:
    """
    Igual que create_base pero a partir del id de base Airtable (BASE_MAP).

    Raises:
        ValidationException: si el id no esta en BASE_MAP
    """
    database = get_base_map(settings.BASE_MAP).get(base_id)
    if not database:
        raise ValidationException(f"Base Airtable desconocida: {base_id}", field="base_id")
    return create_base(database, registry=registry)
