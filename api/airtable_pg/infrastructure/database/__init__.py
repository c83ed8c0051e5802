"""
Acceso a PostgreSQL.

El core solo necesita un cliente capaz de ejecutar queries parametrizadas:
una conexion psycopg obtenida del registro de pools.
"""
from airtable_pg.infrastructure.database.pool_registry import PoolRegistry, pool_registry

__all__ = ["PoolRegistry", "pool_registry"]
