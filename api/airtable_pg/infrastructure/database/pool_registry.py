"""
Registro de pools de conexiones PostgreSQL (psycopg v3 + psycopg_pool).

Cada base Airtable apunta a una base PostgreSQL distinta, por lo que se
mantiene un pool por nombre de base:
- se crea en el primer uso (lock por clave: dos requests concurrentes a la
  misma base nunca abren dos pools)
- se cierra explicitamente en el shutdown de la aplicacion

Las conexiones se entregan en autocommit: cada statement es su propia
transaccion. Las secuencias resolver-luego-consultar no son atomicas.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

import psycopg
from loguru import logger
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from airtable_pg.core.config import settings

PoolFactory = Callable[[str], ConnectionPool]


def _default_pool_factory(database: str) -> ConnectionPool:
    conninfo = make_conninfo(settings.effective_database_url, dbname=database)
    return ConnectionPool(
        conninfo,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        timeout=settings.DB_POOL_TIMEOUT,
        kwargs={"row_factory": dict_row, "autocommit": True},
        name=f"pg-{database}",
        open=True,
    )


class PoolRegistry:
    """
    Pools por base de datos, creados bajo demanda.

    Uso:
        with registry.connection("haq_scoring") as conn:
            conn.execute("SELECT 1")
    """

    def __init__(self, pool_factory: Optional[PoolFactory] = None) -> None:
        self._pool_factory = pool_factory or _default_pool_factory
        self._pools: Dict[str, ConnectionPool] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, database: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(database)
            if lock is None:
                lock = self._locks[database] = threading.Lock()
            return lock

    def get_pool(self, database: str) -> ConnectionPool:
        """Retorna el pool de la base, creandolo si es el primer uso."""
        pool = self._pools.get(database)
        if pool is not None:
            return pool

        with self._lock_for(database):
            pool = self._pools.get(database)
            if pool is None:
                logger.info(f"Abriendo pool de conexiones para la base '{database}'")
                pool = self._pool_factory(database)
                self._pools[database] = pool
            return pool

    @contextmanager
    def connection(self, database: str) -> Iterator[psycopg.Connection]:
        """
        Checkout de una conexion. Se devuelve al pool en cualquier salida,
        incluidos los errores.
        """
        with self.get_pool(database).connection() as conn:
            yield conn

    def open_databases(self) -> list[str]:
        return sorted(self._pools)

    def close_all(self) -> int:
        """Cierra todos los pools. Retorna cuantos se cerraron."""
        with self._registry_lock:
            pools = list(self._pools.items())
            self._pools.clear()

        for database, pool in pools:
            try:
                pool.close()
                logger.info(f"Pool de '{database}' cerrado")
            except Exception as e:
                logger.error(f"Error cerrando pool de '{database}': {e}")
        return len(pools)


# Registro global del proceso
pool_registry = PoolRegistry()
