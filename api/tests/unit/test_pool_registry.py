"""
Tests del registro de pools (un pool por base, creado una sola vez).
"""
from __future__ import annotations

import threading
from contextlib import contextmanager

import pytest

from airtable_pg.infrastructure.database.pool_registry import PoolRegistry


class _FakePool:
    def __init__(self, database: str) -> None:
        self.database = database
        self.closed = False
        self.checked_out = 0
        self.returned = 0

    @contextmanager
    def connection(self):
        self.checked_out += 1
        try:
            yield f"conn-{self.database}"
        finally:
            self.returned += 1

    def close(self) -> None:
        self.closed = True


class _CountingFactory:
    def __init__(self) -> None:
        self.created = []
        self._lock = threading.Lock()

    def __call__(self, database: str) -> _FakePool:
        with self._lock:
            self.created.append(database)
        return _FakePool(database)


def test_pool_is_created_once_per_database() -> None:
    factory = _CountingFactory()
    registry = PoolRegistry(pool_factory=factory)

    first = registry.get_pool("haq_scoring")
    assert registry.get_pool("haq_scoring") is first
    registry.get_pool("haq_ontology")

    assert factory.created == ["haq_scoring", "haq_ontology"]
    assert registry.open_databases() == ["haq_ontology", "haq_scoring"]


def test_concurrent_first_use_creates_a_single_pool() -> None:
    factory = _CountingFactory()
    registry = PoolRegistry(pool_factory=factory)
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        registry.get_pool("haq_scoring")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert factory.created == ["haq_scoring"]


def test_connection_is_returned_even_on_error() -> None:
    registry = PoolRegistry(pool_factory=_CountingFactory())

    with pytest.raises(RuntimeError):
        with registry.connection("haq_scoring") as conn:
            assert conn == "conn-haq_scoring"
            raise RuntimeError("boom")

    pool = registry.get_pool("haq_scoring")
    assert pool.checked_out == pool.returned == 1


def test_close_all_closes_and_forgets_pools() -> None:
    registry = PoolRegistry(pool_factory=_CountingFactory())
    pools = [registry.get_pool("a"), registry.get_pool("b")]

    assert registry.close_all() == 2
    assert all(p.closed for p in pools)
    assert registry.open_databases() == []
    assert registry.close_all() == 0
