# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from primes_api.config import PrimeCacheSettings
from primes_api.main import create_app
from primes_api.services.cache_backends import InMemoryPrimeCache


@pytest.fixture(scope="function")
def client():
    """A TestClient on an app configured with the memory backend."""
    app = create_app(settings=PrimeCacheSettings(backend="memory"))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def memory_cache():
    return InMemoryPrimeCache()


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite shared across threads; stands in for PostgreSQL."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def file_sqlite_engine(tmp_path):
    """File-backed SQLite with a connection per thread, for concurrent writers."""
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'prime_cache.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        engine.dispose()
