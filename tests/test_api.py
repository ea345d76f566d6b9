# tests/test_api.py
from fastapi.testclient import TestClient

import primes_api.main as main_module

from primes_api.config import PrimeCacheSettings
from primes_api.exceptions import CacheStoreError
from primes_api.main import create_app
from primes_api.services.cache import PrimeCache
from primes_api.services.cache_backends import InMemoryPrimeCache, PostgresPrimeCache
from primes_api.services.cache_selection import Backend, BackendResolver


class _DownCache(PrimeCache):
    def get(self, key):
        raise CacheStoreError("Connection refused")

    def put(self, key, value):
        raise CacheStoreError("Connection refused")


def test_get_prime_200(client):
    res = client.get("/api/primes/getPrime", params={"position": 10})
    assert res.status_code == 200
    assert res.json() == 29


def test_get_prime_hit_returns_same_value(client):
    first = client.get("/api/primes/getPrime", params={"position": 5})
    second = client.get("/api/primes/getPrime", params={"position": 5})
    assert first.json() == second.json() == 11


def test_get_prime_400_for_non_positive_position(client):
    res = client.get("/api/primes/getPrime", params={"position": 0})
    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "INVALID_PRIME_POSITION"
    assert body["message"] == "Prime position must be greater than zero. Received: 0"
    assert body["path"] == "/api/primes/getPrime"
    assert body["timestamp"].endswith("Z")


def test_get_prime_422_when_position_is_not_an_integer(client):
    assert client.get("/api/primes/getPrime", params={"position": "abc"}).status_code == 422
    assert client.get("/api/primes/getPrime").status_code == 422


def test_health_up_for_memory_backend(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {
        "status": "UP",
        "details": {"configuredBackend": "MEMORY", "effectiveBackend": "MEMORY"},
    }


def test_info_for_memory_backend(client):
    res = client.get("/info")
    assert res.status_code == 200
    assert res.json() == {"primeCache": {"configuredBackend": "MEMORY", "effectiveBackend": "MEMORY"}}


def test_metrics_exposition(client):
    client.get("/api/primes/getPrime", params={"position": 3})
    client.get("/api/primes/getPrime", params={"position": 3})
    res = client.get("/metrics")
    assert res.status_code == 200
    body = res.text
    assert 'prime_cache_operations_total{backend="memory",operation="get",outcome="miss"} 1.0' in body
    assert 'prime_cache_operations_total{backend="memory",operation="get",outcome="hit"} 1.0' in body


def test_unreachable_backend_reports_degraded_and_still_serves():
    resolver = BackendResolver({Backend.REDIS: lambda: False})
    app = create_app(settings=PrimeCacheSettings(backend="redis"), resolver=resolver)
    with TestClient(app) as c:
        health = c.get("/health")
        assert health.status_code == 200
        assert health.json() == {
            "status": "DEGRADED",
            "details": {
                "configuredBackend": "REDIS",
                "effectiveBackend": "MEMORY",
                "fallbackReason": "CONNECTIVITY_FAILED",
            },
        }
        assert c.get("/api/primes/getPrime", params={"position": 10}).json() == 29


def test_unconfigured_backend_reports_degraded():
    app = create_app(settings=PrimeCacheSettings(backend=None))
    with TestClient(app) as c:
        info = c.get("/info").json()
        assert info["primeCache"]["fallbackReason"] == "NOT_CONFIGURED"
        assert c.get("/health").json()["status"] == "DEGRADED"


def test_broken_cache_never_fails_requests():
    app = create_app(settings=PrimeCacheSettings(backend="memory"), cache=_DownCache())
    with TestClient(app) as c:
        for _ in range(2):
            res = c.get("/api/primes/getPrime", params={"position": 10})
            assert res.status_code == 200
            assert res.json() == 29


def test_shutdown_disposes_engine_of_built_cache(sqlite_engine, monkeypatch):
    disposed = []
    cache = PostgresPrimeCache(sqlite_engine)
    monkeypatch.setattr(sqlite_engine, "dispose", lambda *a, **kw: disposed.append(True))
    monkeypatch.setattr(main_module, "create_cache", lambda selection, settings: cache)

    app = create_app(settings=PrimeCacheSettings(backend="memory"))
    with TestClient(app) as c:
        assert c.get("/api/primes/getPrime", params={"position": 10}).json() == 29
        assert disposed == []

    assert disposed == [True]


def test_shutdown_leaves_injected_cache_open():
    class _TrackingCache(InMemoryPrimeCache):
        closed = False

        def close(self):
            self.closed = True

    cache = _TrackingCache()
    with TestClient(create_app(settings=PrimeCacheSettings(backend="memory"), cache=cache)) as c:
        c.get("/api/primes/getPrime", params={"position": 2})
    assert not cache.closed


def test_backend_that_fails_setup_falls_back_to_memory(monkeypatch):
    def _fail(selection, settings):
        raise CacheStoreError("permission denied for schema public")

    monkeypatch.setattr(main_module, "create_cache", _fail)
    resolver = BackendResolver({Backend.POSTGRES: lambda: True})
    app = create_app(settings=PrimeCacheSettings(backend="postgres"), resolver=resolver)

    with TestClient(app) as c:
        assert c.get("/health").json() == {
            "status": "DEGRADED",
            "details": {
                "configuredBackend": "POSTGRES",
                "effectiveBackend": "MEMORY",
                "fallbackReason": "CONNECTIVITY_FAILED",
            },
        }
        assert c.get("/api/primes/getPrime", params={"position": 5}).json() == 11
        assert c.get("/api/primes/getPrime", params={"position": 5}).json() == 11
