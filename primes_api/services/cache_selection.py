# primes_api/services/cache_selection.py

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

import redis
from sqlalchemy import text

from primes_api.config import PrimeCacheSettings
from primes_api.database import create_cache_engine

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    MEMORY = "MEMORY"
    REDIS = "REDIS"
    POSTGRES = "POSTGRES"

    @classmethod
    def parse(cls, value: str) -> Optional["Backend"]:
        """Case-insensitive lookup; returns None for unknown values."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class FallbackReason(str, Enum):
    NOT_CONFIGURED = "NOT_CONFIGURED"
    INVALID_VALUE = "INVALID_VALUE"
    CONNECTIVITY_FAILED = "CONNECTIVITY_FAILED"


@dataclass(frozen=True)
class BackendSelection:
    """
    Outcome of the startup resolution. Created once, never mutated.
    Read by the cache factory, the cache metrics and the health/info endpoints.
    """

    configured_backend: Optional[Backend]
    effective_backend: Backend
    fallback_reason: Optional[FallbackReason] = None
    configured_value: Optional[str] = None
    resolved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    def as_details(self) -> Dict[str, Any]:
        if self.configured_backend is not None:
            configured = self.configured_backend.value
        else:
            configured = self.configured_value or "NONE"
        details: Dict[str, Any] = {
            "configuredBackend": configured,
            "effectiveBackend": self.effective_backend.value,
        }
        if self.is_fallback:
            details["fallbackReason"] = self.fallback_reason.value
        return details


Probe = Callable[[], bool]


def probe_redis(settings: PrimeCacheSettings) -> bool:
    """PING the configured Redis with a bounded connect/read timeout."""
    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        socket_connect_timeout=settings.probe_timeout_seconds,
        socket_timeout=settings.probe_timeout_seconds,
    )
    try:
        return bool(client.ping())
    finally:
        client.close()


def probe_postgres(settings: PrimeCacheSettings) -> bool:
    """Run SELECT 1 against the configured PostgreSQL with a bounded connect timeout."""
    engine = create_cache_engine(settings, connect_timeout=settings.probe_timeout_seconds)
    try:
        with engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar_one() == 1
    finally:
        engine.dispose()


def default_probes(settings: PrimeCacheSettings) -> Dict[Backend, Probe]:
    return {
        Backend.REDIS: lambda: probe_redis(settings),
        Backend.POSTGRES: lambda: probe_postgres(settings),
    }


class BackendResolver:
    """
    Picks the effective cache backend once at startup.

    Never raises: an absent, unknown or unreachable backend resolves to MEMORY
    with the matching FallbackReason, so the service can always start.
    """

    def __init__(self, probes: Mapping[Backend, Probe]):
        self._probes = dict(probes)

    def resolve(self, configured: Optional[str]) -> BackendSelection:
        if configured is None or not str(configured).strip():
            logger.warning("No cache backend configured, defaulting to MEMORY")
            return BackendSelection(None, Backend.MEMORY, FallbackReason.NOT_CONFIGURED)

        if isinstance(configured, Backend):
            raw, backend = configured.value, configured
        else:
            raw = str(configured)
            backend = Backend.parse(raw)
        if backend is None:
            logger.warning("Configured cache backend '%s' is not recognized, defaulting to MEMORY", raw)
            return BackendSelection(None, Backend.MEMORY, FallbackReason.INVALID_VALUE, configured_value=raw)

        if backend is Backend.MEMORY:
            logger.info("Cache backend 'MEMORY' selected as effective backend")
            return BackendSelection(backend, Backend.MEMORY, configured_value=raw)

        if self._probe(backend):
            logger.info("Cache backend '%s' selected as effective backend", backend.value)
            return BackendSelection(backend, backend, configured_value=raw)

        logger.warning("Configured backend '%s' is unreachable, falling back to MEMORY", backend.value)
        return BackendSelection(backend, Backend.MEMORY, FallbackReason.CONNECTIVITY_FAILED, configured_value=raw)

    def _probe(self, backend: Backend) -> bool:
        probe = self._probes.get(backend)
        if probe is None:
            logger.warning("No connectivity probe registered for backend '%s'", backend.value)
            return False
        try:
            return bool(probe())
        except Exception as ex:
            logger.warning("Failed to probe backend '%s': %s", backend.value, ex)
            return False


def resolve_backend(settings: PrimeCacheSettings) -> BackendSelection:
    """Resolve the effective backend for the given settings with the real connectivity probes."""
    return BackendResolver(default_probes(settings)).resolve(settings.backend)
