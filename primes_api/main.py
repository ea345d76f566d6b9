# primes_api/main.py

from contextlib import asynccontextmanager
from dataclasses import replace
import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CollectorRegistry
from primes_api.config import LOG_LEVEL, PrimeCacheSettings
from primes_api.exceptions import CacheStoreError, InvalidPositionError
from primes_api.routers import observability, primes
from primes_api.schemas.primes import ApiErrorResponse
from primes_api.services.cache import PrimeCache
from primes_api.services.cache_backends import InMemoryPrimeCache
from primes_api.services.cache_factory import create_cache
from primes_api.services.cache_selection import Backend, BackendResolver, FallbackReason, resolve_backend
from primes_api.services.metrics import CacheMetrics, ServiceMetrics
from primes_api.services.primes_service import PrimesService

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

INVALID_PRIME_POSITION_CODE = "INVALID_PRIME_POSITION"


def create_app(
    settings: Optional[PrimeCacheSettings] = None,
    resolver: Optional[BackendResolver] = None,
    cache: Optional[PrimeCache] = None,
) -> FastAPI:
    """
    Build the application. Startup resolves the cache backend exactly once and wires
    the resulting selection, cache and metrics into the primes service.

    `resolver` and `cache` replace the real probes/backends (used by tests).
    """
    settings = settings or PrimeCacheSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: resolve backend before serving any request
        if resolver is not None:
            selection = resolver.resolve(settings.backend)
        else:
            selection = resolve_backend(settings)

        owns_cache = cache is None
        if owns_cache:
            try:
                prime_cache = create_cache(selection, settings)
            except CacheStoreError as ex:
                # Reachable but unusable (e.g. no CREATE privilege): serve from memory
                logger.warning(
                    "Cache backend '%s' could not be initialized, falling back to MEMORY: %s",
                    selection.effective_backend.value,
                    ex,
                )
                selection = replace(
                    selection,
                    effective_backend=Backend.MEMORY,
                    fallback_reason=FallbackReason.CONNECTIVITY_FAILED,
                )
                prime_cache = InMemoryPrimeCache()
        else:
            prime_cache = cache

        registry = CollectorRegistry()
        app.state.cache_selection = selection
        app.state.metrics_registry = registry
        app.state.primes_service = PrimesService(
            prime_cache,
            CacheMetrics(registry, selection),
            ServiceMetrics(registry),
        )
        logger.info(
            "Primes service ready (configured=%s, effective=%s, fallback=%s)",
            selection.as_details()["configuredBackend"],
            selection.effective_backend.value,
            selection.fallback_reason.value if selection.is_fallback else None,
        )
        try:
            yield
        finally:
            # Shutdown: release the backend connections this app opened
            if owns_cache:
                prime_cache.close()
                logger.info("Cache backend '%s' closed.", selection.effective_backend.value)

    app = FastAPI(lifespan=lifespan)
    app.include_router(primes.router)
    app.include_router(observability.router)

    @app.exception_handler(InvalidPositionError)
    async def invalid_position_handler(request: Request, exc: InvalidPositionError):
        error = ApiErrorResponse(
            code=INVALID_PRIME_POSITION_CODE,
            message=str(exc),
            path=request.url.path,
        )
        return JSONResponse(status_code=400, content=error.model_dump(mode="json"))

    return app


app = create_app()
