import logging

import redis

from primes_api.config import PrimeCacheSettings
from primes_api.database import create_cache_engine
from primes_api.exceptions import CacheStoreError
from .cache import PrimeCache
from .cache_backends import InMemoryPrimeCache, PostgresPrimeCache, RedisPrimeCache
from .cache_selection import Backend, BackendSelection

logger = logging.getLogger(__name__)


def create_cache(selection: BackendSelection, settings: PrimeCacheSettings) -> PrimeCache:
    """
    Builds the cache for the effective backend of a resolved selection:
      - MEMORY   -> in-process dict
      - REDIS    -> shared Redis client (decimal text values)
      - POSTGRES -> SQLAlchemy engine, prime_cache table

    The returned instance is shared by every request for the process lifetime.
    """
    effective = selection.effective_backend
    logger.info("Creating PrimeCache with effective backend: %s", effective.value)

    if effective is Backend.REDIS:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, decode_responses=True)
        return RedisPrimeCache(client)
    if effective is Backend.POSTGRES:
        engine = create_cache_engine(settings)
        try:
            return PostgresPrimeCache(engine)
        except CacheStoreError:
            engine.dispose()
            raise
    return InMemoryPrimeCache()
