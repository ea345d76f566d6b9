# primes_api/services/primes_service.py

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from primes_api.exceptions import InvalidPositionError
from .cache import CacheKey, PrimeCache
from .metrics import CacheMetrics, ServiceMetrics
from .primes import calculate_nth_prime

logger = logging.getLogger(__name__)

GET_PRIME_ENDPOINT = "/api/primes/getPrime"
INVALID_INPUT_ERROR_TYPE = "invalid_input"


class CacheOutcome(str, Enum):
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class CacheRead:
    outcome: CacheOutcome
    value: Optional[int] = None


class PrimesService:
    """
    Serves the N-th prime with a read-through / write-back cache.

    Cache health never changes the answer: a read failure is handled like a
    miss, a write failure is logged and counted, and the computed value is
    returned either way. Only an invalid position fails the call.
    """

    def __init__(self, cache: PrimeCache, cache_metrics: CacheMetrics, service_metrics: ServiceMetrics):
        self._cache = cache
        self._cache_metrics = cache_metrics
        self._service_metrics = service_metrics

    def get_prime(self, position: int) -> int:
        try:
            key = CacheKey(position)
        except InvalidPositionError:
            self._service_metrics.record_error(GET_PRIME_ENDPOINT, INVALID_INPUT_ERROR_TYPE)
            logger.error("%s is an invalid index for a prime", position)
            raise

        self._service_metrics.record_request(GET_PRIME_ENDPOINT)
        started = time.perf_counter()
        try:
            read = self._read(key)
            self._cache_metrics.record("get", read.outcome.value)
            if read.outcome is CacheOutcome.HIT:
                return read.value

            value = calculate_nth_prime(key.position)
            write = self._write(key, value)
            self._cache_metrics.record("put", write.value)
            return value
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._service_metrics.record_response_time(GET_PRIME_ENDPOINT, elapsed_ms)

    def _read(self, key: CacheKey) -> CacheRead:
        try:
            value = self._cache.get(key)
        except Exception as ex:
            logger.warning("Failed to read prime at position %s from cache: %s", key.position, ex)
            return CacheRead(CacheOutcome.ERROR)
        if value is None:
            return CacheRead(CacheOutcome.MISS)
        return CacheRead(CacheOutcome.HIT, value)

    def _write(self, key: CacheKey, value: int) -> CacheOutcome:
        try:
            self._cache.put(key, value)
        except Exception as ex:
            logger.warning("Failed to write prime at position %s to cache: %s", key.position, ex)
            return CacheOutcome.ERROR
        return CacheOutcome.SUCCESS
