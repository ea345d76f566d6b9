# primes_api/dependencies.py

from fastapi import Request
from prometheus_client import CollectorRegistry

from primes_api.services.cache_selection import BackendSelection
from primes_api.services.primes_service import PrimesService

# The objects below are built once in the app lifespan and stored on app.state.

def get_primes_service(request: Request) -> PrimesService:
    return request.app.state.primes_service


def get_cache_selection(request: Request) -> BackendSelection:
    return request.app.state.cache_selection


def get_metrics_registry(request: Request) -> CollectorRegistry:
    return request.app.state.metrics_registry
