# primes_api/routers/observability.py

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from primes_api.dependencies import get_cache_selection, get_metrics_registry
from primes_api.schemas.primes import HealthResponse, InfoResponse
from primes_api.services.cache_selection import BackendSelection

router = APIRouter(tags=["observability"])


@router.get("/health", response_model=HealthResponse)
def health_check(selection: BackendSelection = Depends(get_cache_selection)):
    """
    Reports DEGRADED (still HTTP 200) when the cache fell back to memory.
    Correctness is unaffected by a fallback, so the service is never reported down for it.
    """
    status = "DEGRADED" if selection.is_fallback else "UP"
    return {"status": status, "details": selection.as_details()}


@router.get("/info", response_model=InfoResponse)
def info(selection: BackendSelection = Depends(get_cache_selection)):
    return {"primeCache": selection.as_details()}


@router.get("/metrics")
def metrics(registry: CollectorRegistry = Depends(get_metrics_registry)):
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
