# primes_api/routers/primes.py

from fastapi import APIRouter, Depends, Query

from primes_api.dependencies import get_primes_service
from primes_api.services.primes_service import PrimesService

router = APIRouter(prefix="/api/primes", tags=["primes"])


@router.get("/getPrime", response_model=int)
def get_prime(position: int = Query(...), service: PrimesService = Depends(get_primes_service)):
    """
    GET /api/primes/getPrime?position=N
    Returns the N-th prime (1-based).

    Status codes:
      - 200: the prime, as a bare JSON integer
      - 400: position < 1 (ApiErrorResponse body)
      - 422: position missing or not an integer (handled by FastAPI)

    Runs in the threadpool: the computation is CPU-bound and the cache clients are blocking.
    """
    return service.get_prime(position)
