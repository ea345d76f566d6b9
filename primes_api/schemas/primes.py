# primes_api/schemas/primes.py

from datetime import datetime, timezone
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, field_serializer


class ApiErrorResponse(BaseModel):
    """Uniform error body returned for client-input errors."""

    code: str = Field(..., description="Stable machine-readable error code.")
    message: str = Field(..., description="Human-readable description of the error.")
    path: str = Field(..., description="Request path that produced the error.")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("timestamp")
    def _ser_timestamp(self, v: datetime) -> str:
        # Ensure UTC and 'Z' suffix
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        v = v.astimezone(timezone.utc)
        return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HealthResponse(BaseModel):
    status: Literal["UP", "DEGRADED"]
    details: Dict[str, Any]


class InfoResponse(BaseModel):
    primeCache: Dict[str, Any]
