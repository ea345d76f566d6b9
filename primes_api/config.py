# primes_api/config.py
import os
from dataclasses import dataclass
from typing import Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Cache configuration:
#   PRIME_CACHE_BACKEND: "memory" | "redis" | "postgres"
#   Left unset, the service runs on the memory backend and reports NOT_CONFIGURED.
# Read once at process start; change via environment variables.
PRIME_CACHE_BACKEND = os.getenv("PRIME_CACHE_BACKEND")
PRIME_CACHE_PROBE_TIMEOUT_SECONDS = float(os.getenv("PRIME_CACHE_PROBE_TIMEOUT_SECONDS", "5"))

REDIS_HOST = os.getenv("PRIME_CACHE_REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("PRIME_CACHE_REDIS_PORT", "6379"))

POSTGRES_HOST = os.getenv("PRIME_CACHE_POSTGRES_HOST", "localhost")
POSTGRES_PORT = int(os.getenv("PRIME_CACHE_POSTGRES_PORT", "5432"))
POSTGRES_USERNAME = os.getenv("PRIME_CACHE_POSTGRES_USERNAME", "postgres")
POSTGRES_PASSWORD = os.getenv("PRIME_CACHE_POSTGRES_PASSWORD", "postgres")
POSTGRES_DATABASE = os.getenv("PRIME_CACHE_POSTGRES_DATABASE", "postgres")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


@dataclass(frozen=True)
class PrimeCacheSettings:
    """Connection settings consumed by the backend resolver and the cache factory."""

    backend: Optional[str] = PRIME_CACHE_BACKEND
    probe_timeout_seconds: float = PRIME_CACHE_PROBE_TIMEOUT_SECONDS
    redis_host: str = REDIS_HOST
    redis_port: int = REDIS_PORT
    postgres_host: str = POSTGRES_HOST
    postgres_port: int = POSTGRES_PORT
    postgres_username: str = POSTGRES_USERNAME
    postgres_password: str = POSTGRES_PASSWORD
    postgres_database: str = POSTGRES_DATABASE

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+psycopg://{self.postgres_username}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"
        )
