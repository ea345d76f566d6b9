from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from primes_api.config import SQL_ECHO, PrimeCacheSettings

# Base class for ORM models
Base = declarative_base()

# creating the SQLAlchemy engine for the relational cache backend
def create_cache_engine(settings: PrimeCacheSettings, connect_timeout: float | None = None) -> Engine:
    connect_args = {}
    if connect_timeout is not None:
        # libpq expects whole seconds
        connect_args["connect_timeout"] = max(1, int(connect_timeout))
    return create_engine(
        settings.postgres_url,
        echo=SQL_ECHO,
        future=True,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
