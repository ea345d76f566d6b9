import logging
from threading import RLock
from typing import Dict, Optional

import redis
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from primes_api.exceptions import CacheStoreError
from primes_api.models.prime_cache_entry import PrimeCacheEntry
from .cache import CacheKey, PrimeCache

logger = logging.getLogger(__name__)


class InMemoryPrimeCache(PrimeCache):
    """In-process cache backend. Thread-safe, no persistence, no eviction."""

    def __init__(self):
        self._data: Dict[int, int] = {}
        self._lock = RLock()

    def get(self, key: CacheKey) -> Optional[int]:
        with self._lock:
            return self._data.get(key.position)

    def put(self, key: CacheKey, value: int) -> None:
        with self._lock:
            self._data[key.position] = value


class RedisPrimeCache(PrimeCache):
    """Redis backend. Values are kept as decimal text under a fixed key prefix."""

    KEY_PREFIX = "prime:cache:"

    def __init__(self, client: redis.Redis):
        self._client = client

    def _key(self, key: CacheKey) -> str:
        return f"{self.KEY_PREFIX}{key.position}"

    def get(self, key: CacheKey) -> Optional[int]:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as ex:
            raise CacheStoreError(f"redis get failed for {self._key(key)}: {ex}") from ex
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            return int(raw)
        except (TypeError, ValueError) as ex:
            # A corrupt entry must not be reported as a miss
            raise CacheStoreError(f"malformed value stored at {self._key(key)}: {raw!r}") from ex

    def put(self, key: CacheKey, value: int) -> None:
        try:
            self._client.set(self._key(key), str(value))
        except redis.RedisError as ex:
            raise CacheStoreError(f"redis set failed for {self._key(key)}: {ex}") from ex

    def close(self) -> None:
        self._client.close()


class PostgresPrimeCache(PrimeCache):
    """
    Relational backend on a SQLAlchemy engine.

    The prime_cache table is created on construction if missing. Writes are
    upserts keyed by position, so each position has at most one row.
    PostgreSQL is the target; SQLite is accepted as the embedded development database.
    """

    _INSERT_BY_DIALECT = {
        "postgresql": postgresql.insert,
        "sqlite": sqlite.insert,
    }

    def __init__(self, engine: Engine):
        self._engine = engine
        insert = self._INSERT_BY_DIALECT.get(engine.dialect.name)
        if insert is None:
            raise CacheStoreError(f"unsupported dialect for prime cache: {engine.dialect.name}")
        self._insert = insert
        self._initialize_table()

    def _initialize_table(self) -> None:
        try:
            PrimeCacheEntry.__table__.create(self._engine, checkfirst=True)
        except SQLAlchemyError as ex:
            raise CacheStoreError(f"could not create table {PrimeCacheEntry.__tablename__}: {ex}") from ex
        logger.info("Prime cache table '%s' is ready", PrimeCacheEntry.__tablename__)

    def get(self, key: CacheKey) -> Optional[int]:
        stmt = select(PrimeCacheEntry.prime_value).where(PrimeCacheEntry.position == key.position)
        try:
            with self._engine.connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as ex:
            raise CacheStoreError(f"select failed for position {key.position}: {ex}") from ex
        return int(value) if value is not None else None

    def put(self, key: CacheKey, value: int) -> None:
        # Both timestamps come from the database clock
        stmt = self._insert(PrimeCacheEntry.__table__).values(
            position=key.position,
            prime_value=value,
            created_at=func.current_timestamp(),
            updated_at=func.current_timestamp(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["position"],
            set_={"prime_value": stmt.excluded.prime_value, "updated_at": func.current_timestamp()},
        )
        try:
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as ex:
            raise CacheStoreError(f"upsert failed for position {key.position}: {ex}") from ex

    def close(self) -> None:
        self._engine.dispose()
