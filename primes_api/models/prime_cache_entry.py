# models/prime_cache_entry.py

from sqlalchemy import BigInteger, Column, DateTime, Integer, func
from primes_api.database import Base


class PrimeCacheEntry(Base):
    __tablename__ = "prime_cache"

    # Position of the prime (1-based); at most one row per position
    position = Column(Integer, primary_key=True, autoincrement=False)

    # The computed prime stored for that position
    prime_value = Column(BigInteger, nullable=False)

    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
