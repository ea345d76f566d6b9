class InvalidPositionError(ValueError):
    """Raised when a prime position is missing or smaller than one."""

    def __init__(self, position):
        self.position = position
        super().__init__(f"Prime position must be greater than zero. Received: {position}")


class CacheStoreError(Exception):
    """A cache backend failed to read or write; distinct from a cache miss."""
