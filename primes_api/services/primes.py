import math

from primes_api.exceptions import InvalidPositionError


def is_prime(candidate: int) -> bool:
    if candidate < 1:
        raise InvalidPositionError(candidate)
    if candidate < 2:
        return False
    if candidate < 4:
        return True
    if candidate % 2 == 0:
        return False
    for divisor in range(3, math.isqrt(candidate) + 1, 2):
        if candidate % divisor == 0:
            return False
    return True


def calculate_nth_prime(position: int) -> int:
    """Return the prime at the given 1-based position (1 -> 2, 5 -> 11)."""
    if position < 1:
        raise InvalidPositionError(position)
    if position == 1:
        return 2

    primes_found = 1
    candidate = 1
    while primes_found < position:
        candidate += 2
        if is_prime(candidate):
            primes_found += 1
    return candidate
