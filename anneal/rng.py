"""48-bit linear congruential generator (drand48 family)."""

MULTIPLIER = 0x5DEECE66D
INCREMENT = 0xB
MASK = (1 << 48) - 1


class Rand48:
    """
    Seeded pseudo-random sequence.

    The whole generator state lives on the instance, so two generators
    seeded alike produce identical sequences independently of each other.
    """

    def __init__(self, seed: int = 0):
        self.state = 0
        self.init(seed)

    def init(self, seed: int) -> None:
        """Reset the sequence for ``seed``."""
        self.state = (seed ^ MULTIPLIER) & MASK

    def next(self) -> int:
        """Advance the state and return the next 31-bit draw."""
        self.state = (self.state * MULTIPLIER + INCREMENT) & MASK
        return self.state >> 17

    def randint(self, n: int) -> int:
        """Return a draw in ``[0, n)``."""
        if n <= 0:
            raise ValueError("n must be positive")
        return self.next() % n

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()
