from collections import deque
from typing import Iterable, Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Anything that can hand out uniformly distributed bytes."""

    def next_byte(self) -> int: ...


class NumpyRandom:
    """Default source, backed by ``numpy.random.Generator``. Seedable for reproducible runs."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next_byte(self) -> int:
        return int(self._rng.integers(0, 256))


class FixedSequence:
    """Replays the given bytes in order, cycling when exhausted."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values = deque(v & 0xFF for v in values)
        if not self._values:
            raise ValueError("FixedSequence needs at least one value")

    def next_byte(self) -> int:
        value = self._values[0]
        self._values.rotate(-1)
        return value
