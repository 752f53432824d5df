import random
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Backoff:
    """Capped exponential backoff with proportional jitter.

    ``delay(attempt)`` gives the wait before the next try after ``attempt``
    consecutive failures (1-based): ``min(base * 2**(attempt-1), max_delay)``
    plus up to ``jitter`` of that value.
    """

    base_delay: float = 0.5
    max_delay: float = 10.0
    jitter: float = 0.1
    rand: Callable[[float, float], float] = random.uniform

    def delay(self, attempt: int) -> float:
        if attempt < 1:
            return 0.0
        capped = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return capped + self.rand(0, capped * self.jitter)
