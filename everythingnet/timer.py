"""A monotonic timer used to pace the main loop."""

from __future__ import annotations

import time
from typing import Callable, Optional

__all__ = ["LoopTimer"]


class LoopTimer:
    """Measures how long one loop iteration took, in microseconds."""

    def __init__(
        self,
        clock: Callable[[], int] = time.monotonic_ns,
        sleeper: Callable[[float], object] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleeper = sleeper
        self._start: Optional[int] = None

    def start(self) -> None:
        """Record the start time."""
        self._start = self._clock()

    def elapsed_usec(self) -> int:
        """Microseconds since :meth:`start`."""
        if self._start is None:
            raise RuntimeError("timer was not started")
        return (self._clock() - self._start) // 1000

    def sleep_usec(self, usec: int) -> None:
        """Sleep for ``usec`` microseconds."""
        if usec < 0:
            raise ValueError(f"cannot sleep a negative time: {usec}")
        self._sleeper(usec / 1_000_000)