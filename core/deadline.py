"""
Deadline — A single time bound shared by the API call and the CSV export.

The orchestrator creates one Deadline per run, dated from started_at (the
moment run.py was entered) when the entry point supplies it. The client
uses remaining() as its requests timeout; the exporter polls expired()
between rows. Nothing is interrupted preemptively.
"""

import time
from typing import Callable, Optional


class Deadline:
    """Absolute deadline measured on a monotonic clock.

    Attributes:
        timeout: The configured duration in seconds.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic,
                 started_at: Optional[float] = None):
        self.timeout = seconds
        self._clock = clock
        if started_at is None:
            started_at = clock()
        self._expires_at = started_at + seconds

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self._expires_at
