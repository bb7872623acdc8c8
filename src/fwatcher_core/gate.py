"""Interval gate: a time-based throttle between triggered actions."""

import time
from collections.abc import Callable


class IntervalGate:
    """Decide whether enough time has passed since the last trigger.

    Two states: idle (never triggered) and cooling (triggered at
    ``last_triggered_at``). ``allow()`` only reads state; ``mark_triggered()``
    is the only transition. Not thread-safe: owned by the reaction loop.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic):
        """Initialize gate.

        Args:
            min_interval: Minimum spacing in seconds between two triggers
            clock: Monotonic time source, replaceable in tests
        """
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self.clock = clock
        self.last_triggered_at: float | None = None

    def allow(self, now: float | None = None) -> bool:
        """Return True if a trigger is allowed at *now*."""
        if self.last_triggered_at is None:
            return True
        if now is None:
            now = self.clock()
        return now - self.last_triggered_at >= self.min_interval

    def mark_triggered(self, now: float | None = None) -> None:
        """Record a trigger at *now*, starting or restarting the cooling window."""
        self.last_triggered_at = self.clock() if now is None else now

    def is_cooling(self, now: float | None = None) -> bool:
        return not self.allow(now)

    def reset(self) -> None:
        """Return to the idle state."""
        self.last_triggered_at = None
