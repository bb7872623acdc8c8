"""Abstract watch source protocol for file watching implementations."""

from collections.abc import Callable
from typing import Protocol

from fwatcher_core.models import ChangeEvent

EventSink = Callable[[ChangeEvent], None]
"""Receives events; may be called from a watcher thread."""


class WatchSourceError(RuntimeError):
    """The watch source could not be set up or stopped delivering events."""


class WatchSource(Protocol):
    """Protocol for producers of change events."""

    def start(self, sink: EventSink) -> None:
        """Register all roots and start delivering events to *sink*.

        Raises:
            WatchSourceError: If a root cannot be watched
        """
        ...

    def stop(self) -> None:
        """Stop watching. Pending coalesced events are dropped."""
        ...

    def is_alive(self) -> bool:
        """Whether the source is still able to deliver events."""
        ...
