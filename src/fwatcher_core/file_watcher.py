"""Watch source implementation using watchdog."""

import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from threading import Timer

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from fwatcher_core.models import ChangeEvent, ChangeKind
from fwatcher_core.watchers import EventSink, WatchSourceError

logger = logging.getLogger(__name__)

_KINDS = {
    EVENT_TYPE_CREATED: ChangeKind.CREATED,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFIED,
    EVENT_TYPE_DELETED: ChangeKind.REMOVED,
    EVENT_TYPE_MOVED: ChangeKind.RENAMED,
}


def to_change_event(event: FileSystemEvent, root: Path | None = None) -> ChangeEvent:
    """Normalize a watchdog event into a ChangeEvent."""
    kind = _KINDS.get(event.event_type, ChangeKind.OTHER)
    dest = getattr(event, "dest_path", "") if kind is ChangeKind.RENAMED else ""
    return ChangeEvent(
        kind=kind,
        path=Path(os.fsdecode(event.src_path)),
        dest_path=Path(os.fsdecode(dest)) if dest else None,
        root=root,
    )


class _Coalescer:
    """Collects events for a fixed window, then delivers them in first-seen order.

    Duplicate events (same kind and paths) inside one window are delivered once.
    The window opens with the first pending event, so a steady stream of changes
    cannot postpone delivery forever.
    """

    def __init__(self, sink: EventSink, delay: float):
        self.sink = sink
        self.delay = delay
        self._pending: dict[tuple, ChangeEvent] = {}
        self._timer: Timer | None = None
        self._lock = threading.Lock()

    def push(self, event: ChangeEvent) -> None:
        if self.delay <= 0:
            self.sink(event)
            return

        with self._lock:
            self._pending.setdefault((event.kind, event.path, event.dest_path), event)
            if self._timer is None:
                self._timer = Timer(self.delay, self.flush)
                self._timer.daemon = True
                self._timer.start()

    def flush(self) -> None:
        """Deliver everything collected so far."""
        with self._lock:
            events = list(self._pending.values())
            self._pending.clear()
            self._timer = None
        for event in events:
            try:
                self.sink(event)
            except Exception as e:
                logger.error(f"Failed to deliver {event.kind.label} event for {event.path}: {e}")

    def cancel(self) -> None:
        with self._lock:
            if self._timer:
                self._timer.cancel()
            self._timer = None
            self._pending.clear()


class _ForwardingHandler(FileSystemEventHandler):
    """Forward file events observed under one root to the coalescer."""

    def __init__(self, root: Path, coalescer: _Coalescer):
        """Initialize handler.

        Args:
            root: Watch root this handler is scheduled on
            coalescer: Shared coalescer of the owning source
        """
        super().__init__()
        self.root = root
        self.coalescer = coalescer

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Handle every filesystem event."""
        if event.is_directory:
            return

        change = to_change_event(event, self.root)
        logger.debug(f"File event: {change.kind.label} {change.path}")
        self.coalescer.push(change)


class WatchdogSource:
    """Recursive watch source over one or more roots, backed by a watchdog Observer."""

    def __init__(self, roots: Iterable[str | Path], delay: float = 2.0):
        """Initialize source.

        Args:
            roots: Directories to watch recursively
            delay: Coalescing window in seconds (0 delivers immediately)
        """
        self.roots = [Path(root).resolve() for root in roots]
        self.delay = delay
        self.observer = Observer()
        self.handlers: list[_ForwardingHandler] = []
        self._coalescer: _Coalescer | None = None
        self._started = False

    def start(self, sink: EventSink) -> None:
        """Register every root and start the observer thread."""
        if self._started:
            raise WatchSourceError("Watch source already started")

        self._coalescer = _Coalescer(sink, self.delay)
        for root in self.roots:
            if not root.is_dir():
                raise WatchSourceError(f"Cannot watch {root}: not an existing directory")
            handler = _ForwardingHandler(root, self._coalescer)
            try:
                self.observer.schedule(handler, str(root), recursive=True)
            except OSError as e:
                raise WatchSourceError(f"Cannot watch {root}: {e}") from e
            self.handlers.append(handler)
            logger.info(f"Watching {root} (delay: {self.delay}s)")

        try:
            self.observer.start()
        except OSError as e:
            raise WatchSourceError(f"Failed to start file watcher: {e}") from e
        self._started = True
        logger.info(f"Started file watcher on {len(self.roots)} root(s)")

    def stop(self) -> None:
        """Stop the observer and drop pending events."""
        if self._coalescer:
            self._coalescer.cancel()
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=2.0)
            logger.info("Stopped file watcher")
        self._started = False

    def is_alive(self) -> bool:
        """Whether the observer and all of its emitters are still running."""
        if not self._started or not self.observer.is_alive():
            return False
        return all(emitter.is_alive() for emitter in self.observer.emitters)
