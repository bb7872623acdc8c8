"""Reaction loop: turns change events into gated, filtered action triggers. Primary embed point."""

import asyncio
import logging
import threading
import time
from collections.abc import Callable

from fwatcher_core.actions import ActionHandle
from fwatcher_core.file_watcher import WatchdogSource
from fwatcher_core.gate import IntervalGate
from fwatcher_core.models import TRIGGER_KINDS, ChangeEvent, LoopState, SessionStats, WatchConfig
from fwatcher_core.notifier import NoOpNotifier, Notifier
from fwatcher_core.patterns import compile_patterns, qualifies
from fwatcher_core.supervisor import ActionSupervisor
from fwatcher_core.watchers import WatchSource, WatchSourceError

logger = logging.getLogger(__name__)

# Seconds without events after which the watch source is checked for liveness
HEALTH_CHECK_INTERVAL = 1.0

_STOP = object()


class Fwatcher:
    """Watch roots, and (re)start an action whenever a matching file changes.

    Events are processed strictly one at a time on the event loop running
    ``serve()``. The interval gate and the supervisor's handle are only touched
    from there and neither is locked; parallelizing event intake would
    require synchronizing both.
    """

    def __init__(
        self,
        config: WatchConfig,
        notifier: Notifier | None = None,
        source: WatchSource | None = None,
        clock: Callable[[], float] = time.monotonic,
        terminate_on_exit: bool = False,
    ):
        """Initialize the reaction loop.

        Args:
            config: Watch session configuration
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            source: Event producer; defaults to a watchdog source over ``config`` roots
            clock: Monotonic time source for the interval gate
            terminate_on_exit: Kill the running action when ``serve()`` returns

        Raises:
            PatternError: If an include or exclude pattern is malformed
        """
        self.config = config
        self.notifier = notifier or NoOpNotifier()
        self.terminate_on_exit = terminate_on_exit

        # Fail fast on bad globs, before anything is watched
        self.include = compile_patterns(config.include_patterns)
        self.exclude = compile_patterns(config.exclude_patterns)

        self.gate = IntervalGate(config.interval, clock=clock)
        self.supervisor = ActionSupervisor(config.action, config.restart_on_change, self.notifier)
        self.source = source if source is not None else WatchdogSource(config.resolved_roots(), config.delay)

        self.state = LoopState.INITIALIZING
        self.stats = SessionStats()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue | None = None
        self._stop_requested = threading.Event()

    @property
    def handle(self) -> ActionHandle | None:
        """Handle of the most recently triggered action."""
        return self.supervisor.handle

    def run(self) -> None:
        """Blocking entry point. Returns only after ``stop()`` or a fatal error."""
        asyncio.run(self.serve())

    async def serve(self) -> None:
        """Register the watch source, trigger once, then react to events.

        Raises:
            WatchSourceError: If the source cannot be set up or dies while running
        """
        self._queue = asyncio.Queue()
        self._loop = asyncio.get_running_loop()

        try:
            self.source.start(self._enqueue)
        except WatchSourceError as e:
            logger.error(f"Failed to start watching: {e}")
            self.notifier.error(str(e))
            self.state = LoopState.STOPPED
            self._loop = None
            raise

        try:
            # Startup trigger, independent of any filesystem activity
            self._trigger(None)
            self.state = LoopState.RUNNING
            logger.info("Reaction loop running")

            while not self._stop_requested.is_set():
                item = await self._next()
                if item is _STOP:
                    break
                self.process_event(item)
        except WatchSourceError as e:
            logger.error(f"Watch source failed: {e}")
            self.notifier.error(str(e))
            raise
        finally:
            self.source.stop()
            if self.terminate_on_exit:
                self.supervisor.terminate()
            self.state = LoopState.STOPPED
            self._loop = None
            logger.info("Reaction loop stopped")

    def stop(self) -> None:
        """Request shutdown of ``serve()``. Safe to call from any thread."""
        self._stop_requested.set()
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._queue.put_nowait, _STOP)

    def process_event(self, event: ChangeEvent, now: float | None = None) -> bool:
        """Run one event through gate, filter and supervisor.

        A triggering event is announced to the notifier as ``"<Kind>: <path>"``
        with the event's own kind (``Created``, ``Modified``, ``Removed`` or
        ``Renamed``) rather than always ``Modified``.

        Args:
            event: Event delivered by the watch source
            now: Current monotonic time (defaults to the gate's clock)

        Returns:
            True if the event triggered the action
        """
        self.stats.events_received += 1
        if now is None:
            now = self.gate.clock()

        # Throttle, not a queue: events inside the cooling window are dropped
        if not self.gate.allow(now):
            self.stats.events_throttled += 1
            return False

        if event.kind not in TRIGGER_KINDS:
            return False

        if not qualifies(event.relative_subject(), self.include, self.exclude):
            logger.debug(f"Ignored {event.kind.label}: {event.subject}")
            return False

        self.gate.mark_triggered(now)
        self._trigger(event)
        self.notifier.info(f"{event.kind.label}: {event.subject}")
        return True

    def _trigger(self, event: ChangeEvent | None) -> None:
        handle = self.supervisor.trigger(event)
        self.stats.triggers += 1
        if handle is None:
            self.stats.failures += 1

    def _enqueue(self, event: ChangeEvent) -> None:
        """Event sink handed to the watch source; called from watcher threads."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug(f"Dropped {event.kind.label} event for {event.path}: loop not running")
            return
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            logger.debug(f"Dropped {event.kind.label} event for {event.path}: loop closed")

    async def _next(self):
        """Wait for the next queued item, checking source liveness while idle."""
        while True:
            try:
                return await asyncio.wait_for(self._queue.get(), timeout=HEALTH_CHECK_INTERVAL)
            except asyncio.TimeoutError:
                if not self.source.is_alive():
                    raise WatchSourceError("File watcher stopped delivering events") from None
