"""Action supervisor - lifecycle of the triggered process or callback."""

import logging

from fwatcher_core.actions import Action, ActionHandle
from fwatcher_core.models import ChangeEvent
from fwatcher_core.notifier import NoOpNotifier, Notifier

logger = logging.getLogger(__name__)


def trigger(
    action: Action,
    restart_on_change: bool,
    current_handle: ActionHandle | None,
    event: ChangeEvent | None = None,
    notifier: Notifier | None = None,
) -> ActionHandle | None:
    """Start a new instance of *action*, optionally killing the current one first.

    Args:
        action: Action to invoke
        restart_on_change: Terminate a still-running *current_handle* first
        current_handle: Handle of the previous instance, if any
        event: Triggering event (None for the startup trigger)
        notifier: Receives a warning when the action fails to start

    Returns:
        Handle of the new instance, or None if it could not be started
    """
    if restart_on_change and current_handle is not None and current_handle.is_running():
        logger.debug(f"Terminating previous action {current_handle!r}")
        current_handle.terminate()

    try:
        return action.invoke(event)
    except Exception as e:
        logger.warning(f"Failed to start {action!r}: {e}")
        (notifier or NoOpNotifier()).warning(f"Failed to start {action!r}: {e}")
        return None


class ActionSupervisor:
    """Owns the single tracked handle of a watch session.

    Not thread-safe: only the reaction loop calls into it, one event at a time.
    """

    def __init__(self, action: Action, restart_on_change: bool = False, notifier: Notifier | None = None):
        """Initialize supervisor.

        Args:
            action: Action started on every trigger
            restart_on_change: Kill the running instance before starting a new one
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
        """
        self.action = action
        self.restart_on_change = restart_on_change
        self.notifier = notifier or NoOpNotifier()
        self.handle: ActionHandle | None = None

    def trigger(self, event: ChangeEvent | None = None) -> ActionHandle | None:
        """Start the action and track the new handle (None on failure)."""
        self.handle = trigger(self.action, self.restart_on_change, self.handle, event, self.notifier)
        return self.handle

    def is_running(self) -> bool:
        return self.handle is not None and self.handle.is_running()

    def terminate(self) -> None:
        """Request termination of the tracked action, if still running."""
        if self.is_running():
            self.handle.terminate()
