"""Triggerable actions: external processes and in-process callbacks.

Every action exposes a single ``invoke(event)`` capability returning an
ActionHandle. Handles are fire-and-forget: ``terminate()`` only requests
termination, and ``wait()`` is the explicit opt-in for callers that need to
know when an action finished.
"""

import asyncio
import inspect
import logging
import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Protocol

from fwatcher_core.models import ChangeEvent

logger = logging.getLogger(__name__)


class ActionHandle(Protocol):
    """Handle to one running (or finished) action instance."""

    def is_running(self) -> bool:
        """Whether the action is still live."""
        ...

    def terminate(self) -> None:
        """Request termination. Does not wait for the action to exit."""
        ...

    def wait(self, timeout: float | None = None) -> Any:
        """Block until the action finishes and return its outcome."""
        ...


class Action(Protocol):
    """Something the supervisor can start on a qualifying change."""

    def invoke(self, event: ChangeEvent | None) -> ActionHandle:
        """Start a new instance. *event* is None for the startup trigger."""
        ...


class ProcessHandle:
    """Handle to a spawned subprocess."""

    def __init__(self, process: subprocess.Popen):
        self.process = process

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_running(self) -> bool:
        return self.process.poll() is None

    def terminate(self) -> None:
        """Kill the process if it is still running."""
        if not self.is_running():
            return
        try:
            self.process.kill()
            logger.debug(f"Killed process {self.pid}")
        except ProcessLookupError:
            logger.debug(f"Process {self.pid} already gone")

    def wait(self, timeout: float | None = None) -> int:
        """Wait for exit and return the exit code."""
        return self.process.wait(timeout=timeout)

    def __repr__(self) -> str:
        return f"ProcessHandle(pid={self.pid}, returncode={self.process.returncode})"


class ProcessAction:
    """Spawn an external command from its argument vector."""

    def __init__(
        self,
        argv: Sequence[str],
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ):
        """Initialize action.

        Args:
            argv: Program and arguments, no shell interpretation
            cwd: Working directory for the process (default: inherit)
            env: Extra environment variables merged over os.environ
        """
        self.argv = [str(arg) for arg in argv]
        if not self.argv:
            raise ValueError("Command must not be empty")
        self.cwd = cwd
        self.env = dict(env) if env else None

    def invoke(self, event: ChangeEvent | None) -> ProcessHandle:
        env = {**os.environ, **self.env} if self.env else None
        process = subprocess.Popen(self.argv, cwd=self.cwd, env=env)
        logger.debug(f"Spawned {self.argv} as pid {process.pid}")
        return ProcessHandle(process)

    def __repr__(self) -> str:
        return f"ProcessAction({self.argv!r})"


class CallbackHandle:
    """Handle to a callback running on a worker thread or an event loop."""

    def __init__(self, future: Future):
        self.future = future

    def is_running(self) -> bool:
        return not self.future.done()

    def terminate(self) -> None:
        """Cancel the callback.

        Pending work and coroutines are cancelled; a plain function already
        executing on a worker thread runs to completion.
        """
        if self.future.cancel():
            logger.debug("Cancelled callback")

    def wait(self, timeout: float | None = None) -> Any:
        """Return the callback's result, or None if it was cancelled.

        Must not be called from the event loop thread for coroutine callbacks.
        """
        try:
            return self.future.result(timeout=timeout)
        except CancelledError:
            return None
        except FutureTimeoutError:
            raise TimeoutError(f"Callback still running after {timeout}s") from None


class CallbackAction:
    """Invoke an in-process callback with the triggering event.

    Plain callables run on a worker thread so the watch loop never blocks.
    Coroutine functions are scheduled on the running event loop, or run on a
    worker thread with their own loop when there is none.
    """

    def __init__(self, callback: Callable[[ChangeEvent | None], Any], max_workers: int | None = None):
        self.callback = callback
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fwatcher-action")

    def invoke(self, event: ChangeEvent | None) -> CallbackHandle:
        if inspect.iscoroutinefunction(self.callback):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                future = self._executor.submit(asyncio.run, self.callback(event))
            else:
                future = asyncio.run_coroutine_threadsafe(self.callback(event), loop)
        else:
            future = self._executor.submit(self.callback, event)
        future.add_done_callback(self._log_failure)
        return CallbackHandle(future)

    def close(self) -> None:
        """Release the worker threads without waiting for running callbacks."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"Callback raised {type(error).__name__}: {error}")

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"CallbackAction({name})"
