"""Pluggable notification protocol for fwatcher_core.

Decouples the reaction loop from how user-visible notices are shown.
Can be replaced with custom handlers for testing, embedding, or UI integration.
"""

import logging
import sys
from typing import Protocol


class Notifier(Protocol):
    """Protocol for notifications - host can provide custom implementation."""

    def info(self, message: str) -> None:
        """Informational message (e.g. a changed path)."""
        ...

    def warning(self, message: str) -> None:
        """Warning message (non-fatal failure)."""
        ...

    def error(self, message: str) -> None:
        """Error message (fatal failure)."""
        ...


class NoOpNotifier:
    """Silent no-op notifier - default for embedded mode."""

    def info(self, msg: str) -> None:
        """Do nothing."""
        pass

    def warning(self, msg: str) -> None:
        """Do nothing."""
        pass

    def error(self, msg: str) -> None:
        """Do nothing."""
        pass


class LoggingNotifier:
    """Implementation using stdlib logging - for debugging/development."""

    def info(self, msg: str) -> None:
        logging.info(msg)

    def warning(self, msg: str) -> None:
        logging.warning(msg)

    def error(self, msg: str) -> None:
        logging.error(msg)


class ConsoleNotifier:
    """Line-oriented console output: notices on stdout, diagnostics on stderr."""

    def __init__(self, out=None, err=None):
        self._out = out
        self._err = err

    def info(self, msg: str) -> None:
        print(msg, file=self._out or sys.stdout, flush=True)

    def warning(self, msg: str) -> None:
        print(f"warning: {msg}", file=self._err or sys.stderr, flush=True)

    def error(self, msg: str) -> None:
        print(f"error: {msg}", file=self._err or sys.stderr, flush=True)
