"""fwatcher: Run a command whenever matching files change."""

__version__ = "0.1.0"

# Public API
from fwatcher.controller import Fwatcher
from fwatcher_core import CallbackAction, ProcessAction, WatchConfig

__all__ = [
    "__version__",
    # Primary components
    "Fwatcher",
    "WatchConfig",
    "ProcessAction",
    "CallbackAction",
]
