"""fwatcher-core: Change-reaction engine pieces shared by fwatcher frontends."""

__version__ = "0.1.0"

# Models
from fwatcher_core.models import ChangeEvent, ChangeKind, LoopState, SessionStats, WatchConfig

# Actions
from fwatcher_core.actions import CallbackAction, ProcessAction
from fwatcher_core.supervisor import ActionSupervisor

# Filtering and throttling
from fwatcher_core.gate import IntervalGate
from fwatcher_core.patterns import PatternError, PatternSet, compile_patterns, qualifies

# Watching
from fwatcher_core.watchers import WatchSource, WatchSourceError

# Config
from fwatcher_core.config import ConfigError, build_watch_config, load_watch_config

__all__ = [
    "__version__",
    # Models
    "ChangeEvent",
    "ChangeKind",
    "LoopState",
    "SessionStats",
    "WatchConfig",
    # Actions
    "ActionSupervisor",
    "CallbackAction",
    "ProcessAction",
    # Filtering and throttling
    "IntervalGate",
    "PatternError",
    "PatternSet",
    "compile_patterns",
    "qualifies",
    # Watching
    "WatchSource",
    "WatchSourceError",
    # Config
    "ConfigError",
    "build_watch_config",
    "load_watch_config",
]
