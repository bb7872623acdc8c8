"""Shared data models for fwatcher_core."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fwatcher_core.actions import Action


class ChangeKind(Enum):
    """Kind of a normalized filesystem change."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    OTHER = "other"
    """Opened/closed/attribute notifications; never triggers an action."""

    @property
    def label(self) -> str:
        """Capitalized name used in user-facing notices."""
        return self.value.capitalize()


# Kinds the reaction loop reacts to
TRIGGER_KINDS = frozenset(
    {ChangeKind.CREATED, ChangeKind.MODIFIED, ChangeKind.REMOVED, ChangeKind.RENAMED}
)


@dataclass(frozen=True)
class ChangeEvent:
    """A normalized change notification, consumed once by the reaction loop."""

    kind: ChangeKind
    """What happened to the path."""

    path: Path
    """Affected path (for renames: the source path)."""

    dest_path: Path | None = None
    """Rename destination, informational only."""

    root: Path | None = None
    """Watch root the event was observed under, if known."""

    @property
    def subject(self) -> Path:
        """Path evaluated against the pattern filter.

        For renames this is the source path, never the destination.
        """
        return self.path

    def relative_subject(self) -> Path:
        """Return the subject relative to its watch root.

        Falls back to the subject itself when no root is known or the subject
        lies outside the root.
        """
        if self.root is None:
            return self.subject
        try:
            return self.subject.relative_to(self.root)
        except ValueError:
            return self.subject


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for one watch session. Immutable after construction."""

    action: "Action"
    """What to run on a qualifying change (process or callback)."""

    roots: tuple[Path, ...] = ()
    """Directories to watch recursively; empty means the current directory."""

    include_patterns: tuple[str, ...] = ()
    """A path qualifies only if it matches at least one of these."""

    exclude_patterns: tuple[str, ...] = ()
    """A path is disqualified if it matches any of these."""

    delay: float = 2.0
    """Coalescing window in seconds used by the watch source."""

    interval: float = 1.0
    """Minimum spacing in seconds between two triggered actions."""

    restart_on_change: bool = False
    """Kill a still-running action before starting the next one."""

    def __post_init__(self):
        # Accept any iterable from callers; store tuples
        object.__setattr__(self, "roots", tuple(Path(r) for r in self.roots))
        object.__setattr__(self, "include_patterns", tuple(self.include_patterns))
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")

    def resolved_roots(self) -> list[Path]:
        """Absolute watch roots, defaulting to the current working directory."""
        if not self.roots:
            return [Path(os.getcwd())]
        return [root.resolve() for root in self.roots]


class LoopState(Enum):
    """Lifecycle state of the reaction loop."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class SessionStats:
    """Counters for a watch session, for display or embedding hosts."""

    events_received: int = 0
    """Events pulled from the watch source."""

    events_throttled: int = 0
    """Events dropped because the interval gate was cooling."""

    triggers: int = 0
    """Actions triggered, including the startup trigger."""

    failures: int = 0
    """Triggers whose action failed to start."""
