"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from fwatcher_core.models import ChangeEvent, ChangeKind  # noqa: E402
from fwatcher_core.watchers import WatchSourceError  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHandle:
    """Action handle recording terminate() calls."""

    def __init__(self, event=None):
        self.event = event
        self.running = True
        self.terminated = False

    def is_running(self) -> bool:
        return self.running

    def terminate(self) -> None:
        self.terminated = True
        self.running = False

    def wait(self, timeout=None):
        return None


class FakeAction:
    """Action returning FakeHandles; optionally fails to start."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.handles: list[FakeHandle] = []

    def invoke(self, event):
        if self.fail:
            raise OSError("No such file or directory: 'missing-command'")
        handle = FakeHandle(event)
        self.handles.append(handle)
        return handle

    @property
    def events(self):
        return [h.event for h in self.handles]


class FakeSource:
    """In-memory watch source; tests push events through ``emit``."""

    def __init__(self, fail_on_start: bool = False):
        self.fail_on_start = fail_on_start
        self.sink = None
        self.alive = False
        self.stopped = False

    def start(self, sink) -> None:
        if self.fail_on_start:
            raise WatchSourceError("Cannot watch /nonexistent: not an existing directory")
        self.sink = sink
        self.alive = True

    def stop(self) -> None:
        self.stopped = True
        self.alive = False

    def is_alive(self) -> bool:
        return self.alive

    def emit(self, event: ChangeEvent) -> None:
        self.sink(event)


class RecordingNotifier:
    """Notifier collecting messages per level."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, msg: str) -> None:
        self.infos.append(msg)

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)


def make_event(kind: ChangeKind, path, root=None, dest=None) -> ChangeEvent:
    """Build a ChangeEvent from strings."""
    return ChangeEvent(
        kind=kind,
        path=Path(path),
        dest_path=Path(dest) if dest else None,
        root=Path(root) if root else None,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def action():
    return FakeAction()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def notifier():
    return RecordingNotifier()
