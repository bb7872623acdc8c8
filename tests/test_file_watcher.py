"""Tests for the watchdog-backed watch source."""

import threading
import time
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from fwatcher_core.file_watcher import WatchdogSource, _Coalescer, _ForwardingHandler, to_change_event
from fwatcher_core.models import ChangeKind
from fwatcher_core.watchers import WatchSourceError

from conftest import make_event


class TestToChangeEvent:
    """Tests for watchdog event normalization."""

    @pytest.mark.parametrize(
        "event_cls,kind",
        [
            (FileCreatedEvent, ChangeKind.CREATED),
            (FileModifiedEvent, ChangeKind.MODIFIED),
            (FileDeletedEvent, ChangeKind.REMOVED),
        ],
    )
    def test_simple_kinds(self, event_cls, kind):
        change = to_change_event(event_cls("/w/a.py"), Path("/w"))
        assert change.kind is kind
        assert change.path == Path("/w/a.py")
        assert change.dest_path is None
        assert change.root == Path("/w")

    def test_move_keeps_both_paths(self):
        change = to_change_event(FileMovedEvent("/w/old.py", "/w/new.py"))
        assert change.kind is ChangeKind.RENAMED
        assert change.subject == Path("/w/old.py")
        assert change.dest_path == Path("/w/new.py")

    def test_relative_subject(self):
        change = to_change_event(FileModifiedEvent("/w/pkg/a.py"), Path("/w"))
        assert change.relative_subject() == Path("pkg/a.py")

    def test_relative_subject_outside_root(self):
        change = make_event(ChangeKind.MODIFIED, "/elsewhere/a.py", root="/w")
        assert change.relative_subject() == Path("/elsewhere/a.py")


class TestCoalescer:
    """Tests for event coalescing inside the delay window."""

    def test_zero_delay_delivers_immediately(self):
        received = []
        coalescer = _Coalescer(received.append, 0)
        event = make_event(ChangeKind.MODIFIED, "/w/a.py")
        coalescer.push(event)
        assert received == [event]

    def test_duplicates_collapsed_in_order(self):
        received = []
        coalescer = _Coalescer(received.append, 60)
        a = make_event(ChangeKind.MODIFIED, "/w/a.py")
        b = make_event(ChangeKind.CREATED, "/w/b.py")
        try:
            coalescer.push(a)
            coalescer.push(b)
            coalescer.push(a)
            assert received == []
        finally:
            coalescer.flush()
        assert received == [a, b]

    def test_window_fires(self):
        delivered = threading.Event()
        coalescer = _Coalescer(lambda event: delivered.set(), 0.05)
        coalescer.push(make_event(ChangeKind.MODIFIED, "/w/a.py"))
        assert delivered.wait(2.0)

    def test_cancel_drops_pending(self):
        received = []
        coalescer = _Coalescer(received.append, 0.05)
        coalescer.push(make_event(ChangeKind.MODIFIED, "/w/a.py"))
        coalescer.cancel()
        time.sleep(0.15)
        assert received == []


class TestForwardingHandler:
    """Tests for the per-root watchdog handler."""

    def test_directory_events_ignored(self):
        received = []
        handler = _ForwardingHandler(Path("/w"), _Coalescer(received.append, 0))
        handler.dispatch(DirModifiedEvent("/w/pkg"))
        assert received == []

    def test_file_events_forwarded_with_root(self):
        received = []
        handler = _ForwardingHandler(Path("/w"), _Coalescer(received.append, 0))
        handler.dispatch(FileModifiedEvent("/w/a.py"))
        assert len(received) == 1
        assert received[0].root == Path("/w")


class TestWatchdogSource:
    """Tests against watchdog's real backend."""

    def test_missing_root_is_setup_failure(self, tmp_path):
        source = WatchdogSource([tmp_path / "missing"])
        with pytest.raises(WatchSourceError, match="not an existing directory"):
            source.start(lambda event: None)
        assert not source.is_alive()

    def test_delivers_changes(self, tmp_path):
        hit = threading.Event()
        received = []

        def sink(event):
            received.append(event)
            if event.path.name == "a.py":
                hit.set()

        source = WatchdogSource([tmp_path], delay=0.05)
        source.start(sink)
        try:
            assert source.is_alive()
            (tmp_path / "a.py").write_text("x = 1")
            assert hit.wait(5.0), "no event delivered"
        finally:
            source.stop()

        assert not source.is_alive()
        assert all(event.root == tmp_path.resolve() for event in received)

    def test_start_twice_rejected(self, tmp_path):
        source = WatchdogSource([tmp_path], delay=0)
        source.start(lambda event: None)
        try:
            with pytest.raises(WatchSourceError, match="already started"):
                source.start(lambda event: None)
        finally:
            source.stop()
