"""Tests for fwatcher_core.gate.IntervalGate."""

import pytest

from fwatcher_core.gate import IntervalGate


def test_allow_before_any_trigger():
    gate = IntervalGate(1.0)
    assert gate.allow(0.0)
    assert gate.allow(1_000_000.0)
    assert gate.last_triggered_at is None


def test_cooling_then_allowed():
    gate = IntervalGate(1.0)
    gate.mark_triggered(10.0)

    assert gate.allow(10.5) is False
    assert gate.allow(11.0) is True
    assert gate.allow(12.5) is True


def test_allow_does_not_mutate():
    gate = IntervalGate(1.0)
    gate.allow(5.0)
    assert gate.last_triggered_at is None

    gate.mark_triggered(5.0)
    gate.allow(7.0)
    assert gate.last_triggered_at == 5.0


def test_mark_resets_cooling_window():
    gate = IntervalGate(1.0)
    gate.mark_triggered(10.0)
    gate.mark_triggered(10.8)
    assert not gate.allow(11.5)
    assert gate.allow(11.8)


def test_uses_clock_when_now_omitted(clock):
    gate = IntervalGate(1.0, clock=clock)
    gate.mark_triggered()
    assert gate.last_triggered_at == clock.now
    assert gate.is_cooling()

    clock.advance(0.2)
    assert not gate.allow()

    clock.advance(1.0)
    assert gate.allow()


def test_zero_interval_always_allows():
    gate = IntervalGate(0.0)
    gate.mark_triggered(3.0)
    assert gate.allow(3.0)


def test_reset_returns_to_idle():
    gate = IntervalGate(10.0)
    gate.mark_triggered(1.0)
    gate.reset()
    assert gate.allow(1.5)


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        IntervalGate(-1.0)
