"""Tests for the per-client rate gate."""

import pytest

from diy_hub.services import RateGate


def make_gate(clock, limit=3, window=60.0):
    return RateGate(window_seconds=window, max_requests=limit, clock=clock)


def test_admits_up_to_the_limit(clock):
    gate = make_gate(clock)
    decisions = [gate.check("1.2.3.4") for _ in range(3)]
    assert all(d.allowed for d in decisions)
    assert [d.remaining for d in decisions] == [2, 1, 0]


def test_rejects_beyond_the_limit(clock):
    gate = make_gate(clock)
    for _ in range(3):
        gate.check("1.2.3.4")
    clock.advance(20)

    decision = gate.check("1.2.3.4")

    assert not decision.allowed
    assert decision.remaining == 0
    assert decision.retry_after == 40


def test_clients_are_counted_separately(clock):
    gate = make_gate(clock, limit=1)
    assert gate.check("a").allowed
    assert gate.check("b").allowed
    assert not gate.check("a").allowed


def test_window_resets_after_elapsing(clock):
    gate = make_gate(clock, limit=1)
    gate.check("a")
    assert not gate.check("a").allowed
    clock.advance(60)
    assert gate.check("a").allowed


def test_rejections_do_not_extend_the_window(clock):
    gate = make_gate(clock, limit=1)
    gate.check("a")
    for _ in range(5):
        clock.advance(10)
        gate.check("a")
    clock.advance(10)
    assert gate.check("a").allowed


def test_retry_after_is_at_least_one_second(clock):
    gate = make_gate(clock, limit=1)
    gate.check("a")
    clock.advance(59.9)
    assert gate.check("a").retry_after == 1


def test_reset(clock):
    gate = make_gate(clock, limit=1)
    gate.check("a")
    gate.check("b")
    gate.reset("a")
    assert gate.check("a").allowed
    assert not gate.check("b").allowed
    gate.reset()
    assert gate.check("b").allowed


def test_stale_windows_are_pruned(clock):
    gate = make_gate(clock, limit=1)
    gate.check("a")
    clock.advance(120)
    gate.check("b")
    assert "a" not in gate._windows


@pytest.mark.parametrize("kwargs", [{"window_seconds": 0}, {"max_requests": 0}])
def test_explicit_zero_is_not_replaced_by_default(clock, kwargs):
    with pytest.raises(ValueError):
        RateGate(clock=clock, **kwargs)
