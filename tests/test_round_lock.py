from __future__ import annotations

from retakes.contracts import Team
from retakes.queue import RoundTeamLock
from retakes.simulation import SandboxServer


def _players(server: SandboxServer):
    t1 = server.connect("T1")
    t1.team = Team.TERRORIST
    ct1 = server.connect("CT1")
    ct1.team = Team.COUNTER_TERRORIST
    ct2 = server.connect("CT2")
    ct2.team = Team.COUNTER_TERRORIST
    return t1, ct1, ct2


def test_capture_is_noop_when_disabled():
    server = SandboxServer()
    lock = RoundTeamLock(enabled=False)
    lock.capture(set(_players(server)), server)
    assert lock.is_empty
    assert not lock.forbids(server.player("T1"), Team.COUNTER_TERRORIST)


def test_capture_snapshots_both_sides():
    server = SandboxServer()
    t1, ct1, ct2 = _players(server)
    spectator = server.connect("S1")
    spectator.team = Team.SPECTATOR
    lock = RoundTeamLock()

    lock.capture({t1, ct1, ct2, spectator}, server)

    assert lock.terrorists == frozenset({t1})
    assert lock.counter_terrorists == frozenset({ct1, ct2})
    assert lock.is_engaged


def test_capture_ignores_invalid_players():
    server = SandboxServer()
    t1, ct1, ct2 = _players(server)
    server.disconnect("CT2")
    lock = RoundTeamLock()
    lock.capture({t1, ct1, ct2}, server)
    assert lock.counter_terrorists == frozenset({ct1})


def test_capture_replaces_previous_snapshot():
    server = SandboxServer()
    t1, ct1, ct2 = _players(server)
    lock = RoundTeamLock()
    lock.capture({t1, ct1, ct2}, server)

    t1.team = Team.COUNTER_TERRORIST
    ct1.team = Team.TERRORIST
    lock.capture({t1, ct1}, server)

    assert lock.terrorists == frozenset({ct1})
    assert lock.counter_terrorists == frozenset({t1})


def test_clear_empties_both_sides():
    server = SandboxServer()
    lock = RoundTeamLock()
    lock.capture(set(_players(server)), server)
    lock.clear()
    assert lock.is_empty
    assert not lock.is_engaged


def test_forbids_only_the_other_side():
    server = SandboxServer()
    t1, ct1, _ = _players(server)
    lock = RoundTeamLock()
    lock.capture({t1, ct1}, server)

    assert lock.forbids(t1, Team.COUNTER_TERRORIST)
    assert not lock.forbids(t1, Team.TERRORIST)
    assert not lock.forbids(t1, Team.SPECTATOR)
    assert lock.forbids(server.connect("late"), Team.TERRORIST)


def test_release_can_disengage_the_lock():
    server = SandboxServer()
    t1, ct1, _ = _players(server)
    lock = RoundTeamLock()
    lock.capture({t1, ct1}, server)

    lock.release(t1)

    assert not lock.is_engaged
    assert not lock.forbids(ct1, Team.TERRORIST)
