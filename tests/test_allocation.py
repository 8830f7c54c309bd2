from __future__ import annotations

import pytest

from retakes.contracts import AssignTeam, MessageKey, NotifyPlayer, Team
from retakes.core import QueueConfig
from retakes.queue import AllocationEngine, RosterState
from retakes.simulation import SandboxServer
from tests.helpers import VIP


def _engine(server: SandboxServer, **config) -> AllocationEngine:
    return AllocationEngine(QueueConfig(**config), oracle=server, classifier=server)


def _active_roster(server: SandboxServer, count: int) -> RosterState:
    return RosterState(active={server.connect(f"A{i}") for i in range(count)})


@pytest.mark.parametrize("count", range(1, 31))
def test_target_terrorists_within_bounds_for_default_config(count):
    server = SandboxServer()
    engine = _engine(server)
    state = _active_roster(server, count)
    terrorists = engine.target_terrorist_count(state)
    assert 1 <= terrorists <= count
    assert engine.target_counter_terrorist_count(state) == count - terrorists


@pytest.mark.parametrize("count", [10, 20, 30])
def test_even_teams_on_multiples_of_ten(count):
    server = SandboxServer()
    engine = _engine(server, terrorist_ratio=0.3)
    state = _active_roster(server, count)
    assert engine.target_terrorist_count(state) == count // 2
    assert engine.target_counter_terrorist_count(state) == count // 2


def test_multiple_of_ten_uses_ratio_when_forcing_disabled():
    server = SandboxServer()
    engine = _engine(server, terrorist_ratio=0.3, force_even_teams_on_multiple_of_ten=False)
    assert engine.target_terrorist_count(_active_roster(server, 10)) == 3


@pytest.mark.parametrize(
    ("count", "expected"),
    [(3, 2), (5, 2), (7, 4), (9, 4)],
)
def test_ties_round_half_to_even(count, expected):
    server = SandboxServer()
    engine = _engine(server, terrorist_ratio=0.5)
    assert engine.target_terrorist_count(_active_roster(server, count)) == expected


def test_single_player_is_clamped_to_one_terrorist():
    server = SandboxServer()
    engine = _engine(server, terrorist_ratio=0.45)
    state = _active_roster(server, 1)
    assert engine.target_terrorist_count(state) == 1
    assert engine.target_counter_terrorist_count(state) == 0


def test_default_ratio_targets():
    server = SandboxServer()
    engine = _engine(server)
    assert engine.target_terrorist_count(_active_roster(server, 9)) == 4
    assert engine.target_counter_terrorist_count(_active_roster(server, 9)) == 5
    assert engine.target_terrorist_count(_active_roster(server, 4)) == 2


def test_empty_roster_targets_are_zero():
    server = SandboxServer()
    engine = _engine(server)
    assert engine.target_terrorist_count(RosterState()) == 0
    assert engine.target_counter_terrorist_count(RosterState()) == 0


def test_prune_is_idempotent_and_keeps_queue_order():
    server = SandboxServer()
    active_gone = server.connect("gone_active")
    active_here = server.connect("here_active")
    waiting = [server.connect(name) for name in ("W1", "W2", "W3", "W4")]
    state = RosterState(active={active_gone, active_here}, waiting=list(waiting))
    server.disconnect("gone_active")
    server.disconnect("W2")

    engine = _engine(server)
    removed = engine.prune_disconnected(state)
    assert set(removed) == {active_gone, waiting[1]}
    assert state.active == {active_here}
    assert state.waiting == [waiting[0], waiting[2], waiting[3]]

    assert engine.prune_disconnected(state) == []
    assert state.active == {active_here}
    assert state.waiting == [waiting[0], waiting[2], waiting[3]]


def test_prune_drops_invalid_but_connected_players():
    server = SandboxServer()
    broken = server.connect("broken")
    broken.valid = False
    state = RosterState(waiting=[broken])
    _engine(server).prune_disconnected(state)
    assert state.waiting == []


def test_promotion_selects_priority_first_then_queue_order():
    server = SandboxServer()
    p1 = server.connect("P1")
    p2 = server.connect("P2", [VIP])
    p3 = server.connect("P3")
    state = RosterState(waiting=[p1, p2, p3])

    commands = _engine(server, max_active_players=2).update(state)

    assert state.active == {p1, p2}
    assert state.waiting == [p3]
    assert commands[:2] == [AssignTeam(p2, Team.COUNTER_TERRORIST), AssignTeam(p1, Team.COUNTER_TERRORIST)]


def test_promotion_skips_invalid_without_using_a_slot():
    server = SandboxServer()
    ghost = server.connect("ghost")
    ghost.valid = False
    p1 = server.connect("P1")
    p2 = server.connect("P2")
    p3 = server.connect("P3")
    state = RosterState(waiting=[ghost, p1, p2, p3])

    commands = _engine(server, max_active_players=2).promote_from_queue(state)

    assert state.active == {p1, p2}
    assert state.waiting == [p3]
    assert [c.player for c in commands] == [p1, p2]


def test_promotion_respects_capacity_and_keeps_sets_disjoint():
    server = SandboxServer()
    state = RosterState(
        active={server.connect("A1"), server.connect("A2")},
        waiting=[server.connect(f"W{i}") for i in range(5)],
    )
    _engine(server, max_active_players=4).promote_from_queue(state)
    assert len(state.active) == 4
    assert len(state.waiting) == 3
    assert not state.active.intersection(state.waiting)


def test_promotion_noop_when_full():
    server = SandboxServer()
    state = _active_roster(server, 3)
    state.waiting.append(server.connect("W1"))
    assert _engine(server, max_active_players=3).promote_from_queue(state) == []
    assert len(state.waiting) == 1


def test_reorder_only_when_roster_full():
    server = SandboxServer()
    regular = server.connect("R1")
    vip = server.connect("V1", [VIP])
    state = RosterState(active={server.connect("A1")}, waiting=[regular, vip])
    assert _engine(server, max_active_players=2).reorder_queue_by_priority(state) == []
    assert state.waiting == [regular, vip]


def test_reorder_is_stable_and_notifies_priority_players():
    server = SandboxServer()
    r1 = server.connect("R1")
    v1 = server.connect("V1", [VIP])
    r2 = server.connect("R2")
    v2 = server.connect("V2", [VIP])
    state = _active_roster(server, 2)
    state.waiting = [r1, v1, r2, v2]

    commands = _engine(server, max_active_players=2).reorder_queue_by_priority(state)

    assert state.waiting == [v1, v2, r1, r2]
    assert commands == [NotifyPlayer(v1, MessageKey.QUEUE_PRIORITY), NotifyPlayer(v2, MessageKey.QUEUE_PRIORITY)]
    assert len(state.active) == 2


def test_update_tells_waiting_players_the_game_is_full():
    server = SandboxServer()
    state = _active_roster(server, 2)
    w1 = server.connect("W1")
    w2 = server.connect("W2")
    state.waiting = [w1, w2]

    commands = _engine(server, max_active_players=2).update(state)

    assert commands == [
        NotifyPlayer(w1, MessageKey.QUEUE_WAITING, (2,)),
        NotifyPlayer(w2, MessageKey.QUEUE_WAITING, (2,)),
    ]


def test_update_at_capacity_orders_promotion_then_priority_then_waiting():
    server = SandboxServer()
    state = _active_roster(server, 1)
    r1 = server.connect("R1")
    v1 = server.connect("V1", [VIP])
    r2 = server.connect("R2")
    v2 = server.connect("V2", [VIP])
    state.waiting = [r1, v1, r2, v2]

    commands = _engine(server, max_active_players=2).update(state)

    assert state.waiting == [v2, r1, r2]
    assert commands == [
        AssignTeam(v1, Team.COUNTER_TERRORIST),
        NotifyPlayer(v2, MessageKey.QUEUE_PRIORITY),
        NotifyPlayer(v2, MessageKey.QUEUE_WAITING, (2,)),
        NotifyPlayer(r1, MessageKey.QUEUE_WAITING, (2,)),
        NotifyPlayer(r2, MessageKey.QUEUE_WAITING, (2,)),
    ]


def test_promotion_skips_disconnected_but_valid_player():
    server = SandboxServer()
    dropped = server.connect("dropped")
    dropped.connected = False
    p1 = server.connect("P1")
    p2 = server.connect("P2")
    state = RosterState(waiting=[dropped, p1, p2])

    commands = _engine(server, max_active_players=1).promote_from_queue(state)

    assert state.active == {p1}
    assert state.waiting == [p2]
    assert commands == [AssignTeam(p1, Team.COUNTER_TERRORIST)]


def test_update_prunes_before_promoting():
    server = SandboxServer()
    leaving = server.connect("leaving")
    waiting = server.connect("W1")
    state = RosterState(active={leaving}, waiting=[waiting])
    server.disconnect("leaving")

    _engine(server, max_active_players=1).update(state)

    assert state.active == {waiting}
    assert state.waiting == []
