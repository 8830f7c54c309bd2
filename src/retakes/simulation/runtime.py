from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from retakes.contracts import (
    AssignTeam,
    CheckRoundCompletion,
    Command,
    ForceSuicide,
    GameHost,
    HookDecision,
    MembershipState,
    NotifyPlayer,
    PlayerHandle,
    Team,
    TeamChangeAttempt,
)
from retakes.core import (
    EventBus,
    QueueConfig,
    ReentrantUpdateError,
    RosterIntegrityError,
    build_integrity_report,
    make_event,
)
from retakes.queue import AllocationEngine, MembershipController, RosterState, RoundTeamLock, labels, player_label

logger = logging.getLogger(__name__)


class QueueRuntime:
    """Host adapter that owns one scheduler instance.

    Game callbacks come in through the ``on_*`` methods; each one runs a
    transition against the roster, checks the roster invariants and only then
    hands the resulting commands to the host. Calling back into the runtime
    from a host callback raises ``ReentrantUpdateError``.
    """

    def __init__(self, host: GameHost, config: QueueConfig | None = None) -> None:
        self.config = config if config is not None else QueueConfig()
        self.config.validate()
        self.host = host
        self.state = RosterState()
        self.round_lock = RoundTeamLock(enabled=self.config.prevent_mid_round_team_changes)
        self.engine = AllocationEngine(self.config, oracle=host, classifier=host)
        self.controller = MembershipController(self.config, self.round_lock)
        self.event_bus = EventBus()
        self._busy = False

    def on_player_team_change(self, player: PlayerHandle, from_team: Team, to_team: Team) -> HookDecision:
        attempt = TeamChangeAttempt(
            player=player,
            from_team=from_team,
            to_team=to_team,
            warmup_period=self.host.is_warmup(),
            is_alive=self.host.is_valid(player) and self.host.is_alive(player),
        )
        with self._transition("team_change", player=player_label(player)):
            outcome = self.controller.player_joined_team(self.state, attempt)
        self._dispatch(outcome.commands)
        return outcome.decision

    def on_player_disconnect(self, player: PlayerHandle) -> None:
        self.remove_player(player)

    def remove_player(self, player: PlayerHandle) -> None:
        with self._transition("remove_player", player=player_label(player)):
            outcome = self.controller.remove_from_all(self.state, player)
        self._dispatch(outcome.commands)

    def update(self) -> None:
        with self._transition("update"):
            commands = self.engine.update(self.state)
        self._dispatch(commands)

    def on_round_start(self) -> None:
        with self._transition("round_start"):
            self.round_lock.capture(self.state.active, self.host)
        if self.round_lock.enabled:
            snapshot = self.round_lock.snapshot()
            self.event_bus.publish(
                make_event("round", "round_locked", snapshot["terrorists"] + snapshot["counter_terrorists"], **snapshot)
            )

    def on_round_end(self) -> None:
        with self._transition("round_end"):
            self.round_lock.clear()
        self.event_bus.publish(make_event("round", "round_cleared", []))

    def membership_of(self, player: PlayerHandle) -> MembershipState:
        return self.controller.membership_of(self.state, player)

    def target_terrorist_count(self) -> int:
        return self.engine.target_terrorist_count(self.state)

    def target_counter_terrorist_count(self) -> int:
        return self.engine.target_counter_terrorist_count(self.state)

    def snapshot(self) -> dict[str, object]:
        data = self.state.snapshot()
        data["round_lock"] = self.round_lock.snapshot()
        data["target_terrorists"] = self.target_terrorist_count()
        data["target_counter_terrorists"] = self.target_counter_terrorist_count()
        return data

    def debug_queues(self, label: str) -> None:
        snapshot = self.snapshot()
        logger.debug("ActivePlayers (%s): %s", label, ", ".join(snapshot["active"]) or "No active players.")
        logger.debug("QueuePlayers (%s): %s", label, ", ".join(snapshot["waiting"]) or "No players in the queue.")
        lock = self.round_lock.snapshot()
        logger.debug("RoundTerrorists (%s): %s", label, ", ".join(lock["terrorists"]) or "None.")
        logger.debug("RoundCounterTerrorists (%s): %s", label, ", ".join(lock["counter_terrorists"]) or "None.")

    @contextmanager
    def _transition(self, action: str, **context: object) -> Iterator[None]:
        if self._busy:
            raise ReentrantUpdateError(f"queue runtime re-entered during {action}")
        self._busy = True
        before = self._memberships()
        try:
            yield
        finally:
            self._busy = False
        self._publish_membership_changes(before, action)
        self._check_integrity(action, context)

    def _dispatch(self, commands: list[Command]) -> None:
        self._busy = True
        try:
            for command in commands:
                if isinstance(command, AssignTeam):
                    self.host.change_team(command.player, command.team)
                elif isinstance(command, ForceSuicide):
                    self.host.force_suicide(command.player)
                elif isinstance(command, NotifyPlayer):
                    self.host.notify(command.player, command.message_key.value, command.args)
                elif isinstance(command, CheckRoundCompletion):
                    self.host.check_round_completion()
                else:
                    raise TypeError(f"unknown queue command: {command!r}")
        finally:
            self._busy = False

    def _memberships(self) -> dict[PlayerHandle, MembershipState]:
        tracked: dict[PlayerHandle, MembershipState] = {}
        for player in self.state.active:
            tracked[player] = MembershipState.ACTIVE
        for player in self.state.waiting:
            tracked[player] = MembershipState.WAITING
        for player in self.state.spectators:
            tracked[player] = MembershipState.SPECTATING
        return tracked

    def _publish_membership_changes(self, before: dict[PlayerHandle, MembershipState], action: str) -> None:
        after = self._memberships()
        for player in list(before) + [p for p in after if p not in before]:
            old = before.get(player, MembershipState.UNSEEN)
            new = after.get(player, MembershipState.UNSEEN)
            if old != new:
                self.event_bus.publish(
                    make_event("queue", f"{old.value}_to_{new.value}", [player_label(player)], action=action)
                )

    def _check_integrity(self, action: str, context: dict[str, object]) -> None:
        issues = self.state.integrity_issues(self.config.max_active_players)
        if not issues:
            return
        report = build_integrity_report(
            error_code="ROSTER_INVARIANT_VIOLATED",
            message="; ".join(issues),
            state_snapshot={**self.state.snapshot(), "round_lock": self.round_lock.snapshot()},
            context={"action": action, **context, "waiting_order": labels(self.state.waiting)},
        )
        logger.error("Roster integrity failure after %s: %s", action, report.message)
        raise RosterIntegrityError(report)
