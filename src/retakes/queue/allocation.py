from __future__ import annotations

import logging

from retakes.contracts import (
    AssignTeam,
    Command,
    MessageKey,
    NotifyPlayer,
    PlayerHandle,
    PlayerOracle,
    PriorityClassifier,
    Team,
)
from retakes.core import QueueConfig
from retakes.queue.roster import RosterState, labels, player_label

logger = logging.getLogger(__name__)


class AllocationEngine:
    """Moves players from the waiting queue into the active roster.

    Every method takes the roster explicitly and returns the side effects the
    host should perform; the engine itself never talks to players.
    """

    def __init__(self, config: QueueConfig, oracle: PlayerOracle, classifier: PriorityClassifier) -> None:
        config.validate()
        self._config = config
        self._oracle = oracle
        self._classifier = classifier

    @property
    def config(self) -> QueueConfig:
        return self._config

    def target_terrorist_count(self, state: RosterState) -> int:
        active_count = len(state.active)
        if active_count == 0:
            return 0
        force_even = self._config.force_even_teams_on_multiple_of_ten and active_count % 10 == 0
        ratio = 0.5 if force_even else self._config.terrorist_ratio
        # round() is half-to-even: 2.5 -> 2, 3.5 -> 4
        terrorists = round(ratio * active_count)
        return terrorists if terrorists > 0 else 1

    def target_counter_terrorist_count(self, state: RosterState) -> int:
        return len(state.active) - self.target_terrorist_count(state)

    def has_priority(self, player: PlayerHandle) -> bool:
        return self._classifier.has_priority(player, self._config.priority_tags)

    def is_present(self, player: PlayerHandle) -> bool:
        return self._oracle.is_valid(player) and self._oracle.is_connected(player)

    def prune_disconnected(self, state: RosterState) -> list[PlayerHandle]:
        removed = state.retain(self.is_present)
        if removed:
            logger.debug("Removed %d disconnected players: %s", len(removed), labels(removed))
        return removed

    def promote_from_queue(self, state: RosterState) -> list[Command]:
        slots = self._config.max_active_players - len(state.active)
        logger.debug(
            "%d max players, %d active players, %d players in queue, %d slots open",
            self._config.max_active_players,
            len(state.active),
            len(state.waiting),
            slots,
        )
        if slots <= 0 or not state.waiting:
            return []

        commands: list[Command] = []
        for player in self._priority_order(state.waiting):
            if slots <= 0:
                break
            state.waiting.remove(player)
            if not self.is_present(player):
                logger.debug("Skipping absent queued player %s", player_label(player))
                continue
            state.activate(player)
            commands.append(AssignTeam(player, Team.COUNTER_TERRORIST))
            slots -= 1

        logger.debug("Promoted to active: %s", labels(c.player for c in commands))
        return commands

    def reorder_queue_by_priority(self, state: RosterState) -> list[Command]:
        if len(state.active) != self._config.max_active_players or not state.waiting:
            return []

        state.waiting = self._priority_order(state.waiting)
        commands: list[Command] = [
            NotifyPlayer(player, MessageKey.QUEUE_PRIORITY) for player in state.waiting if self.has_priority(player)
        ]
        logger.debug("Reordered queue, %d priority players at the front", len(commands))
        return commands

    def update(self, state: RosterState) -> list[Command]:
        self.prune_disconnected(state)
        commands = self.promote_from_queue(state)
        commands.extend(self.reorder_queue_by_priority(state))

        if len(state.active) == self._config.max_active_players and state.waiting:
            active_count = len(state.active)
            commands.extend(
                NotifyPlayer(player, MessageKey.QUEUE_WAITING, (active_count,)) for player in state.waiting
            )
        return commands

    def _priority_order(self, queue: list[PlayerHandle]) -> list[PlayerHandle]:
        # sorted() is stable, so queue position breaks ties within each group
        return sorted(queue, key=lambda player: 0 if self.has_priority(player) else 1)
