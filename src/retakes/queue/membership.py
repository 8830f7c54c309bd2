from __future__ import annotations

import logging

from retakes.contracts import (
    AssignTeam,
    CheckRoundCompletion,
    ForceSuicide,
    HookDecision,
    MembershipState,
    MessageKey,
    NotifyPlayer,
    PlayerHandle,
    Team,
    TeamChangeAttempt,
    TransitionOutcome,
)
from retakes.core import QueueConfig
from retakes.queue.roster import RosterState, player_label
from retakes.queue.round_lock import RoundTeamLock

logger = logging.getLogger(__name__)


class MembershipController:
    """Decides what happens when a player tries to join a team.

    Returns the hook decision for the game engine (``CONTINUE`` lets the switch
    through, ``HANDLED`` blocks it) together with the commands the host must run.
    """

    def __init__(self, config: QueueConfig, lock: RoundTeamLock) -> None:
        self._config = config
        self._lock = lock

    def membership_of(self, state: RosterState, player: PlayerHandle) -> MembershipState:
        return state.membership_of(player)

    def player_joined_team(self, state: RosterState, attempt: TeamChangeAttempt) -> TransitionOutcome:
        player = attempt.player
        name = player_label(player)
        logger.debug("[%s] team change %s -> %s", name, attempt.from_team.value, attempt.to_team.value)

        if attempt.from_team == Team.NONE and attempt.to_team == Team.SPECTATOR:
            logger.debug("[%s] first connection, nothing to do", name)
            return TransitionOutcome(HookDecision.CONTINUE)

        if state.is_active(player):
            return self._active_player_changed_team(state, attempt)

        if state.is_waiting(player):
            logger.debug("[%s] already in queue", name)
            return TransitionOutcome(HookDecision.HANDLED, [CheckRoundCompletion()])

        if attempt.warmup_period and len(state.active) < self._config.max_active_players:
            logger.debug("[%s] adding to active players during warmup", name)
            state.activate(player)
            return TransitionOutcome(HookDecision.CONTINUE, [CheckRoundCompletion()])

        logger.debug("[%s] adding to queue", name)
        state.enqueue(player)
        return TransitionOutcome(
            HookDecision.HANDLED,
            [NotifyPlayer(player, MessageKey.QUEUE_JOINED), CheckRoundCompletion()],
        )

    def remove_from_all(self, state: RosterState, player: PlayerHandle) -> TransitionOutcome:
        if state.remove(player):
            logger.debug("[%s] removed from all queues", player_label(player))
        self._lock.release(player)
        return TransitionOutcome(HookDecision.CONTINUE, [CheckRoundCompletion()])

    def _active_player_changed_team(self, state: RosterState, attempt: TeamChangeAttempt) -> TransitionOutcome:
        player = attempt.player
        name = player_label(player)

        if attempt.to_team == Team.SPECTATOR:
            logger.debug("[%s] active player moved to spectator", name)
            state.mark_spectating(player)
            self._lock.release(player)
            return TransitionOutcome(HookDecision.CONTINUE, [CheckRoundCompletion()])

        if not self._config.prevent_mid_round_team_changes:
            logger.debug("[%s] mid-round team changes allowed", name)
            return TransitionOutcome(HookDecision.CONTINUE)

        if self._lock.forbids(player, attempt.to_team):
            logger.debug("[%s] not locked to %s this round, sending to queue", name, attempt.to_team.value)
            state.enqueue(player)
            commands = []
            if attempt.is_alive:
                commands.append(ForceSuicide(player))
            commands.append(AssignTeam(player, Team.SPECTATOR))
            commands.append(CheckRoundCompletion())
            return TransitionOutcome(HookDecision.HANDLED, commands)

        logger.debug("[%s] same side or round not locked, keeping player active", name)
        return TransitionOutcome(HookDecision.HANDLED, [CheckRoundCompletion()])
