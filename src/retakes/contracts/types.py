from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Hashable, Mapping, Protocol, Sequence


PlayerHandle = Hashable


class Team(str, Enum):
    NONE = "none"
    SPECTATOR = "spectator"
    TERRORIST = "terrorist"
    COUNTER_TERRORIST = "counter_terrorist"


class MembershipState(str, Enum):
    UNSEEN = "unseen"
    ACTIVE = "active"
    WAITING = "waiting"
    SPECTATING = "spectating"


class HookDecision(str, Enum):
    CONTINUE = "continue"
    HANDLED = "handled"


class MessageKey(str, Enum):
    QUEUE_JOINED = "retakes.queue.joined"
    QUEUE_PRIORITY = "retakes.queue.vip_priority"
    QUEUE_WAITING = "retakes.queue.waiting"


class PlayerOracle(Protocol):
    def is_valid(self, player: PlayerHandle) -> bool: ...

    def is_connected(self, player: PlayerHandle) -> bool: ...

    def is_alive(self, player: PlayerHandle) -> bool: ...

    def team_of(self, player: PlayerHandle) -> Team: ...


class PriorityClassifier(Protocol):
    def has_priority(self, player: PlayerHandle, tags: Sequence[str]) -> bool: ...


class Notifier(Protocol):
    def notify(self, player: PlayerHandle, message_key: str, args: Sequence[Any]) -> None: ...


class RoundObserver(Protocol):
    def check_round_completion(self) -> None: ...


class TeamController(Protocol):
    def change_team(self, player: PlayerHandle, team: Team) -> None: ...

    def force_suicide(self, player: PlayerHandle) -> None: ...


class GameRules(Protocol):
    def is_warmup(self) -> bool: ...


class GameHost(PlayerOracle, PriorityClassifier, Notifier, RoundObserver, TeamController, GameRules, Protocol):
    """Everything the runtime needs from the game server, in one object."""


@dataclass(slots=True, frozen=True)
class AssignTeam:
    player: PlayerHandle
    team: Team


@dataclass(slots=True, frozen=True)
class ForceSuicide:
    player: PlayerHandle


@dataclass(slots=True, frozen=True)
class NotifyPlayer:
    player: PlayerHandle
    message_key: MessageKey
    args: tuple[Any, ...] = ()


@dataclass(slots=True, frozen=True)
class CheckRoundCompletion:
    pass


Command = AssignTeam | ForceSuicide | NotifyPlayer | CheckRoundCompletion


@dataclass(slots=True, frozen=True)
class TeamChangeAttempt:
    player: PlayerHandle
    from_team: Team
    to_team: Team
    warmup_period: bool = False
    is_alive: bool = False


@dataclass(slots=True)
class TransitionOutcome:
    decision: HookDecision
    commands: list[Command] = field(default_factory=list)


@dataclass(slots=True)
class QueueEvent:
    event_id: str
    time: datetime
    scope: str
    event_type: str
    players: list[str]
    detail: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IntegrityReport:
    report_id: str
    timestamp: datetime
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
