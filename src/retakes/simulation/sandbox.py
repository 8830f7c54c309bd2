from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from retakes.contracts import Team

DEFAULT_MESSAGES = {
    "retakes.queue.joined": "You have joined the queue.",
    "retakes.queue.vip_priority": "You have been prioritized in the queue.",
    "retakes.queue.waiting": "The game is full ({0} players), you are waiting in the queue.",
}


@dataclass(eq=False, slots=True)
class SandboxPlayer:
    name: str
    flags: set[str] = field(default_factory=set)
    team: Team = Team.NONE
    connected: bool = True
    valid: bool = True
    alive: bool = False

    def __repr__(self) -> str:
        return f"SandboxPlayer({self.name!r})"


@dataclass(slots=True)
class DeliveredMessage:
    player: str
    message_key: str
    text: str


class SandboxServer:
    """In-memory game server used for scenarios, the CLI and tests."""

    def __init__(self, warmup: bool = False, messages: dict[str, str] | None = None) -> None:
        self.warmup = warmup
        self.players: dict[str, SandboxPlayer] = {}
        self.messages = dict(DEFAULT_MESSAGES if messages is None else messages)
        self.inbox: list[DeliveredMessage] = []
        self.team_changes: list[tuple[str, Team]] = []
        self.suicides: list[str] = []
        self.round_checks = 0

    def connect(self, name: str, flags: Sequence[str] = ()) -> SandboxPlayer:
        player = SandboxPlayer(name=name, flags=set(flags))
        self.players[name] = player
        return player

    def disconnect(self, name: str) -> SandboxPlayer:
        player = self.players[name]
        player.connected = False
        player.valid = False
        player.alive = False
        return player

    def player(self, name: str) -> SandboxPlayer:
        return self.players[name]

    def messages_for(self, name: str) -> list[str]:
        return [m.message_key for m in self.inbox if m.player == name]

    # PlayerOracle
    def is_valid(self, player: SandboxPlayer) -> bool:
        return player.valid

    def is_connected(self, player: SandboxPlayer) -> bool:
        return player.connected

    def is_alive(self, player: SandboxPlayer) -> bool:
        return player.alive

    def team_of(self, player: SandboxPlayer) -> Team:
        return player.team

    # PriorityClassifier
    def has_priority(self, player: SandboxPlayer, tags: Sequence[str]) -> bool:
        return any(tag in player.flags for tag in tags)

    # Notifier
    def notify(self, player: SandboxPlayer, message_key: str, args: Sequence[Any]) -> None:
        template = self.messages.get(message_key, message_key)
        self.inbox.append(DeliveredMessage(player.name, message_key, template.format(*args)))

    # RoundObserver
    def check_round_completion(self) -> None:
        self.round_checks += 1

    # TeamController
    def change_team(self, player: SandboxPlayer, team: Team) -> None:
        player.team = team
        self.team_changes.append((player.name, team))

    def force_suicide(self, player: SandboxPlayer) -> None:
        player.alive = False
        self.suicides.append(player.name)

    # GameRules
    def is_warmup(self) -> bool:
        return self.warmup
