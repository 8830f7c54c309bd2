from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from retakes.contracts import MembershipState, PlayerHandle


def player_label(player: PlayerHandle) -> str:
    name = getattr(player, "name", None)
    return str(name) if name is not None else repr(player)


def labels(players: Iterable[PlayerHandle]) -> list[str]:
    return [player_label(p) for p in players]


@dataclass(slots=True)
class RosterState:
    """Single-owner roster: who plays, who waits, who chose to spectate."""

    active: set[PlayerHandle] = field(default_factory=set)
    waiting: list[PlayerHandle] = field(default_factory=list)
    spectators: set[PlayerHandle] = field(default_factory=set)

    def membership_of(self, player: PlayerHandle) -> MembershipState:
        if player in self.active:
            return MembershipState.ACTIVE
        if player in self.waiting:
            return MembershipState.WAITING
        if player in self.spectators:
            return MembershipState.SPECTATING
        return MembershipState.UNSEEN

    def is_active(self, player: PlayerHandle) -> bool:
        return player in self.active

    def is_waiting(self, player: PlayerHandle) -> bool:
        return player in self.waiting

    def activate(self, player: PlayerHandle) -> None:
        self._drop_from_waiting(player)
        self.spectators.discard(player)
        self.active.add(player)

    def enqueue(self, player: PlayerHandle) -> bool:
        if player in self.waiting:
            return False
        self.active.discard(player)
        self.spectators.discard(player)
        self.waiting.append(player)
        return True

    def mark_spectating(self, player: PlayerHandle) -> None:
        self.active.discard(player)
        self._drop_from_waiting(player)
        self.spectators.add(player)

    def remove(self, player: PlayerHandle) -> bool:
        tracked = self.membership_of(player) != MembershipState.UNSEEN
        self.active.discard(player)
        self._drop_from_waiting(player)
        self.spectators.discard(player)
        return tracked

    def retain(self, keep) -> list[PlayerHandle]:
        """Drop every handle for which ``keep`` is false; queue order is preserved."""
        dropped = [p for p in self.active if not keep(p)]
        dropped_waiting = [p for p in self.waiting if not keep(p)]
        self.active.difference_update(dropped)
        if dropped_waiting:
            self.waiting = [p for p in self.waiting if keep(p)]
        dropped_spectators = [p for p in self.spectators if not keep(p)]
        self.spectators.difference_update(dropped_spectators)
        return dropped + dropped_waiting + dropped_spectators

    def integrity_issues(self, max_active_players: int) -> list[str]:
        issues: list[str] = []
        if len(self.active) > max_active_players:
            issues.append(f"active roster holds {len(self.active)} players, limit is {max_active_players}")
        overlap = self.active.intersection(self.waiting)
        if overlap:
            issues.append(f"players both active and waiting: {labels(overlap)}")
        if len(set(self.waiting)) != len(self.waiting):
            issues.append("waiting queue contains duplicates")
        if self.spectators & (self.active | set(self.waiting)):
            issues.append("spectators overlap active or waiting players")
        return issues

    def snapshot(self) -> dict[str, object]:
        return {
            "active": sorted(labels(self.active)),
            "waiting": labels(self.waiting),
            "spectators": sorted(labels(self.spectators)),
        }

    def _drop_from_waiting(self, player: PlayerHandle) -> None:
        if player in self.waiting:
            self.waiting = [p for p in self.waiting if p != player]
