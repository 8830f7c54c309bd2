from __future__ import annotations

import logging
from typing import Iterable

from retakes.contracts import PlayerHandle, PlayerOracle, Team
from retakes.queue.roster import labels

logger = logging.getLogger(__name__)


class RoundTeamLock:
    """Per-round snapshot of which active players sit on which side.

    Captured once per round after sides are final and cleared at round end.
    While both sides hold players, an active player may only (re)join the side
    they were captured on.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._sides: tuple[frozenset[PlayerHandle], frozenset[PlayerHandle]] = (frozenset(), frozenset())

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def terrorists(self) -> frozenset[PlayerHandle]:
        return self._sides[0]

    @property
    def counter_terrorists(self) -> frozenset[PlayerHandle]:
        return self._sides[1]

    @property
    def is_engaged(self) -> bool:
        return bool(self._sides[0]) and bool(self._sides[1])

    @property
    def is_empty(self) -> bool:
        return not self._sides[0] and not self._sides[1]

    def capture(self, active: Iterable[PlayerHandle], oracle: PlayerOracle) -> None:
        if not self._enabled:
            return
        valid = [p for p in active if oracle.is_valid(p)]
        terrorists = frozenset(p for p in valid if oracle.team_of(p) == Team.TERRORIST)
        counter_terrorists = frozenset(p for p in valid if oracle.team_of(p) == Team.COUNTER_TERRORIST)
        self._sides = (terrorists, counter_terrorists)
        logger.debug(
            "Captured round teams: T=%s CT=%s",
            sorted(labels(terrorists)),
            sorted(labels(counter_terrorists)),
        )

    def clear(self) -> None:
        self._sides = (frozenset(), frozenset())

    def release(self, player: PlayerHandle) -> None:
        terrorists, counter_terrorists = self._sides
        if player in terrorists or player in counter_terrorists:
            self._sides = (terrorists - {player}, counter_terrorists - {player})

    def forbids(self, player: PlayerHandle, to_team: Team) -> bool:
        if not self.is_engaged:
            return False
        if to_team == Team.TERRORIST:
            return player not in self._sides[0]
        if to_team == Team.COUNTER_TERRORIST:
            return player not in self._sides[1]
        return False

    def snapshot(self) -> dict[str, list[str]]:
        return {
            "terrorists": sorted(labels(self._sides[0])),
            "counter_terrorists": sorted(labels(self._sides[1])),
        }
