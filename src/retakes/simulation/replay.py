from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from retakes.contracts import HookDecision, Team
from retakes.core import QueueConfig
from retakes.simulation.runtime import QueueRuntime
from retakes.simulation.sandbox import SandboxServer

logger = logging.getLogger(__name__)

STEP_KINDS = frozenset(
    {"connect", "join", "set_team", "spawn", "disconnect", "remove", "update", "warmup", "round_start", "round_end"}
)


class ScenarioError(ValueError):
    pass


@dataclass(slots=True)
class ScenarioStep:
    kind: str
    player: str | None = None
    team: str | None = None
    flags: list[str] = field(default_factory=list)
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind}
        if self.player is not None:
            data["player"] = self.player
        if self.team is not None:
            data["team"] = self.team
        if self.flags:
            data["flags"] = list(self.flags)
        if self.kind == "warmup":
            data["enabled"] = self.enabled
        return data


class ScenarioRunner:
    """Plays a list of scripted host events against a fresh sandbox."""

    def __init__(self, config: QueueConfig, steps: list[ScenarioStep], warmup: bool = False) -> None:
        self.config = config
        self.steps = steps
        self.server = SandboxServer(warmup=warmup)
        self.runtime = QueueRuntime(self.server, config)
        self.decisions: list[tuple[str, HookDecision]] = []

    def run(self) -> QueueRuntime:
        for index, step in enumerate(self.steps):
            logger.debug("step %d: %s", index, step.to_dict())
            self._apply(step)
        return self.runtime

    def fingerprint(self) -> dict[str, Any]:
        return {
            "roster": self.runtime.snapshot(),
            "decisions": [(name, decision.value) for name, decision in self.decisions],
            "team_changes": [(name, team.value) for name, team in self.server.team_changes],
            "suicides": list(self.server.suicides),
            "messages": [(m.player, m.message_key) for m in self.server.inbox],
            "round_checks": self.server.round_checks,
        }

    def _apply(self, step: ScenarioStep) -> None:
        if step.kind not in STEP_KINDS:
            raise ScenarioError(f"unknown scenario step kind: {step.kind}")

        if step.kind == "connect":
            player = self.server.connect(self._require_player(step), step.flags)
            self._team_change(player.name, Team.SPECTATOR)
        elif step.kind == "join":
            self._team_change(self._require_player(step), self._require_team(step))
        elif step.kind == "set_team":
            self._known(step).team = self._require_team(step)
        elif step.kind == "spawn":
            self._known(step).alive = True
        elif step.kind == "disconnect":
            self._known(step)
            self.server.disconnect(self._require_player(step))
        elif step.kind == "remove":
            self.runtime.remove_player(self._known(step))
        elif step.kind == "update":
            self.runtime.update()
        elif step.kind == "warmup":
            self.server.warmup = step.enabled
        elif step.kind == "round_start":
            self.runtime.on_round_start()
        elif step.kind == "round_end":
            self.runtime.on_round_end()

    def _team_change(self, name: str, to_team: Team) -> None:
        player = self.server.players.get(name)
        if player is None:
            raise ScenarioError(f"player {name} never connected")
        decision = self.runtime.on_player_team_change(player, player.team, to_team)
        self.decisions.append((name, decision))
        if decision == HookDecision.CONTINUE:
            player.team = to_team

    def _known(self, step: ScenarioStep):
        name = self._require_player(step)
        if name not in self.server.players:
            raise ScenarioError(f"player {name} never connected")
        return self.server.players[name]

    @staticmethod
    def _require_player(step: ScenarioStep) -> str:
        if not step.player:
            raise ScenarioError(f"step {step.kind} requires a player")
        return step.player

    @staticmethod
    def _require_team(step: ScenarioStep) -> Team:
        try:
            return Team(step.team)
        except ValueError as exc:
            raise ScenarioError(f"step {step.kind} has invalid team {step.team!r}") from exc


class ReplayHarness:
    def __init__(self, config: QueueConfig | None = None, warmup: bool = False) -> None:
        self.config = config if config is not None else QueueConfig()
        self.warmup = warmup
        self.steps: list[ScenarioStep] = []

    def record(self, kind: str, player: str | None = None, team: str | None = None, flags: list[str] | None = None, enabled: bool = True) -> None:
        if kind not in STEP_KINDS:
            raise ScenarioError(f"unknown scenario step kind: {kind}")
        self.steps.append(ScenarioStep(kind=kind, player=player, team=team, flags=list(flags or []), enabled=enabled))

    def save(self, path: Path) -> None:
        payload = {
            "config": {
                "max_active_players": self.config.max_active_players,
                "terrorist_ratio": self.config.terrorist_ratio,
                "priority_tags": list(self.config.priority_tags),
                "force_even_teams_on_multiple_of_ten": self.config.force_even_teams_on_multiple_of_ten,
                "prevent_mid_round_team_changes": self.config.prevent_mid_round_team_changes,
            },
            "warmup": self.warmup,
            "steps": [s.to_dict() for s in self.steps],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @staticmethod
    def load(path: Path, overrides: dict[str, Any] | None = None, defaults: dict[str, Any] | None = None) -> ReplayHarness:
        data = json.loads(path.read_text(encoding="utf-8"))
        config_data = {**(defaults or {}), **data.get("config", {}), **(overrides or {})}
        harness = ReplayHarness(QueueConfig.from_mapping(config_data), warmup=bool(data.get("warmup", False)))
        for raw in data.get("steps", []):
            if "kind" not in raw:
                raise ScenarioError(f"scenario step without kind: {raw}")
            harness.record(
                raw["kind"],
                player=raw.get("player"),
                team=raw.get("team"),
                flags=raw.get("flags"),
                enabled=bool(raw.get("enabled", True)),
            )
        return harness

    def run(self) -> ScenarioRunner:
        runner = ScenarioRunner(self.config, self.steps, warmup=self.warmup)
        runner.run()
        return runner

    def replay(self) -> tuple[dict[str, Any], dict[str, Any]]:
        return self.run().fingerprint(), self.run().fingerprint()
