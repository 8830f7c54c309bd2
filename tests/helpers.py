from __future__ import annotations

from retakes.contracts import HookDecision, Team
from retakes.core import QueueConfig
from retakes.simulation import QueueRuntime, SandboxPlayer, SandboxServer

VIP = "@css/vip"


def make_runtime(warmup: bool = False, **config) -> tuple[QueueRuntime, SandboxServer]:
    server = SandboxServer(warmup=warmup)
    runtime = QueueRuntime(server, QueueConfig(**config))
    return runtime, server


def attempt_join(runtime: QueueRuntime, player: SandboxPlayer, to_team: Team) -> HookDecision:
    decision = runtime.on_player_team_change(player, player.team, to_team)
    if decision == HookDecision.CONTINUE:
        player.team = to_team
    return decision


def connect_and_join(
    runtime: QueueRuntime,
    server: SandboxServer,
    name: str,
    to_team: Team = Team.COUNTER_TERRORIST,
    flags: tuple[str, ...] = (),
) -> SandboxPlayer:
    player = server.connect(name, flags)
    attempt_join(runtime, player, Team.SPECTATOR)
    attempt_join(runtime, player, to_team)
    return player
