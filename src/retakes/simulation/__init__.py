from .replay import ReplayHarness, ScenarioError, ScenarioRunner, ScenarioStep
from .runtime import QueueRuntime
from .sandbox import SandboxPlayer, SandboxServer

__all__ = [
    "QueueRuntime",
    "ReplayHarness",
    "SandboxPlayer",
    "SandboxServer",
    "ScenarioError",
    "ScenarioRunner",
    "ScenarioStep",
]
