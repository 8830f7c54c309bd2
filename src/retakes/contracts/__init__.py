from .types import (
    AssignTeam,
    CheckRoundCompletion,
    Command,
    ForceSuicide,
    GameHost,
    GameRules,
    HookDecision,
    IntegrityReport,
    MembershipState,
    MessageKey,
    Notifier,
    NotifyPlayer,
    PlayerHandle,
    PlayerOracle,
    PriorityClassifier,
    QueueEvent,
    RoundObserver,
    Team,
    TeamChangeAttempt,
    TeamController,
    TransitionOutcome,
)

__all__ = [
    "AssignTeam",
    "CheckRoundCompletion",
    "Command",
    "ForceSuicide",
    "GameHost",
    "GameRules",
    "HookDecision",
    "IntegrityReport",
    "MembershipState",
    "MessageKey",
    "Notifier",
    "NotifyPlayer",
    "PlayerHandle",
    "PlayerOracle",
    "PriorityClassifier",
    "QueueEvent",
    "RoundObserver",
    "Team",
    "TeamChangeAttempt",
    "TeamController",
    "TransitionOutcome",
]
