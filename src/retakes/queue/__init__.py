from .allocation import AllocationEngine
from .membership import MembershipController
from .roster import RosterState, labels, player_label
from .round_lock import RoundTeamLock

__all__ = [
    "AllocationEngine",
    "MembershipController",
    "RosterState",
    "RoundTeamLock",
    "labels",
    "player_label",
]
