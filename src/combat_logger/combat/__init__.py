from .damage import LOGOUT, DamageSource, OtherCause, PlayerAttack, attacker_of
from .session import CombatSession
from .tracker import CombatTracker

__all__ = [
    "CombatSession",
    "CombatTracker",
    "DamageSource",
    "LOGOUT",
    "OtherCause",
    "PlayerAttack",
    "attacker_of",
]
