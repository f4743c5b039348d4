from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class PlayerAttack:
    """Damage dealt directly (or via a projectile) by another player."""

    attacker: int


@dataclass(frozen=True)
class OtherCause:
    """Any non-player damage: fall, lava, mobs, the void, logging out."""

    cause: str = "unknown"


DamageSource = Union[PlayerAttack, OtherCause]

LOGOUT = OtherCause("logout")


def attacker_of(source: Optional[DamageSource]) -> Optional[int]:
    if isinstance(source, PlayerAttack):
        return source.attacker
    return None


__all__ = ["PlayerAttack", "OtherCause", "DamageSource", "LOGOUT", "attacker_of"]
