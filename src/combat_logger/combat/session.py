from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class CombatSession:
    """One player currently flagged in combat.

    ``remaining_seconds`` counts down once per decay tick and is reset to the
    full duration on renewed aggression. ``last_aggressor`` is the identity
    that most recently hit this player, if any.
    """

    identity: int
    remaining_seconds: int
    last_aggressor: Optional[int] = None


__all__ = ["CombatSession"]
