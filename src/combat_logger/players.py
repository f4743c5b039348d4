from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from .items import PlayerInventory
from .world.grid import BlockPos, Dimension

logger = logging.getLogger(__name__)


@dataclass
class Player:
    """Online player record supplied by the host.

    ``identity`` is the stable unique handle (an xuid on Bedrock servers).
    """

    identity: int
    name: str
    position: Tuple[float, float, float] = (0.0, 64.0, 0.0)
    dimension: Dimension = Dimension.OVERWORLD
    is_operator: bool = False
    health: float = 20.0
    absorption: float = 0.0
    inventory: PlayerInventory = field(default_factory=PlayerInventory)

    @property
    def block_pos(self) -> BlockPos:
        return BlockPos.from_vec(*self.position)


class PlayerDatabase:
    """Identity to online-player lookup."""

    def __init__(self) -> None:
        self._players: Dict[int, Player] = {}

    def add(self, player: Player) -> None:
        self._players[player.identity] = player
        logger.debug("Player %s (%d) joined", player.name, player.identity)

    def remove(self, identity: int) -> Optional[Player]:
        return self._players.pop(identity, None)

    def get(self, identity: int) -> Optional[Player]:
        return self._players.get(identity)

    def name_of(self, identity: int) -> str:
        player = self._players.get(identity)
        return player.name if player is not None else str(identity)

    def is_operator(self, identity: int) -> bool:
        player = self._players.get(identity)
        return bool(player and player.is_operator)

    def __contains__(self, identity: object) -> bool:
        return identity in self._players

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))

    def __len__(self) -> int:
        return len(self._players)


__all__ = ["Player", "PlayerDatabase"]
