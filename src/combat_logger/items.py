from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

CHEST_CAPACITY = 27
MAIN_INVENTORY_SIZE = 36
ARMOR_SLOTS = 4
OFFHAND_SLOTS = 1


@dataclass(frozen=True)
class ItemStack:
    """An immutable item stack as seen by the host.

    Equality covers every identity field, so a moved stack compares equal to
    its source.
    """

    item_id: int
    aux: int = 0
    count: int = 1
    custom_name: Optional[str] = None
    lore: Tuple[str, ...] = ()
    enchantments: Tuple[Tuple[int, int], ...] = ()

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ValueError("count must be positive")


class ItemRegistry:
    """Lookup of item and enchantment ids known to the host engine.

    An empty registry (no ids supplied) accepts everything.
    """

    def __init__(self, item_ids: Iterable[int] = (), enchantment_ids: Iterable[int] = ()) -> None:
        self._items: Set[int] = set(item_ids)
        self._enchantments: Set[int] = set(enchantment_ids)

    def is_known_item(self, item_id: int) -> bool:
        return not self._items or item_id in self._items

    def is_known_enchantment(self, enchantment_id: int) -> bool:
        return not self._enchantments or enchantment_id in self._enchantments


class Container:
    """Fixed-capacity slot container (a chest)."""

    def __init__(self, capacity: int = CHEST_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._slots: List[Optional[ItemStack]] = [None] * capacity

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> List[Optional[ItemStack]]:
        return list(self._slots)

    def get(self, index: int) -> Optional[ItemStack]:
        return self._slots[index]

    def set(self, index: int, stack: Optional[ItemStack]) -> None:
        self._slots[index] = stack

    def first_empty_slot(self) -> Optional[int]:
        for i, stack in enumerate(self._slots):
            if stack is None:
                return i
        return None

    def free_slots(self) -> int:
        return sum(1 for s in self._slots if s is None)

    def is_full(self) -> bool:
        return self.first_empty_slot() is None

    def add(self, stack: ItemStack) -> bool:
        """Place ``stack`` in the first empty slot. Returns False when full."""
        index = self.first_empty_slot()
        if index is None:
            logger.debug("Container full: cannot add item %s", stack.item_id)
            return False
        self._slots[index] = stack
        return True

    def items(self) -> List[ItemStack]:
        return [s for s in self._slots if s is not None]

    def total_count(self) -> int:
        return sum(s.count for s in self.items())


@dataclass
class PlayerInventory:
    """A player's slots: main inventory, armor and offhand.

    :meth:`iter_slots` walks them in that fixed order; it is the order used
    when moving items out of the inventory.
    """

    main: List[Optional[ItemStack]] = field(default_factory=lambda: [None] * MAIN_INVENTORY_SIZE)
    armor: List[Optional[ItemStack]] = field(default_factory=lambda: [None] * ARMOR_SLOTS)
    offhand: List[Optional[ItemStack]] = field(default_factory=lambda: [None] * OFFHAND_SLOTS)

    def _section(self, name: str) -> List[Optional[ItemStack]]:
        if name not in ("main", "armor", "offhand"):
            raise KeyError(name)
        return getattr(self, name)

    def iter_slots(self) -> Iterator[Tuple[str, int, Optional[ItemStack]]]:
        for name in ("main", "armor", "offhand"):
            for i, stack in enumerate(self._section(name)):
                yield name, i, stack

    def set_slot(self, section: str, index: int, stack: Optional[ItemStack]) -> None:
        self._section(section)[index] = stack

    def clear_slot(self, section: str, index: int) -> None:
        self.set_slot(section, index, None)

    def occupied(self) -> List[ItemStack]:
        return [stack for _, _, stack in self.iter_slots() if stack is not None]

    def is_empty(self) -> bool:
        return not self.occupied()

    def total_count(self) -> int:
        return sum(s.count for s in self.occupied())


__all__ = [
    "CHEST_CAPACITY",
    "ItemStack",
    "ItemRegistry",
    "Container",
    "PlayerInventory",
]
