from .builder import GravestoneBuilder, GravestoneResult
from .safety import is_safe_block, is_safe_region
from .search import SafeSitePair, find_safe_site
from .transfer import (
    TransferResult,
    drop_player_inventory,
    transfer_player_inventory_to_chest,
    try_add_extra_items_to_chest,
)

__all__ = [
    "GravestoneBuilder",
    "GravestoneResult",
    "SafeSitePair",
    "TransferResult",
    "drop_player_inventory",
    "find_safe_site",
    "is_safe_block",
    "is_safe_region",
    "transfer_player_inventory_to_chest",
    "try_add_extra_items_to_chest",
]
