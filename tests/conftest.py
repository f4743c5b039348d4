import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from combat_logger.players import Player, PlayerDatabase  # noqa: E402
from combat_logger.scheduler import TickScheduler  # noqa: E402
from combat_logger.settings import CombatSettings  # noqa: E402
from combat_logger.world import blocks  # noqa: E402
from combat_logger.world.grid import BlockPos, Dimension, VoxelWorld  # noqa: E402

ALICE = 1001
BOB = 1002
CAROL = 1003  # operator


class RecordingMessenger:
    def __init__(self) -> None:
        self.sent: List[Tuple[int, str]] = []
        self.broadcasts: List[str] = []

    def send(self, identity: int, text: str) -> None:
        self.sent.append((identity, text))

    def broadcast(self, text: str) -> None:
        self.broadcasts.append(text)

    def texts_for(self, identity: int) -> List[str]:
        return [text for who, text in self.sent if who == identity]


class RecordingCommands:
    def __init__(self, fail: bool = False) -> None:
        self.executed: List[Tuple[str, Optional[int]]] = []
        self.fail = fail

    def execute(self, command: str, origin: Optional[int] = None) -> None:
        if self.fail:
            raise RuntimeError("command subsystem offline")
        self.executed.append((command, origin))


@pytest.fixture
def settings() -> CombatSettings:
    return CombatSettings(combat_time=5)


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def commands() -> RecordingCommands:
    return RecordingCommands()


@pytest.fixture
def scheduler() -> TickScheduler:
    return TickScheduler()


@pytest.fixture
def players() -> PlayerDatabase:
    db = PlayerDatabase()
    db.add(Player(ALICE, "Alice", position=(0.5, 64.0, 0.5)))
    db.add(Player(BOB, "Bob", position=(3.5, 64.0, 0.5), health=13.0))
    db.add(Player(CAROL, "Carol", position=(-3.5, 64.0, 0.5), is_operator=True))
    return db


@pytest.fixture
def world() -> VoxelWorld:
    """Open air with a stone floor at y=63 around the origin."""
    w = VoxelWorld()
    w.fill(BlockPos(-12, 63, -12), BlockPos(12, 63, 12), blocks.STONE)
    return w


@pytest.fixture
def worlds(world):
    return {Dimension.OVERWORLD: world}
