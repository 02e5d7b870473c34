"""
Pytest configuration and shared fixtures.
"""
import random
import pytest
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

# Add src and the project root (for main.py) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import (
    Board,
    BoardConfig,
    Cell,
    GameConfig,
    GameSession,
    PowerupConfig,
    PowerupKind,
    SessionState,
)


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_board(
    rows: int,
    cols: int,
    mines: Iterable[Tuple[int, int]],
    powerups: Optional[Dict[Tuple[int, int], PowerupKind]] = None,
) -> Board:
    """Create a board with mines at fixed positions and counts filled in."""
    mine_set = set(mines)
    board = Board.create(rows, cols, len(mine_set))
    for row, col in mine_set:
        board.get_cell(row, col).is_mine = True
    for cell in board.cells:
        if not cell.is_mine:
            cell.adjacent_mines = sum(
                1 for n in board.get_neighbors(cell.row, cell.col) if n.is_mine
            )
    for (row, col), kind in (powerups or {}).items():
        board.get_cell(row, col).powerup = kind
    board.mines_placed = True
    return board


def start_session(session: GameSession, board: Board) -> GameSession:
    """Put a prepared board into a session and mark it as playing."""
    session.board = board
    session.state = SessionState.PLAYING
    return session


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def make_board():
    """Factory for boards with fixed mine layouts."""
    return build_board


@pytest.fixture
def playing():
    """Factory that installs a prepared board into a session."""
    return start_session


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def default_board() -> Board:
    """Create a default 9x9 board with 10 mines."""
    return Board.create(9, 9, 10)


@pytest.fixture
def empty_board() -> Board:
    """Create a board with no mines for cascade testing."""
    return build_board(5, 5, [])


@pytest.fixture
def corner_mine_board() -> Board:
    """
    5x5 board with a single mine in the bottom-right corner.

        0 0 0 0 0
        0 0 0 0 0
        0 0 0 0 0
        0 0 0 1 1
        0 0 0 1 *
    """
    return build_board(5, 5, [(4, 4)])


@pytest.fixture
def three_board() -> Board:
    """
    4x4 board whose cell (1, 1) is a "3".

        * * * 1
        2 3 2 1
        0 0 0 0
        0 0 0 0
    """
    return build_board(4, 4, [(0, 0), (0, 1), (0, 2)])


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def no_powerup_config() -> GameConfig:
    """Default difficulties with power-ups switched off."""
    return GameConfig(powerups=PowerupConfig(enabled=False))


@pytest.fixture
def session(clock: FakeClock) -> GameSession:
    """Beginner session with a seeded random source and fake clock."""
    return GameSession(rng=random.Random(42), clock=clock)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def beginner_config() -> BoardConfig:
    """Beginner difficulty configuration."""
    return BoardConfig(9, 9, 10)


@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()
