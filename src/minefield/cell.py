"""
Cell module for the minefield grid.

Represents individual cells on the board with their marking state
(hidden/revealed/flagged/questioned) and content (mine/number/power-up).
"""
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, Tuple


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible visual states of a cell."""

    HIDDEN = auto()
    REVEALED = auto()
    FLAGGED = auto()
    QUESTIONED = auto()


class PowerupKind(Enum):
    """Power-ups that can spawn on the board, keyed as in the config file."""

    SHIELD = "shield"
    DETECTOR = "detector"
    FREEZE = "freeze"
    SAFE_REVEAL = "safeReveal"


# Flag cycle: hidden -> flagged -> questioned -> hidden
_FLAG_CYCLE = {
    CellState.HIDDEN: CellState.FLAGGED,
    CellState.FLAGGED: CellState.QUESTIONED,
    CellState.QUESTIONED: CellState.HIDDEN,
}


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass(eq=False)
class Cell:
    """
    Represents a single cell in the minefield grid.

    Cells compare by identity: two cells are the same only if they are the
    same object on the same board.

    Attributes:
        row: Row index.
        col: Column index.
        index: Flat row-major index (row * cols + col).
        is_mine: Whether this cell contains a mine.
        adjacent_mines: Count of mines in neighboring cells (0-8).
        state: Current visual state.
        powerup: Power-up hidden under this cell, if any.
        wrong_flag: Set at game over on flagged cells that hold no mine.
        exploded: Set at game over on the mine that ended the game.
    """

    row: int = 0
    col: int = 0
    index: int = 0
    is_mine: bool = False
    adjacent_mines: int = 0
    state: CellState = CellState.HIDDEN
    powerup: Optional[PowerupKind] = None
    wrong_flag: bool = False
    exploded: bool = False

    def reveal(self) -> bool:
        """
        Reveal this cell.

        Questioned cells can be revealed; flagged cells cannot.

        Returns:
            True if cell was successfully revealed, False if already
            revealed or flagged.
        """
        if self.state in (CellState.REVEALED, CellState.FLAGGED):
            return False
        self.state = CellState.REVEALED
        return True

    def toggle_flag(self) -> bool:
        """
        Advance the flag cycle on this cell.

        Returns:
            True if the marking changed, False if cell is revealed.
        """
        if self.state == CellState.REVEALED:
            return False
        self.state = _FLAG_CYCLE[self.state]
        return True

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden and unmarked."""
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        """Check if cell is revealed."""
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED

    @property
    def is_questioned(self) -> bool:
        """Check if cell carries a question mark."""
        return self.state == CellState.QUESTIONED

    @property
    def position(self) -> Tuple[int, int]:
        """(row, col) of this cell."""
        return self.row, self.col

    def to_observation(self) -> int:
        """
        Convert cell to observation value.

        Returns:
            -1: Hidden or questioned cell
            -2: Flagged cell
            0-8: Revealed cell with adjacent mine count
            9: Revealed mine (game over state)
        """
        if self.state == CellState.FLAGGED:
            return -2
        if self.state != CellState.REVEALED:
            return -1
        if self.is_mine:
            return 9
        return self.adjacent_mines
