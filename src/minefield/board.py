"""
Board module for the minefield grid engine.

Implements the cell grid with safe-zone mine placement, power-up spawning,
iterative cascade reveal, chord reveal, flag cycling and win detection.
The board knows nothing about time, input devices or presentation; every
operation returns a plain result record and never raises for bad input.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

import numpy as np

from .cell import Cell, CellState, PowerupKind
from .config import PowerupConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Errors and Results
# ============================================================================

class InvalidDimensions(ValueError):
    """Raised when a board is created with a non-positive size."""


@dataclass
class RevealResult:
    """
    Outcome of a reveal or chord.

    Attributes:
        revealed: Cells revealed by the call, each exactly once.
        exploded: Mines uncovered by the call, in encounter order.
        powerups: Power-ups uncovered by the call, in encounter order.
    """

    revealed: List[Cell] = field(default_factory=list)
    exploded: List[Cell] = field(default_factory=list)
    powerups: List[PowerupKind] = field(default_factory=list)

    @property
    def hit_mine(self) -> bool:
        """Whether any mine was uncovered."""
        return bool(self.exploded)

    @property
    def exploded_cell(self) -> Optional[Cell]:
        """First mine uncovered, if any."""
        return self.exploded[0] if self.exploded else None

    @property
    def powerup(self) -> Optional[PowerupKind]:
        """First power-up uncovered, if any."""
        return self.powerups[0] if self.powerups else None

    def merge(self, other: "RevealResult") -> None:
        """Append another result onto this one."""
        self.revealed.extend(other.revealed)
        self.exploded.extend(other.exploded)
        self.powerups.extend(other.powerups)


@dataclass
class FlagResult:
    """Outcome of a flag toggle."""

    changed: bool = False
    cell: Optional[Cell] = None


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Minefield grid.

    Manages the row-major list of cells, mine and power-up placement,
    revealing logic and the win condition. Game lifecycle (idle, playing,
    won, lost) lives in the session, not here.
    """

    rows: int = 9
    cols: int = 9
    mine_count: int = 10
    powerup_config: Optional[PowerupConfig] = None
    cells: List[Cell] = field(default_factory=list, repr=False)
    mines_placed: bool = False

    def __post_init__(self) -> None:
        """Validate dimensions and allocate the grid."""
        if self.rows <= 0 or self.cols <= 0:
            raise InvalidDimensions(
                f"Board dimensions must be positive, got {self.rows}x{self.cols}"
            )
        if not self.cells:
            self._init_grid()

    @classmethod
    def create(
        cls,
        rows: int,
        cols: int,
        mine_count: int,
        powerup_config: Optional[PowerupConfig] = None,
    ) -> "Board":
        """
        Create an empty board.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            mine_count: Mines to place on the first reveal.
            powerup_config: Power-up settings, or None for no power-ups.

        Returns:
            Board with every cell hidden and no mines.

        Raises:
            InvalidDimensions: If rows or cols is not positive.
        """
        return cls(
            rows=rows,
            cols=cols,
            mine_count=mine_count,
            powerup_config=powerup_config,
        )

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create row-major list of hidden cells."""
        self.cells = [
            Cell(row=row, col=col, index=row * self.cols + col)
            for row in range(self.rows)
            for col in range(self.cols)
        ]

    def place_mines(
        self,
        safe_row: int,
        safe_col: int,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Place mines randomly, keeping the safe zone clear.

        The safe zone is the safe cell and its existing neighbors. If the
        board cannot hold every requested mine outside the safe zone, the
        mine count is clamped to the available cells. Does nothing if mines
        are already placed.

        Args:
            safe_row: Row of the first reveal.
            safe_col: Column of the first reveal.
            rng: Random source; a fresh unseeded one if omitted.
        """
        if self.mines_placed:
            return
        if rng is None:
            rng = random.Random()

        safe_zone = self._safe_zone(safe_row, safe_col)
        candidates = [
            index for index in range(len(self.cells)) if index not in safe_zone
        ]
        rng.shuffle(candidates)
        mine_total = min(max(self.mine_count, 0), len(candidates))
        for index in candidates[:mine_total]:
            self.cells[index].is_mine = True

        self._calculate_adjacent_mines()

        if self.powerup_config is not None and self.powerup_config.enabled:
            self._place_powerups(rng)

        self.mines_placed = True
        logger.debug(
            "Placed %d of %d requested mines around safe cell (%d, %d)",
            mine_total, self.mine_count, safe_row, safe_col,
        )

    def _safe_zone(self, row: int, col: int) -> Set[int]:
        """Indices of a cell and its neighbors."""
        zone = {cell.index for cell in self.get_neighbors(row, col)}
        if self._is_valid_position(row, col):
            zone.add(row * self.cols + col)
        return zone

    def _calculate_adjacent_mines(self) -> None:
        """Calculate adjacent mine counts for all non-mine cells."""
        for cell in self.cells:
            if not cell.is_mine:
                cell.adjacent_mines = self._count_adjacent_mines(
                    cell.row, cell.col
                )

    def _count_adjacent_mines(self, row: int, col: int) -> int:
        """Count mines adjacent to a specific cell."""
        return sum(1 for n in self.get_neighbors(row, col) if n.is_mine)

    def _place_powerups(self, rng: random.Random) -> None:
        """Spawn power-ups independently on numbered safe cells."""
        kinds = self.powerup_config.kinds
        if not kinds:
            return
        chance = self.powerup_config.spawn_chance
        spawned = 0
        for cell in self.cells:
            if cell.is_mine or cell.adjacent_mines == 0:
                continue
            if rng.random() < chance:
                cell.powerup = rng.choice(kinds)
                spawned += 1
        logger.debug("Spawned %d power-ups", spawned)

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        if not self._is_valid_position(row, col):
            return None
        return self.cells[row * self.cols + col]

    def get_neighbors(self, row: int, col: int) -> List[Cell]:
        """
        Get valid neighboring cells.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            Up to eight in-bounds neighbors.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                cell = self.get_cell(row + delta_row, col + delta_col)
                if cell is not None:
                    neighbors.append(cell)
        return neighbors

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reveal_cell(self, row: int, col: int) -> RevealResult:
        """
        Reveal a cell, cascading through zero cells.

        Uses an explicit work list rather than recursion. A mine stops the
        call at once. A power-up cell is revealed and also stops the call,
        so pickups always end a cascade.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            Revealed cells plus any mine or power-up uncovered. Empty if
            the cell is out of bounds, revealed or flagged.
        """
        result = RevealResult()
        start = self.get_cell(row, col)
        if start is None or start.is_revealed or start.is_flagged:
            return result

        pending = [start]
        while pending:
            cell = pending.pop()
            if not cell.reveal():
                continue
            result.revealed.append(cell)

            if cell.is_mine:
                result.exploded.append(cell)
                return result

            if cell.powerup is not None:
                result.powerups.append(cell.powerup)
                return result

            if cell.adjacent_mines == 0:
                for neighbor in self.get_neighbors(cell.row, cell.col):
                    if (
                        not neighbor.is_revealed
                        and not neighbor.is_flagged
                        and not neighbor.is_mine
                    ):
                        pending.append(neighbor)

        return result

    def chord_reveal(self, row: int, col: int) -> RevealResult:
        """
        Chord action: reveal all unflagged neighbors if flag count matches.

        Every qualifying neighbor is revealed even after a mine is hit, so
        a chord can explode one neighbor and uncover power-ups in others.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            Merged result of the neighbor reveals, or an empty result if
            the chord is not allowed.
        """
        result = RevealResult()
        if not self._can_chord(row, col):
            return result

        for neighbor in self.get_neighbors(row, col):
            if not neighbor.is_revealed and not neighbor.is_flagged:
                result.merge(self.reveal_cell(neighbor.row, neighbor.col))
        return result

    def _can_chord(self, row: int, col: int) -> bool:
        """Check if chord action is valid."""
        cell = self.get_cell(row, col)
        if cell is None:
            return False
        if not cell.is_revealed or cell.adjacent_mines == 0:
            return False
        return self._count_adjacent_flags(row, col) == cell.adjacent_mines

    def _count_adjacent_flags(self, row: int, col: int) -> int:
        """Count flagged cells adjacent to position."""
        return sum(1 for n in self.get_neighbors(row, col) if n.is_flagged)

    def toggle_flag(self, row: int, col: int) -> FlagResult:
        """
        Cycle a cell through unmarked, flagged and questioned.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            Whether the marking changed, with the cell for re-rendering.
        """
        cell = self.get_cell(row, col)
        if cell is None or not cell.toggle_flag():
            return FlagResult()
        return FlagResult(changed=True, cell=cell)

    def check_win(self) -> bool:
        """Check if all non-mine cells are revealed."""
        return all(cell.is_mine or cell.is_revealed for cell in self.cells)

    def reveal_all_mines(self) -> List[Cell]:
        """
        Reveal unflagged mines and mark wrong flags for game over display.

        Returns:
            Every cell whose display changed.
        """
        affected = []
        for cell in self.cells:
            if cell.is_mine and not cell.is_flagged:
                cell.state = CellState.REVEALED
                affected.append(cell)
            elif not cell.is_mine and cell.is_flagged:
                cell.wrong_flag = True
                affected.append(cell)
        return affected

    def flag_all_mines(self) -> List[Cell]:
        """
        Flag every unflagged mine for the victory display.

        Returns:
            Cells that were flagged.
        """
        flagged = []
        for cell in self.cells:
            if cell.is_mine and not cell.is_flagged:
                cell.state = CellState.FLAGGED
                flagged.append(cell)
        return flagged

    def get_random_safe_cell(
        self, rng: Optional[random.Random] = None
    ) -> Optional[Cell]:
        """Uniformly pick an unrevealed, unflagged non-mine cell."""
        candidates = [
            cell for cell in self.cells
            if not cell.is_mine and not cell.is_revealed and not cell.is_flagged
        ]
        return _choose(candidates, rng)

    def get_random_unflagged_mine(
        self, rng: Optional[random.Random] = None
    ) -> Optional[Cell]:
        """Uniformly pick an unrevealed, unflagged mine."""
        candidates = [
            cell for cell in self.cells
            if cell.is_mine and not cell.is_revealed and not cell.is_flagged
        ]
        return _choose(candidates, rng)

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def flag_count(self) -> int:
        """Number of flagged cells."""
        return sum(1 for cell in self.cells if cell.is_flagged)

    @property
    def mine_positions(self) -> List[Tuple[int, int]]:
        """(row, col) of every mine."""
        return [cell.position for cell in self.cells if cell.is_mine]

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array.

        Returns:
            2D numpy array where:
                -1 = hidden or questioned
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        values = [cell.to_observation() for cell in self.cells]
        return np.array(values, dtype=np.int8).reshape(self.rows, self.cols)

    def get_hidden_positions(self) -> List[Tuple[int, int]]:
        """
        Get list of cells that can still be revealed.

        Returns:
            List of (row, col) positions that are neither revealed nor
            flagged.
        """
        return [
            cell.position for cell in self.cells
            if not cell.is_revealed and not cell.is_flagged
        ]


def _choose(cells: List[Cell], rng: Optional[random.Random]) -> Optional[Cell]:
    """Uniform choice, or None for an empty list."""
    if not cells:
        return None
    if rng is None:
        rng = random.Random()
    return rng.choice(cells)
