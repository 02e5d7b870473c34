"""
Game session state machine.

Ties input events (reveal, flag, chord, use power-up, clock tick) to the
board and the modifier system, and owns the idle/playing/won/lost
lifecycle and the elapsed-time counter.
"""
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from .board import Board, RevealResult
from .cell import Cell, CellState, PowerupKind
from .config import GameConfig
from .modifiers import (
    Clock,
    FreezeListener,
    InventoryListener,
    ModifierSystem,
    ShieldListener,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class SessionState(Enum):
    """Lifecycle states of a game session."""

    IDLE = auto()
    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass
class MoveResult:
    """
    Outcome of one input event, for the presentation layer.

    Attributes:
        accepted: False if the event was ignored.
        cells: Cells whose display changed, in the order they changed.
        hit_mine: Whether a mine was uncovered.
        exploded_cell: Mine that ended the game, if any.
        shield_used: Whether a shield absorbed an explosion.
        powerups: Power-ups collected by this event.
        detected: Mine highlighted by a detector.
        state: Session state after the event.
    """

    accepted: bool = False
    cells: List[Cell] = field(default_factory=list)
    hit_mine: bool = False
    exploded_cell: Optional[Cell] = None
    shield_used: bool = False
    powerups: List[PowerupKind] = field(default_factory=list)
    detected: Optional[Cell] = None
    state: SessionState = SessionState.IDLE

    @property
    def game_over(self) -> bool:
        """Whether the event ended the game."""
        return self.state in (SessionState.WON, SessionState.LOST)


# ============================================================================
# Game Session
# ============================================================================

class GameSession:
    """
    One player's game.

    The session exclusively owns its board and modifier system; both are
    replaced on ``reset``. Every public call holds the session lock, so a
    threaded host may share a session between threads.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        difficulty: str = "beginner",
        powerups_enabled: Optional[bool] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = time.monotonic,
        on_inventory_change: Optional[InventoryListener] = None,
        on_shield_change: Optional[ShieldListener] = None,
        on_freeze_change: Optional[FreezeListener] = None,
    ) -> None:
        """
        Initialize the session in the idle state.

        Args:
            config: Game configuration (defaults if omitted).
            difficulty: Name of the difficulty in ``config.difficulties``.
            powerups_enabled: Override of ``config.powerups.enabled``.
            rng: Random source for placement and power-up effects.
            clock: Returns the current time in seconds.
            on_inventory_change: Forwarded to each modifier system.
            on_shield_change: Forwarded to each modifier system.
            on_freeze_change: Forwarded to each modifier system.

        Raises:
            ValueError: If the difficulty is unknown.
        """
        self.config = config or GameConfig()
        self.powerups_enabled = (
            self.config.powerups.enabled
            if powerups_enabled is None
            else powerups_enabled
        )
        self.rng = rng or random.Random()
        self.clock = clock
        self._listeners = {
            "on_inventory_change": on_inventory_change,
            "on_shield_change": on_shield_change,
            "on_freeze_change": on_freeze_change,
        }
        self._lock = threading.RLock()

        self.difficulty = difficulty
        self.board: Board
        self.modifiers: ModifierSystem
        self.state = SessionState.IDLE
        self.elapsed_seconds = 0
        self.reset(difficulty)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def reset(self, difficulty: Optional[str] = None) -> None:
        """
        Start a new game with a fresh board and empty inventory.

        Args:
            difficulty: New difficulty name; keeps the current one if omitted.

        Raises:
            ValueError: If the difficulty is unknown.
        """
        with self._lock:
            if difficulty is not None:
                board_config = self.config.board_config(difficulty)
                self.difficulty = difficulty
            else:
                board_config = self.config.board_config(self.difficulty)

            powerup_config = self.config.powerups if self.powerups_enabled else None
            self.board = Board.create(
                board_config.rows,
                board_config.cols,
                board_config.mines,
                powerup_config,
            )
            self.modifiers = ModifierSystem(
                self.config.powerups,
                clock=self.clock,
                rng=self.rng,
                **self._listeners,
            )
            self.state = SessionState.IDLE
            self.elapsed_seconds = 0
            # Listeners still hold the previous game's inventory and shield.
            self.modifiers.announce()
            logger.debug(
                "New %s game: %dx%d, %d mines",
                self.difficulty, board_config.rows, board_config.cols,
                board_config.mines,
            )

    @property
    def is_over(self) -> bool:
        """Check if the game has been won or lost."""
        return self.state in (SessionState.WON, SessionState.LOST)

    @property
    def mines_remaining(self) -> int:
        """Mine count minus flags placed, for the mine counter."""
        if self.board.mines_placed:
            mines = len(self.board.mine_positions)
        else:
            mines = self.board.mine_count
        return mines - self.board.flag_count

    # ========================================================================
    # Input Events
    # ========================================================================

    def on_reveal(self, row: int, col: int) -> MoveResult:
        """
        Reveal a cell.

        The first accepted reveal places the mines around it and starts
        the game.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            What changed.
        """
        with self._lock:
            if self.is_over:
                return self._ignored()
            cell = self.board.get_cell(row, col)
            if cell is None or cell.is_revealed or cell.is_flagged:
                return self._ignored()

            if not self.board.mines_placed:
                self.board.place_mines(row, col, self.rng)
                self._transition(SessionState.PLAYING)

            return self._resolve(self.board.reveal_cell(row, col))

    def on_flag(self, row: int, col: int) -> MoveResult:
        """
        Cycle the flag marking on a cell.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            What changed.
        """
        with self._lock:
            if self.is_over or not self.board.mines_placed:
                return self._ignored()
            flag = self.board.toggle_flag(row, col)
            if not flag.changed:
                return self._ignored()
            return MoveResult(accepted=True, cells=[flag.cell], state=self.state)

    def on_chord(self, row: int, col: int) -> MoveResult:
        """
        Chord a revealed number whose flags are all placed.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            What changed.
        """
        with self._lock:
            if self.is_over or not self.board.mines_placed:
                return self._ignored()
            reveal = self.board.chord_reveal(row, col)
            if not reveal.revealed:
                return self._ignored()
            return self._resolve(reveal)

    def on_use_modifier(self, kind: PowerupKind) -> MoveResult:
        """
        Use a power-up from the inventory.

        Args:
            kind: Power-up to use.

        Returns:
            What changed; not accepted if the game is not running or the
            inventory holds no such power-up.
        """
        with self._lock:
            if self.state != SessionState.PLAYING:
                return self._ignored()
            effect = self.modifiers.use(kind, self.board)
            if not effect.used:
                return self._ignored()

            result = MoveResult(
                accepted=True,
                cells=list(effect.revealed),
                detected=effect.detected,
            )
            self._collect(effect.powerups, result)
            if effect.revealed and self.board.check_win():
                self._win(result)
            result.state = self.state
            return result

    def tick(self) -> None:
        """Advance the timer by one second unless frozen or not playing."""
        with self._lock:
            if self.state != SessionState.PLAYING:
                return
            if self.modifiers.is_timer_frozen():
                return
            self.elapsed_seconds = min(
                self.elapsed_seconds + 1, self.config.timing.max_timer
            )

    # ========================================================================
    # Outcome Handling (Low-level)
    # ========================================================================

    def _resolve(self, reveal: RevealResult) -> MoveResult:
        """Apply shield, power-up, loss and win rules to a reveal."""
        result = MoveResult(
            accepted=True,
            cells=list(reveal.revealed),
            hit_mine=reveal.hit_mine,
        )

        if reveal.hit_mine:
            shielded = self.modifiers.consume_shield()
            result.shield_used = shielded
            if shielded:
                absorbed = reveal.exploded[0]
                absorbed.state = CellState.FLAGGED
                logger.debug("Shield absorbed mine at %s", absorbed.position)
            if not shielded or len(reveal.exploded) > 1:
                exploded = reveal.exploded[1] if shielded else reveal.exploded[0]
                self._lose(exploded, result)
                result.state = self.state
                return result

        self._collect(reveal.powerups, result)
        if self.board.check_win():
            self._win(result)
        result.state = self.state
        return result

    def _collect(self, powerups: List[PowerupKind], result: MoveResult) -> None:
        for kind in powerups:
            self.modifiers.collect(kind)
            result.powerups.append(kind)

    def _lose(self, exploded: Cell, result: MoveResult) -> None:
        exploded.exploded = True
        result.exploded_cell = exploded
        self._transition(SessionState.LOST)
        for cell in self.board.reveal_all_mines():
            if cell not in result.cells:
                result.cells.append(cell)

    def _win(self, result: MoveResult) -> None:
        self._transition(SessionState.WON)
        result.cells.extend(self.board.flag_all_mines())

    def _transition(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self.state.name, state.name)
        self.state = state

    def _ignored(self) -> MoveResult:
        return MoveResult(state=self.state)
