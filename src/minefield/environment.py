"""
Gymnasium environment wrapper for minefield games.

Lets agents and scripted drivers play headless games through a standard
RL interface, and provides the text renderer used by the command line.
"""
import random
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import Board
from .cell import PowerupKind
from .config import GameConfig
from .session import GameSession, SessionState


# ============================================================================
# Text Rendering
# ============================================================================

_POWERUP_SYMBOLS = {
    PowerupKind.SHIELD: "S",
    PowerupKind.DETECTOR: "D",
    PowerupKind.FREEZE: "Z",
    PowerupKind.SAFE_REVEAL: "R",
}


def render_ansi(board: Board) -> str:
    """
    Render board as ASCII string.

    Legend: ``.`` hidden, ``F`` flagged, ``?`` questioned, ``*`` mine,
    ``X`` exploded mine, ``x`` wrong flag, power-up letters on revealed
    power-up cells, blank for zero.
    """
    lines = []
    for row in range(board.rows):
        symbols = []
        for col in range(board.cols):
            cell = board.get_cell(row, col)
            if cell.wrong_flag:
                symbols.append("x")
            elif cell.is_flagged:
                symbols.append("F")
            elif cell.is_questioned:
                symbols.append("?")
            elif not cell.is_revealed:
                symbols.append(".")
            elif cell.is_mine:
                symbols.append("X" if cell.exploded else "*")
            elif cell.powerup is not None:
                symbols.append(_POWERUP_SYMBOLS[cell.powerup])
            elif cell.adjacent_mines == 0:
                symbols.append(" ")
            else:
                symbols.append(str(cell.adjacent_mines))
        lines.append(" ".join(symbols))
    return "\n".join(lines)


# ============================================================================
# Minefield Environment
# ============================================================================

class MinefieldEnv(gym.Env):
    """
    Gymnasium environment for minefield games with power-ups.

    Observation:
        2D array where:
        - -1 = hidden or questioned cell
        - -2 = flagged cell
        - 0-8 = revealed cell with adjacent mine count
        - 9 = revealed mine (after a loss)

    Actions:
        Discrete action space of size rows * cols.
        Action i reveals the cell at (i // cols, i % cols). Collected
        power-ups stay in the session inventory; a shield is spent
        automatically on the next mine.

    Rewards:
        - +1 for revealing a safe cell
        - +10 for winning the game
        - -10 for hitting a mine
        - -1 when a shield absorbs a mine
        - -0.1 for invalid action (already revealed/flagged)
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        difficulty: str = "beginner",
        powerups_enabled: Optional[bool] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the environment.

        Args:
            config: Game configuration (default difficulties if omitted).
            difficulty: Difficulty name to play.
            powerups_enabled: Override of the configured power-up switch.
            render_mode: How to render the environment.
        """
        super().__init__()

        self.session = GameSession(
            config=config,
            difficulty=difficulty,
            powerups_enabled=powerups_enabled,
        )
        self.render_mode = render_mode
        self.rows = self.session.board.rows
        self.cols = self.session.board.cols

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(self.rows, self.cols),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(self.rows * self.cols)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        # Derive the game's random source from the env's seeded generator.
        self.session.rng = random.Random(int(self.np_random.integers(2**32)))
        self.session.reset()
        self._steps = 0

        return self.session.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Cell index to reveal (row * cols + col).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        row, col = divmod(int(action), self.cols)
        self._steps += 1

        reward = self._calculate_reward(row, col)

        observation = self.session.board.get_observation()
        terminated = self.session.is_over
        truncated = False

        return observation, reward, terminated, truncated, self._get_info()

    def _calculate_reward(self, row: int, col: int) -> float:
        """
        Reveal a cell and score the outcome.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            Reward value.
        """
        result = self.session.on_reveal(row, col)

        if not result.accepted:
            return -0.1
        if result.state == SessionState.WON:
            return 10.0
        if result.state == SessionState.LOST:
            return -10.0
        if result.shield_used:
            return -1.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        board = self.session.board
        modifiers = self.session.modifiers
        return {
            "steps": self._steps,
            "revealed": sum(1 for cell in board.cells if cell.is_revealed),
            "game_state": self.session.state.name,
            "valid_actions": len(board.get_hidden_positions()),
            "shield": modifiers.has_shield,
            "inventory": [item.kind.value for item in modifiers.inventory],
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return render_ansi(self.session.board)
        if self.render_mode == "human":
            print(render_ansi(self.session.board))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            int8 array where 1 = valid action, usable directly with
            ``action_space.sample(mask=...)``.
        """
        mask = np.zeros(self.action_space.n, dtype=np.int8)
        for row, col in self.session.board.get_hidden_positions():
            mask[row * self.cols + col] = 1
        return mask
