"""
Minefield game module.

Provides the grid engine, power-up system and game session state machine,
plus a Gymnasium environment for headless play.
"""
from .cell import Cell, CellState, PowerupKind
from .board import Board, FlagResult, InvalidDimensions, RevealResult
from .config import (
    BoardConfig,
    GameConfig,
    PowerupConfig,
    PowerupTypeConfig,
    TimingConfig,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    load_config,
)
from .modifiers import InventoryItem, ModifierResult, ModifierSystem
from .session import GameSession, MoveResult, SessionState
from .environment import MinefieldEnv, render_ansi

__all__ = [
    "Cell",
    "CellState",
    "PowerupKind",
    "Board",
    "FlagResult",
    "InvalidDimensions",
    "RevealResult",
    "BoardConfig",
    "GameConfig",
    "PowerupConfig",
    "PowerupTypeConfig",
    "TimingConfig",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "load_config",
    "InventoryItem",
    "ModifierResult",
    "ModifierSystem",
    "GameSession",
    "MoveResult",
    "SessionState",
    "MinefieldEnv",
    "render_ansi",
]
