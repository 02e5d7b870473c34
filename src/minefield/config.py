"""
Configuration for minefield games.

Board sizes per difficulty, power-up spawn and effect settings, and timer
limits. Values can be loaded from a JSON file using the same camelCase
layout as the browser game's ``config.json``.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .cell import PowerupKind

logger = logging.getLogger(__name__)


# ============================================================================
# Board Configuration
# ============================================================================

@dataclass
class BoardConfig:
    """
    Board size and mine count for one difficulty.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        mines: Requested number of mines. Clamped at placement time if
            the board is too small to hold them outside the safe zone.
    """

    rows: int = 9
    cols: int = 9
    mines: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.rows < 1 or self.cols < 1:
            raise ValueError("Board dimensions must be positive")
        if self.mines < 0:
            raise ValueError("Number of mines cannot be negative")


# Preset difficulty levels
BEGINNER = BoardConfig(9, 9, 10)
INTERMEDIATE = BoardConfig(16, 16, 40)
EXPERT = BoardConfig(16, 30, 99)


def default_difficulties() -> Dict[str, BoardConfig]:
    """Fresh mapping of the three standard difficulties."""
    return {
        "beginner": BoardConfig(BEGINNER.rows, BEGINNER.cols, BEGINNER.mines),
        "intermediate": BoardConfig(
            INTERMEDIATE.rows, INTERMEDIATE.cols, INTERMEDIATE.mines
        ),
        "expert": BoardConfig(EXPERT.rows, EXPERT.cols, EXPERT.mines),
    }


# ============================================================================
# Power-up Configuration
# ============================================================================

@dataclass
class PowerupTypeConfig:
    """
    Settings for a single power-up kind.

    Attributes:
        name: Display name.
        duration_ms: Effect duration for timed power-ups (detector, freeze).
        cell_count: Number of cells uncovered by safe-reveal.
    """

    name: str = ""
    duration_ms: int = 0
    cell_count: int = 0

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise ValueError("Power-up duration cannot be negative")
        if self.cell_count < 0:
            raise ValueError("Power-up cell count cannot be negative")


def default_powerup_types() -> Dict[PowerupKind, PowerupTypeConfig]:
    """Fresh mapping of the standard power-up kinds."""
    return {
        PowerupKind.SHIELD: PowerupTypeConfig("Shield"),
        PowerupKind.DETECTOR: PowerupTypeConfig("Detector", duration_ms=3000),
        PowerupKind.FREEZE: PowerupTypeConfig("Time Freeze", duration_ms=15000),
        PowerupKind.SAFE_REVEAL: PowerupTypeConfig("Safe Reveal", cell_count=3),
    }


@dataclass
class PowerupConfig:
    """
    Power-up spawning configuration.

    Attributes:
        enabled: Whether power-ups spawn at all.
        spawn_chance: Per-cell probability of a power-up on numbered cells.
        types: Settings per kind. Only kinds listed here can spawn.
    """

    enabled: bool = True
    spawn_chance: float = 0.05
    types: Dict[PowerupKind, PowerupTypeConfig] = field(
        default_factory=default_powerup_types
    )

    def __post_init__(self) -> None:
        if not 0.0 <= self.spawn_chance <= 1.0:
            raise ValueError("Spawn chance must be between 0 and 1")

    @property
    def kinds(self) -> List[PowerupKind]:
        """Configured kinds in declaration order."""
        return list(self.types)

    def settings_for(self, kind: PowerupKind) -> PowerupTypeConfig:
        """Settings for a kind, falling back to the built-in defaults."""
        if kind in self.types:
            return self.types[kind]
        return default_powerup_types()[kind]


# ============================================================================
# Timing Configuration
# ============================================================================

@dataclass
class TimingConfig:
    """Timer limits."""

    max_timer: int = 999

    def __post_init__(self) -> None:
        if self.max_timer < 0:
            raise ValueError("Maximum timer cannot be negative")


# ============================================================================
# Game Configuration
# ============================================================================

@dataclass
class GameConfig:
    """
    Complete configuration consumed by a game session.

    Attributes:
        difficulties: Board settings by difficulty name.
        powerups: Power-up settings.
        timing: Timer settings.
    """

    difficulties: Dict[str, BoardConfig] = field(
        default_factory=default_difficulties
    )
    powerups: PowerupConfig = field(default_factory=PowerupConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)

    def board_config(self, difficulty: str) -> BoardConfig:
        """Look up the board settings for a difficulty name."""
        try:
            return self.difficulties[difficulty]
        except KeyError:
            raise ValueError(f"Unknown difficulty: {difficulty}") from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        """
        Build a configuration from the JSON layout of ``config.json``.

        Missing sections keep their defaults. Unknown power-up kinds and
        presentation-only sections (sound, long-press timing) are ignored.

        Args:
            data: Parsed JSON object.

        Returns:
            New configuration.

        Raises:
            ValueError: If the data is not shaped like ``config.json`` or
                holds invalid values.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration must be a JSON object, got {type(data).__name__}"
            )

        config = cls()
        try:
            difficulties = data.get("difficulties")
            if difficulties:
                config.difficulties = {
                    name: BoardConfig(
                        rows=int(values["rows"]),
                        cols=int(values["cols"]),
                        mines=int(values["mines"]),
                    )
                    for name, values in difficulties.items()
                }

            powerups = data.get("powerups")
            if powerups:
                types = config.powerups.types
                if "types" in powerups:
                    types = _parse_powerup_types(powerups["types"])
                config.powerups = PowerupConfig(
                    enabled=bool(powerups.get("enabled", True)),
                    spawn_chance=float(powerups.get("spawnChance", 0.05)),
                    types=types,
                )

            timing = data.get("timing")
            if timing and "maxTimer" in timing:
                config.timing = TimingConfig(max_timer=int(timing["maxTimer"]))
        except KeyError as exc:
            raise ValueError(f"Missing configuration key {exc}") from exc
        except (AttributeError, TypeError) as exc:
            raise ValueError(f"Malformed configuration: {exc}") from exc

        return config


def _parse_powerup_types(
    raw: Dict[str, Dict[str, Any]]
) -> Dict[PowerupKind, PowerupTypeConfig]:
    """Convert the ``types`` section, skipping kinds this engine lacks."""
    known = {kind.value: kind for kind in PowerupKind}
    types = {}
    for key, values in raw.items():
        kind = known.get(key)
        if kind is None:
            logger.warning("Ignoring unknown power-up kind %r", key)
            continue
        types[kind] = PowerupTypeConfig(
            name=str(values.get("name", "")),
            duration_ms=int(values.get("duration", 0)),
            cell_count=int(values.get("cellCount", 0)),
        )
    return types


def load_config(path: Optional[Union[str, Path]] = None) -> GameConfig:
    """
    Load configuration from a JSON file.

    Falls back to the defaults when no path is given or the file cannot
    be read or parsed.

    Args:
        path: Location of the JSON file.

    Returns:
        Loaded or default configuration.

    Raises:
        ValueError: If the file parses but is not a valid configuration.
    """
    if path is None:
        return GameConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not load %s (%s), using defaults", path, exc)
        return GameConfig()

    return GameConfig.from_dict(data)
