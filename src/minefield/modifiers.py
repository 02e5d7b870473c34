"""
Modifier (power-up) system.

Tracks the power-up inventory and the timed effects layered on top of a
board: shield, freeze, detector and safe-reveal. Timed effects store an
expiry timestamp taken from an injected clock and are checked lazily, so
no background timers are needed.
"""
import itertools
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .board import Board
from .cell import Cell, PowerupKind
from .config import PowerupConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
InventoryListener = Callable[[List["InventoryItem"]], None]
ShieldListener = Callable[[bool], None]
FreezeListener = Callable[[bool, int], None]


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class InventoryItem:
    """A collected power-up waiting to be used."""

    kind: PowerupKind
    id: int


@dataclass
class ModifierResult:
    """
    Outcome of using a power-up.

    Attributes:
        used: Whether a matching item was found and consumed.
        kind: Kind that was requested.
        revealed: Cells revealed by safe-reveal.
        powerups: Power-ups uncovered by safe-reveal.
        detected: Mine highlighted by the detector.
    """

    used: bool = False
    kind: Optional[PowerupKind] = None
    revealed: List[Cell] = field(default_factory=list)
    powerups: List[PowerupKind] = field(default_factory=list)
    detected: Optional[Cell] = None


# ============================================================================
# Modifier System
# ============================================================================

class ModifierSystem:
    """
    Power-up inventory and effect state for one game.

    Shield is never inventoried: collecting it arms it at once. Detector,
    freeze and safe-reveal go into the inventory until used.
    """

    def __init__(
        self,
        config: Optional[PowerupConfig] = None,
        clock: Clock = time.monotonic,
        rng: Optional[random.Random] = None,
        on_inventory_change: Optional[InventoryListener] = None,
        on_shield_change: Optional[ShieldListener] = None,
        on_freeze_change: Optional[FreezeListener] = None,
    ) -> None:
        """
        Initialize the modifier system.

        Args:
            config: Power-up settings (durations, safe-reveal cell count).
            clock: Returns the current time in seconds.
            rng: Random source for detector and safe-reveal picks.
            on_inventory_change: Called with a copy of the inventory.
            on_shield_change: Called with the new shield state.
            on_freeze_change: Called with the freeze state and duration.
        """
        self.config = config or PowerupConfig()
        self.clock = clock
        self.rng = rng or random.Random()
        self.on_inventory_change = on_inventory_change
        self.on_shield_change = on_shield_change
        self.on_freeze_change = on_freeze_change

        self._inventory: List[InventoryItem] = []
        self._ids = itertools.count(1)
        self._shield_active = False
        self._freeze_active = False
        self._freeze_expires_at = 0.0
        self._detected: Optional[Cell] = None
        self._detector_expires_at = 0.0

    # ========================================================================
    # Inventory
    # ========================================================================

    def collect(self, kind: PowerupKind) -> None:
        """
        Collect a power-up.

        Args:
            kind: Power-up uncovered on the board.
        """
        if kind == PowerupKind.SHIELD:
            self._set_shield(True)
            return

        self._inventory.append(InventoryItem(kind, next(self._ids)))
        logger.debug("Collected %s", kind.value)
        self._notify_inventory()

    @property
    def inventory(self) -> List[InventoryItem]:
        """Copy of the current inventory."""
        return list(self._inventory)

    def has(self, kind: PowerupKind) -> bool:
        """Check if the inventory holds a power-up of this kind."""
        return any(item.kind == kind for item in self._inventory)

    def count(self, kind: PowerupKind) -> int:
        """Number of inventory items of this kind."""
        return sum(1 for item in self._inventory if item.kind == kind)

    def use(self, kind: PowerupKind, board: Board) -> ModifierResult:
        """
        Use the first inventory item of a kind.

        Args:
            kind: Power-up to use.
            board: Board the effect applies to.

        Returns:
            Result describing the effect; ``used`` is False if the
            inventory held no such item.
        """
        position = next(
            (i for i, item in enumerate(self._inventory) if item.kind == kind),
            None,
        )
        if position is None:
            return ModifierResult(kind=kind)

        del self._inventory[position]
        self._notify_inventory()

        result = ModifierResult(used=True, kind=kind)
        if kind == PowerupKind.DETECTOR:
            self._activate_detector(board, result)
        elif kind == PowerupKind.FREEZE:
            self._activate_freeze()
        elif kind == PowerupKind.SAFE_REVEAL:
            self._activate_safe_reveal(board, result)

        logger.debug("Used %s", kind.value)
        return result

    # ========================================================================
    # Shield
    # ========================================================================

    @property
    def has_shield(self) -> bool:
        """Check if the shield is armed."""
        return self._shield_active

    def consume_shield(self) -> bool:
        """
        Spend the shield if it is armed.

        Returns:
            True if a shield was armed and is now spent.
        """
        if not self._shield_active:
            return False
        self._set_shield(False)
        return True

    def _set_shield(self, active: bool) -> None:
        self._shield_active = active
        if self.on_shield_change:
            self.on_shield_change(active)

    # ========================================================================
    # Timed Effects
    # ========================================================================

    def _duration_seconds(self, kind: PowerupKind) -> float:
        return self.config.settings_for(kind).duration_ms / 1000.0

    def _activate_freeze(self) -> None:
        duration_ms = self.config.settings_for(PowerupKind.FREEZE).duration_ms
        self._freeze_active = True
        self._freeze_expires_at = self.clock() + duration_ms / 1000.0
        if self.on_freeze_change:
            self.on_freeze_change(True, duration_ms)

    def is_timer_frozen(self) -> bool:
        """
        Check if the game timer is frozen.

        Clears the freeze once its expiry time has passed.
        """
        if self._freeze_active and self.clock() >= self._freeze_expires_at:
            self._freeze_active = False
            if self.on_freeze_change:
                self.on_freeze_change(False, 0)
        return self._freeze_active

    def _activate_detector(self, board: Board, result: ModifierResult) -> None:
        mine = board.get_random_unflagged_mine(self.rng)
        if mine is None:
            return
        self._detected = mine
        self._detector_expires_at = (
            self.clock() + self._duration_seconds(PowerupKind.DETECTOR)
        )
        result.detected = mine

    @property
    def detected_mine(self) -> Optional[Cell]:
        """Mine currently highlighted by the detector, if still showing."""
        if self._detected is not None and self.clock() >= self._detector_expires_at:
            self._detected = None
        return self._detected

    # ========================================================================
    # Instant Effects
    # ========================================================================

    def _activate_safe_reveal(self, board: Board, result: ModifierResult) -> None:
        cell_count = self.config.settings_for(PowerupKind.SAFE_REVEAL).cell_count
        for _ in range(cell_count):
            cell = board.get_random_safe_cell(self.rng)
            if cell is None:
                break
            reveal = board.reveal_cell(cell.row, cell.col)
            result.revealed.extend(reveal.revealed)
            result.powerups.extend(reveal.powerups)

    def announce(self) -> None:
        """Report the full current state to every listener."""
        self._notify_inventory()
        if self.on_shield_change:
            self.on_shield_change(self._shield_active)
        if self.on_freeze_change:
            self.on_freeze_change(self._freeze_active, 0)

    def _notify_inventory(self) -> None:
        if self.on_inventory_change:
            self.on_inventory_change(self.inventory)
