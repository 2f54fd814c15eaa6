from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# 6-max, $1/$2, 100bb
POSITIONS = ("UTG", "HJ", "CO", "BTN", "SB", "BB")

UNDO_LIMIT = 200


@dataclass(frozen=True, slots=True)
class TableConfig:
    positions: Tuple[str, ...] = POSITIONS
    start_stack: int = 200
    small_blind: int = 1
    big_blind: int = 2
    hero_seat: int = 0
    initial_dealer: int = 3

    def __post_init__(self) -> None:
        if len(self.positions) < 2:
            raise ValueError("a table needs at least 2 seats")
        if not (0 < self.small_blind <= self.big_blind):
            raise ValueError("blinds must satisfy 0 < small_blind <= big_blind")
        if self.start_stack <= 0:
            raise ValueError("start_stack must be positive")
        if not (0 <= self.hero_seat < len(self.positions)):
            raise ValueError("hero_seat out of range")
        if not (0 <= self.initial_dealer < len(self.positions)):
            raise ValueError("initial_dealer out of range")

    @property
    def seats(self) -> int:
        return len(self.positions)

    def position_of(self, seat: int, dealer: int) -> str:
        """Label of `seat` when `dealer` holds the button."""
        if "BTN" not in self.positions:
            return self.positions[seat]
        btn = self.positions.index("BTN")
        return self.positions[(btn + seat - dealer) % self.seats]


DEFAULT_CONFIG = TableConfig()
