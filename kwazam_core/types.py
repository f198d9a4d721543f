from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

BOARD_ROWS = 8
BOARD_COLUMNS = 5


class Position(NamedTuple):
    """A (row, column) square on the board. Row 0 is the top edge."""
    row: int
    column: int

    def offset(self, dr: int, dc: int) -> 'Position':
        return Position(self.row + dr, self.column + dc)


@dataclass(frozen=True)
class Player:
    """A participant identified by its id."""
    id: str

    def __str__(self) -> str:
        return self.id


def sign(n: int) -> int:
    return (n > 0) - (n < 0)


# Separators of the text save format.
RESERVED_ID_CHARS = frozenset('_,')


def is_valid_player_id(pid: str) -> bool:
    """Ids must be non-empty and free of whitespace and save-format separators."""
    return bool(pid) and not any(ch in RESERVED_ID_CHARS or ch.isspace() for ch in pid)
