from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .types import Player, Position, sign


class PieceKind(Enum):
    RAM = "RAM"
    BIZ = "BIZ"
    SAU = "SAU"
    TOR = "TOR"
    XOR = "XOR"

    @property
    def symbol(self) -> str:
        return self.value[0]


# Tor and Xor trade places every second turn.
SWITCH_COUNTERPARTS = {
    PieceKind.TOR: PieceKind.XOR,
    PieceKind.XOR: PieceKind.TOR,
}


@dataclass(eq=False)
class Piece:
    """A piece on the board.

    Pieces compare by identity: two Rams of the same owner are different
    pieces, and a Ram only reacts to edge events about itself.
    ``facing_up`` is only meaningful for Rams; facing up means moving toward
    row 0.
    """
    kind: PieceKind
    owner: Player
    critical: bool = False
    facing_up: bool = True

    def __repr__(self) -> str:
        extra = ""
        if self.kind is PieceKind.RAM:
            extra = ", facing_up" if self.facing_up else ", facing_down"
        if self.critical:
            extra += ", critical"
        return f"Piece({self.kind.name}, owner={self.owner.id}{extra})"

    def can_jump(self) -> bool:
        """True if cells between source and destination may be occupied."""
        return self.kind is PieceKind.BIZ

    def potential_path(self, src: Position, dst: Position) -> Optional[List[Position]]:
        """Cells this piece passes through going from ``src`` to ``dst``.

        Returns None if the displacement does not fit the piece's movement
        pattern. Otherwise the intermediate cells are listed in order and the
        destination is always the last element. Board occupancy is not
        consulted here.
        """
        dr = dst[0] - src[0]
        dc = dst[1] - src[1]
        src = Position(*src)
        dst = Position(*dst)

        if self.kind is PieceKind.SAU:
            if max(abs(dr), abs(dc)) != 1:
                return None
            return [dst]

        if self.kind is PieceKind.TOR:
            if (dr == 0) == (dc == 0):
                return None
            return _straight_path(src, dst)

        if self.kind is PieceKind.XOR:
            if dr == 0 or abs(dr) != abs(dc):
                return None
            return _straight_path(src, dst)

        if self.kind is PieceKind.BIZ:
            if (abs(dr), abs(dc)) not in ((2, 1), (1, 2)):
                return None
            # Long leg first, then the short one. Informational only: Biz jumps.
            sr, sc = sign(dr), sign(dc)
            if abs(dr) == 2:
                return [src.offset(sr, 0), src.offset(2 * sr, 0), dst]
            return [src.offset(0, sc), src.offset(0, 2 * sc), dst]

        if self.kind is PieceKind.RAM:
            forward = -1 if self.facing_up else 1
            if dc != 0 or dr != forward:
                return None
            return [dst]

        raise ValueError(f"Unknown piece kind: {self.kind!r}")

    def is_switchable(self) -> bool:
        return self.kind in SWITCH_COUNTERPARTS

    def switched_piece(self) -> 'Piece':
        """A new piece of the counterpart kind with the same owner."""
        counterpart = SWITCH_COUNTERPARTS.get(self.kind)
        if counterpart is None:
            raise ValueError(f"{self.kind.name} pieces cannot be switched")
        return Piece(kind=counterpart, owner=self.owner)

    def listens_to_vertical_edges(self) -> bool:
        return self.kind is PieceKind.RAM

    def on_vertical_edge_reached(self, piece: 'Piece') -> None:
        """Turn a Ram around once it reaches the top or bottom row."""
        if piece is not self or self.kind is not PieceKind.RAM:
            return
        self.facing_up = not self.facing_up


def _straight_path(src: Position, dst: Position) -> List[Position]:
    """Step one square at a time from src toward dst, dst included."""
    sr = sign(dst.row - src.row)
    sc = sign(dst.column - src.column)
    path: List[Position] = []
    cur = src
    while cur != dst:
        cur = cur.offset(sr, sc)
        path.append(cur)
    return path
