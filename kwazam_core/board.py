from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .errors import IllegalMoveError, NoPieceError, OutOfBoundsError
from .pieces import Piece
from .types import BOARD_COLUMNS, BOARD_ROWS, Player, Position

logger = logging.getLogger(__name__)

PieceListener = Callable[[Piece], None]
Populate = Callable[['Board'], None]


@dataclass
class Cell:
    """One square of the board. Holds at most one piece and does not know where it is."""
    piece: Optional[Piece] = None

    def take(self) -> Optional[Piece]:
        piece, self.piece = self.piece, None
        return piece

    def place(self, piece: Optional[Piece]) -> None:
        self.piece = piece


class Board:
    """The grid of cells and the single source of truth for piece positions.

    Captures and arrivals on the top/bottom row are broadcast to registered
    listeners synchronously: capture listeners fire before the moving piece
    lands, vertical-edge listeners after.
    """

    def __init__(
        self,
        players: Sequence[Player],
        populate: Optional[Populate] = None,
        rows: int = BOARD_ROWS,
        columns: int = BOARD_COLUMNS,
    ) -> None:
        self.players: List[Player] = list(players)
        self.rows = rows
        self.columns = columns
        self._cells: List[List[Cell]] = [[Cell() for _ in range(columns)] for _ in range(rows)]
        self._vertical_edge_listeners: List[PieceListener] = []
        self._capture_listeners: List[PieceListener] = []
        if populate is not None:
            populate(self)

    # ---------- bounds ----------

    def in_bounds(self, pos: Position) -> bool:
        r, c = pos
        return 0 <= r < self.rows and 0 <= c < self.columns

    def check_bounds(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise OutOfBoundsError(f"Position {tuple(pos)} is outside the {self.rows}x{self.columns} board")

    def _cell(self, pos: Position) -> Cell:
        self.check_bounds(pos)
        return self._cells[pos[0]][pos[1]]

    def positions(self) -> Iterator[Position]:
        for r in range(self.rows):
            for c in range(self.columns):
                yield Position(r, c)

    # ---------- queries ----------

    def piece_at(self, pos: Position) -> Optional[Piece]:
        return self._cell(pos).piece

    def is_cell_occupied(self, pos: Position) -> bool:
        return self.piece_at(pos) is not None

    def is_path_obstructed(self, path: Iterable[Position]) -> bool:
        return any(self.is_cell_occupied(pos) for pos in path)

    def has_friendly_piece_at(self, pos: Position, player: Player) -> bool:
        piece = self.piece_at(pos)
        return piece is not None and piece.owner == player

    def has_enemy_piece_at(self, pos: Position, player: Player) -> bool:
        piece = self.piece_at(pos)
        return piece is not None and piece.owner != player

    def pieces_of(self, player: Player) -> List[Piece]:
        return [cell.piece for row in self._cells for cell in row
                if cell.piece is not None and cell.piece.owner == player]

    def is_vertical_edge(self, row: int) -> bool:
        return row == 0 or row == self.rows - 1

    # ---------- mutation ----------

    def place_piece(self, pos: Position, piece: Piece) -> None:
        """Put a piece on an empty cell during setup."""
        cell = self._cell(pos)
        if cell.piece is not None:
            raise ValueError(f"Cell {tuple(pos)} is already occupied")
        if piece.owner not in self.players:
            raise ValueError(f"Player {piece.owner.id} does not take part in this game")
        cell.place(piece)
        self._subscribe(piece)

    def remove_piece(self, pos: Position) -> None:
        self._cell(pos).take()

    def move_piece(self, src: Position, dst: Position) -> None:
        """Move the piece at ``src`` to ``dst``, capturing an enemy piece there.

        Raises NoPieceError if ``src`` is empty and IllegalMoveError if ``dst``
        holds a piece of the same owner; the board is unchanged in both cases.
        Movement geometry is not checked here.
        """
        from_cell = self._cell(src)
        to_cell = self._cell(dst)
        piece = from_cell.piece
        if piece is None:
            raise NoPieceError()
        if self.has_friendly_piece_at(dst, piece.owner):
            raise IllegalMoveError("Destination holds a friendly piece.")

        captured = to_cell.take()
        if captured is not None:
            logger.info("%r captured %r at %s", piece, captured, tuple(dst))
            self._notify(self._capture_listeners, captured)

        to_cell.place(from_cell.take())
        logger.debug("moved %r %s -> %s", piece, tuple(src), tuple(dst))

        if self.is_vertical_edge(dst[0]):
            self._notify(self._vertical_edge_listeners, piece)

    def switch_pieces(self) -> None:
        """Replace every switchable piece in place by its counterpart."""
        switched = 0
        for row in self._cells:
            for cell in row:
                piece = cell.piece
                if piece is not None and piece.is_switchable():
                    replacement = piece.switched_piece()
                    cell.place(replacement)
                    self._subscribe(replacement)
                    switched += 1
        logger.info("switched %d pieces", switched)

    # ---------- bulk access ----------

    def cells(self) -> List[List[Optional[Piece]]]:
        """Row-major copy of the grid; None marks an empty cell."""
        return [[cell.piece for cell in row] for row in self._cells]

    def replace_cells(self, grid: Sequence[Sequence[Optional[Piece]]]) -> None:
        """Replace the whole grid, e.g. when loading a saved game."""
        if len(grid) != self.rows or any(len(row) != self.columns for row in grid):
            raise ValueError(f"Grid must be {self.rows}x{self.columns}")
        seen = set()
        for row in grid:
            for piece in row:
                if piece is None:
                    continue
                if id(piece) in seen:
                    raise ValueError(f"{piece!r} appears in more than one cell")
                seen.add(id(piece))
                if piece.owner not in self.players:
                    raise ValueError(f"Player {piece.owner.id} does not take part in this game")

        # Drop the edge subscriptions of pieces from the previous grid.
        self._vertical_edge_listeners = [
            cb for cb in self._vertical_edge_listeners if not isinstance(getattr(cb, "__self__", None), Piece)
        ]
        self._cells = [[Cell(piece) for piece in row] for row in grid]
        for row in grid:
            for piece in row:
                if piece is not None:
                    self._subscribe(piece)

    # ---------- listeners ----------

    def register_vertical_edge_listener(self, listener: PieceListener) -> None:
        self._vertical_edge_listeners.append(listener)

    def register_capture_listener(self, listener: PieceListener) -> None:
        self._capture_listeners.append(listener)

    def _subscribe(self, piece: Piece) -> None:
        if piece.listens_to_vertical_edges():
            callback = piece.on_vertical_edge_reached
            if callback not in self._vertical_edge_listeners:
                self._vertical_edge_listeners.append(callback)

    @staticmethod
    def _notify(listeners: List[PieceListener], piece: Piece) -> None:
        for listener in list(listeners):
            listener(piece)

    # ---------- rendering ----------

    def pretty(self) -> str:
        """Human-readable board. First player's pieces are upper case.

        A Ram facing down is drawn as ``V``; critical pieces carry a ``*``.
        """
        first = self.players[0] if self.players else None
        lines: List[str] = ["   " + " ".join(f"{c:>2}" for c in range(self.columns))]
        for r, row in enumerate(self._cells):
            out: List[str] = []
            for cell in row:
                piece = cell.piece
                if piece is None:
                    out.append(" .")
                    continue
                sym = piece.kind.symbol
                if piece.listens_to_vertical_edges() and not piece.facing_up:
                    sym = "V"
                sym = sym.upper() if piece.owner == first else sym.lower()
                out.append(("*" if piece.critical else " ") + sym)
            lines.append(f"{r:>2} " + " ".join(out))
        return "\n".join(lines)
