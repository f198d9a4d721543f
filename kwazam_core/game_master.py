from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .board import Board
from .errors import GameOverError, IllegalMoveError, NoPieceError, NotYourPieceError, PieceMoveError
from .pieces import Piece
from .types import Player, Position

logger = logging.getLogger(__name__)

WinListener = Callable[[Player], None]


class GameMaster:
    """Turn order, move validation and the win condition.

    The rotation is the ordered list of players still in the game; the
    current player is tracked by index. Capturing a critical piece removes
    its owner from the rotation, and the game is over once a single player
    is left.
    """

    def __init__(self, board: Board, players: Sequence[Player]) -> None:
        if not players:
            raise ValueError("A game needs at least one player")
        self.board = board
        self._rotation: List[Player] = list(players)
        self._current = 0
        self._turn_count = 0
        self._winner: Optional[Player] = None
        self._win_listeners: List[WinListener] = []
        self.board.register_capture_listener(self.on_capture)

    # ---------- state ----------

    @property
    def current_player(self) -> Player:
        return self._rotation[self._current]

    @property
    def players(self) -> Tuple[Player, ...]:
        return tuple(self._rotation)

    @property
    def turn_count(self) -> int:
        return self._turn_count

    @turn_count.setter
    def turn_count(self, value: int) -> None:
        if value < 0:
            raise ValueError("turn count cannot be negative")
        self._turn_count = int(value)

    @property
    def winner(self) -> Optional[Player]:
        return self._winner

    @property
    def is_over(self) -> bool:
        return self._winner is not None

    def set_players(self, players: Sequence[Player], current: Optional[Player] = None) -> None:
        """Replace the rotation. A single remaining player means that player has won."""
        if not players:
            raise ValueError("The rotation cannot be empty")
        self._rotation = list(players)
        self._current = 0
        self._winner = self._rotation[0] if len(self._rotation) == 1 else None
        if current is not None:
            self.set_current_player(current)

    def set_current_player(self, player: Player) -> None:
        try:
            self._current = self._rotation.index(player)
        except ValueError:
            raise ValueError(f"Player {player.id} is not in the rotation") from None

    # ---------- moves ----------

    def validate_move(self, src: Position, dst: Position) -> Piece:
        """Check a move for the current player without applying it.

        Returns the moving piece, or raises one of the PieceMoveError kinds.
        """
        if self.is_over:
            raise GameOverError()
        self.board.check_bounds(dst)
        piece = self.board.piece_at(src)
        if piece is None:
            raise NoPieceError()
        if piece.owner != self.current_player:
            raise NotYourPieceError()

        path = piece.potential_path(src, dst)
        if path is None:
            raise IllegalMoveError()
        *prefix, last = path

        if (not piece.can_jump() and self.board.is_path_obstructed(prefix)) \
                or self.board.has_friendly_piece_at(last, self.current_player):
            raise IllegalMoveError()
        return piece

    def move_piece(self, src: Position, dst: Position) -> None:
        try:
            self.validate_move(src, dst)
        except PieceMoveError as e:
            logger.debug("rejected %s -> %s for player %s: %s", tuple(src), tuple(dst), self.current_player, e.kind)
            raise
        self.board.move_piece(src, dst)

    def advance_turn(self) -> None:
        if self.is_over:
            return
        self._current = (self._current + 1) % len(self._rotation)
        self._turn_count += 1
        logger.debug("turn %d: player %s to move", self._turn_count, self.current_player)

    # ---------- capture / win ----------

    def on_capture(self, piece: Piece) -> None:
        if not piece.critical:
            return
        owner = piece.owner
        if owner not in self._rotation:
            return

        current = self.current_player
        self._rotation.remove(owner)
        logger.info("player %s eliminated", owner)
        if current != owner:
            self._current = self._rotation.index(current)
        else:
            self._current %= len(self._rotation)

        if len(self._rotation) == 1:
            self._winner = self._rotation[0]
            logger.info("player %s wins", self._winner)
            self.notify_win_listeners(self._winner)

    def register_win_listener(self, listener: WinListener) -> None:
        self._win_listeners.append(listener)

    def notify_win_listeners(self, player: Player) -> None:
        for listener in list(self._win_listeners):
            listener(player)


class KwazamGameMaster(GameMaster):
    """GameMaster for Kwazam Chess: Tor and Xor swap every second turn."""

    SPRITE_COLORS = ("blue", "red")

    def advance_turn(self) -> None:
        if self.is_over:
            return
        super().advance_turn()
        if self.turn_count % 2 == 0:
            self.board.switch_pieces()

    def cell_sprites(self) -> List[List[Optional[str]]]:
        """Sprite names per cell, e.g. ``ram_red_piece_flipped``; None for empty cells.

        The first declared player plays blue, everyone else red.
        """
        first = self.board.players[0] if self.board.players else None
        out: List[List[Optional[str]]] = []
        for row in self.board.cells():
            names: List[Optional[str]] = []
            for piece in row:
                if piece is None:
                    names.append(None)
                    continue
                color = self.SPRITE_COLORS[0] if piece.owner == first else self.SPRITE_COLORS[1]
                suffix = "_flipped" if piece.listens_to_vertical_edges() and not piece.facing_up else ""
                names.append(f"{piece.kind.name.lower()}_{color}_piece{suffix}")
            out.append(names)
        return out
