from __future__ import annotations

from typing import Optional


class OutOfBoundsError(IndexError):
    """Raised when a position falls outside the board grid.

    This is a programming error; game logic never catches it.
    """


class PieceMoveError(Exception):
    """Base class for expected, recoverable move rejections.

    Each subclass carries a stable ``kind`` string so front-ends can tell
    "nothing there" apart from "bad move" without matching on messages.
    """

    kind = "moveError"
    default_message = "Attempted to move a piece in an invalid way."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class NoPieceError(PieceMoveError):
    kind = "noPiece"
    default_message = "No piece found in the cell."


class NotYourPieceError(PieceMoveError):
    kind = "notYourPiece"
    default_message = "Attempted to move a piece that does not belong to the current player."


class IllegalMoveError(PieceMoveError):
    kind = "illegalMove"
    default_message = "Attempted to move a piece in an invalid way."


class GameOverError(PieceMoveError):
    kind = "gameOver"
    default_message = "The game is already over."


class SnapshotFormatError(ValueError):
    """Raised when saved game data cannot be parsed."""
