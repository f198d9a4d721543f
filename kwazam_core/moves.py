from __future__ import annotations

from typing import List, Optional, Tuple

from .errors import PieceMoveError
from .game_master import GameMaster
from .types import Position


def parse_position(text: str) -> Position:
    """Parses ``"r,c"`` or ``"r c"`` into a Position."""
    sep = ',' if ',' in text else ' '
    parts = [t for t in text.strip().split(sep) if t.strip() != '']
    if len(parts) != 2:
        raise ValueError(f'Expected "row,column", got {text!r}')
    return Position(int(parts[0]), int(parts[1]))


def parse_move(text: str) -> Tuple[Position, Position]:
    """Parses ``"r,c r,c"`` (or ``"r,c -> r,c"``) into a (src, dst) pair."""
    tokens = [t for t in text.replace('->', ' ').split() if t]
    if len(tokens) == 2 and ',' in tokens[0] and ',' in tokens[1]:
        return parse_position(tokens[0]), parse_position(tokens[1])
    if len(tokens) == 4:
        r1, c1, r2, c2 = (int(t) for t in tokens)
        return Position(r1, c1), Position(r2, c2)
    raise ValueError(f'Could not parse move {text!r}')


def legal_destinations(game: GameMaster, src: Position) -> List[Position]:
    """All squares the piece at ``src`` may move to this turn.

    Empty when ``src`` is empty, holds another player's piece, or the game is
    over. Nothing is mutated.
    """
    board = game.board
    if game.is_over or not board.in_bounds(src):
        return []
    piece = board.piece_at(src)
    if piece is None or piece.owner != game.current_player:
        return []
    out: List[Position] = []
    for dst in board.positions():
        if dst == src:
            continue
        try:
            game.validate_move(src, dst)
        except PieceMoveError:
            continue
        out.append(dst)
    return sorted(out)


def find_path(game: GameMaster, src: Position, dst: Position) -> Optional[List[Position]]:
    """The path a legal move would travel, destination included; None if illegal."""
    try:
        piece = game.validate_move(src, dst)
    except PieceMoveError:
        return None
    return piece.potential_path(src, dst)
