from __future__ import annotations

from typing import List, Sequence

from .board import Board
from .game_master import KwazamGameMaster
from .pieces import Piece, PieceKind
from .types import Player, Position, is_valid_player_id

# Back rank from column 0 to 4, as seen from the top of the board.
TOP_BACK_RANK = (PieceKind.TOR, PieceKind.BIZ, PieceKind.SAU, PieceKind.BIZ, PieceKind.XOR)
BOTTOM_BACK_RANK = (PieceKind.XOR, PieceKind.BIZ, PieceKind.SAU, PieceKind.BIZ, PieceKind.TOR)


def populate_kwazam(board: Board) -> None:
    """Places the Kwazam Chess starting position.

    The first player starts at the bottom with Rams facing up, the second
    player at the top with Rams facing down. Each Sau is its owner's critical
    piece.
    """
    if len(board.players) < 2:
        raise ValueError('Kwazam Chess needs two players')
    bottom, top = board.players[0], board.players[1]
    last = board.rows - 1

    _place_back_rank(board, 0, top, TOP_BACK_RANK)
    for column in range(board.columns):
        board.place_piece(Position(1, column), Piece(PieceKind.RAM, top, facing_up=False))
    for column in range(board.columns):
        board.place_piece(Position(last - 1, column), Piece(PieceKind.RAM, bottom, facing_up=True))
    _place_back_rank(board, last, bottom, BOTTOM_BACK_RANK)


def _place_back_rank(board: Board, row: int, owner: Player, kinds: Sequence[PieceKind]) -> None:
    for column, kind in enumerate(kinds):
        piece = Piece(kind, owner, critical=(kind is PieceKind.SAU))
        board.place_piece(Position(row, column), piece)


def make_players(player_ids: Sequence[str]) -> List[Player]:
    ids = [str(pid) for pid in player_ids]
    bad = [pid for pid in ids if not is_valid_player_id(pid)]
    if bad:
        raise ValueError(f'Player ids must be non-empty without spaces, "_" or ",": {bad}')
    if len(set(ids)) != len(ids):
        raise ValueError('Player ids must be unique')
    return [Player(pid) for pid in ids]


def new_game(player_ids: Sequence[str] = ('1', '2')) -> KwazamGameMaster:
    """Creates a fresh Kwazam Chess game with the standard layout."""
    players = make_players(player_ids)
    board = Board(players, populate=populate_kwazam)
    return KwazamGameMaster(board, players)
