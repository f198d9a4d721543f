from __future__ import annotations

# Facade module that re-exports Kwazam core functionality.
# The Flask app, the tools and the tests import from here.
# Single-responsibility modules live under kwazam_core/*.

from kwazam_core.types import BOARD_COLUMNS, BOARD_ROWS, Player, Position
from kwazam_core.errors import (
    GameOverError,
    IllegalMoveError,
    NoPieceError,
    NotYourPieceError,
    OutOfBoundsError,
    PieceMoveError,
    SnapshotFormatError,
)
from kwazam_core.pieces import Piece, PieceKind
from kwazam_core.board import Board, Cell
from kwazam_core.game_master import GameMaster, KwazamGameMaster
from kwazam_core.layout import make_players, new_game, populate_kwazam
from kwazam_core.moves import find_path, legal_destinations, parse_move, parse_position
from kwazam_core.snapshot import (
    GameSnapshot,
    PieceRecord,
    game_from_snapshot,
    load_from_file,
    restore_snapshot,
    save_to_file,
    snapshot_from_json,
    snapshot_from_text,
    snapshot_to_json,
    snapshot_to_text,
    take_snapshot,
)
from kwazam_core.db import db_delete_game, db_list_games, db_load_game, db_store_game


def main() -> None:
    # CLI driver delegated to kwazam_core.cli
    from kwazam_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
