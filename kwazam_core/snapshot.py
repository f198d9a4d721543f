"""Plain-data snapshots of a game and their text/JSON encodings.

A snapshot carries everything needed to rebuild an equivalent game: turn
count, the rotation of active players, the current player and every cell.
The text format is line based::

    Game: Kwazam Chess
    Turn Count: 4
    Players: 1, 2
    Current Player: 1

    TOR_2
    RAM_2
    SAU_2_CRITICAL
    EMPTY
    ...

one line per cell in row-major order. Rams facing up carry ``FACINGUP``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from .board import Board
from .errors import SnapshotFormatError
from .game_master import GameMaster, KwazamGameMaster
from .pieces import Piece, PieceKind
from .types import BOARD_COLUMNS, BOARD_ROWS, Player, is_valid_player_id

logger = logging.getLogger(__name__)

GAME_TITLE = 'Kwazam Chess'
EMPTY_CELL = 'EMPTY'
FACING_UP = 'FACINGUP'
CRITICAL = 'CRITICAL'


@dataclass(frozen=True)
class PieceRecord:
    kind: PieceKind
    owner: str
    facing_up: bool = True
    critical: bool = False

    @classmethod
    def from_piece(cls, piece: Piece) -> 'PieceRecord':
        return cls(kind=piece.kind, owner=piece.owner.id, facing_up=piece.facing_up, critical=piece.critical)

    def to_piece(self) -> Piece:
        return Piece(kind=self.kind, owner=Player(self.owner), critical=self.critical, facing_up=self.facing_up)


Grid = Tuple[Tuple[Optional[PieceRecord], ...], ...]


@dataclass(frozen=True)
class GameSnapshot:
    turn_count: int
    players: Tuple[str, ...]  # rotation order, active players only
    current_player: str
    cells: Grid  # row-major

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def columns(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def owners(self) -> List[str]:
        """Every player id in the rotation or on the board, rotation first."""
        out = list(self.players)
        for row in self.cells:
            for rec in row:
                if rec is not None and rec.owner not in out:
                    out.append(rec.owner)
        return out


# ---------- capture / restore ----------

def take_snapshot(game: GameMaster) -> GameSnapshot:
    cells = tuple(
        tuple(PieceRecord.from_piece(p) if p is not None else None for p in row)
        for row in game.board.cells()
    )
    return GameSnapshot(
        turn_count=game.turn_count,
        players=tuple(p.id for p in game.players),
        current_player=game.current_player.id,
        cells=cells,
    )


def _validate(snapshot: GameSnapshot) -> None:
    if snapshot.turn_count < 0:
        raise SnapshotFormatError('Turn count cannot be negative')
    if not snapshot.players:
        raise SnapshotFormatError('Snapshot has no players')
    if len(set(snapshot.players)) != len(snapshot.players):
        raise SnapshotFormatError('Duplicate player ids in snapshot')
    if snapshot.current_player not in snapshot.players:
        raise SnapshotFormatError('Current player not found in players list')
    bad = [pid for pid in snapshot.owners() if not is_valid_player_id(pid)]
    if bad:
        raise SnapshotFormatError(f'Player ids cannot be stored: {bad}')
    widths = {len(row) for row in snapshot.cells}
    if not snapshot.cells or len(widths) != 1:
        raise SnapshotFormatError('Snapshot grid must be rectangular and non-empty')


def restore_snapshot(game: GameMaster, snapshot: GameSnapshot) -> None:
    """Loads ``snapshot`` into an existing game and its board."""
    _validate(snapshot)
    board = game.board
    if (snapshot.rows, snapshot.columns) != (board.rows, board.columns):
        raise SnapshotFormatError(
            f'Snapshot is {snapshot.rows}x{snapshot.columns}, board is {board.rows}x{board.columns}')
    for pid in snapshot.owners():
        if Player(pid) not in board.players:
            board.players.append(Player(pid))

    grid = [[rec.to_piece() if rec is not None else None for rec in row] for row in snapshot.cells]
    board.replace_cells(grid)
    game.set_players([Player(pid) for pid in snapshot.players], current=Player(snapshot.current_player))
    game.turn_count = snapshot.turn_count
    logger.debug('restored snapshot at turn %d', snapshot.turn_count)


def game_from_snapshot(snapshot: GameSnapshot,
                       game_cls: Type[GameMaster] = KwazamGameMaster,
                       rows: int = BOARD_ROWS,
                       columns: int = BOARD_COLUMNS) -> GameMaster:
    """Builds a new game and board equivalent to the one the snapshot was taken from.

    The board is ``rows`` x ``columns``; a snapshot of any other size is rejected.
    """
    _validate(snapshot)
    owners = [Player(pid) for pid in snapshot.owners()]
    board = Board(owners, rows=rows, columns=columns)
    game = game_cls(board, [Player(pid) for pid in snapshot.players])
    restore_snapshot(game, snapshot)
    return game


# ---------- text codec ----------

def _record_to_line(rec: Optional[PieceRecord]) -> str:
    if rec is None:
        return EMPTY_CELL
    parts = [rec.kind.value, rec.owner]
    if rec.kind is PieceKind.RAM and rec.facing_up:
        parts.append(FACING_UP)
    if rec.critical:
        parts.append(CRITICAL)
    return '_'.join(parts)


def _record_from_line(line: str) -> Optional[PieceRecord]:
    if line == EMPTY_CELL:
        return None
    parts = line.split('_')
    if len(parts) < 2:
        raise SnapshotFormatError(f'Bad cell line: {line!r}')
    kind_s, owner, modifiers = parts[0], parts[1], parts[2:]
    try:
        kind = PieceKind(kind_s)
    except ValueError:
        raise SnapshotFormatError(f'Unknown piece type: {kind_s}') from None
    unknown = set(modifiers) - {FACING_UP, CRITICAL}
    if unknown:
        raise SnapshotFormatError(f'Unknown modifiers {sorted(unknown)} in {line!r}')
    # Only Rams have a direction; everything else is stored as facing up.
    facing_up = FACING_UP in modifiers if kind is PieceKind.RAM else True
    return PieceRecord(kind=kind, owner=owner, facing_up=facing_up, critical=CRITICAL in modifiers)


def snapshot_to_text(snapshot: GameSnapshot) -> str:
    lines = [
        f'Game: {GAME_TITLE}',
        f'Turn Count: {snapshot.turn_count}',
        f'Players: {", ".join(snapshot.players)}',
        f'Current Player: {snapshot.current_player}',
        '',
    ]
    for row in snapshot.cells:
        lines.extend(_record_to_line(rec) for rec in row)
    return '\n'.join(lines) + '\n'


def _header_value(line: str, name: str) -> str:
    prefix = f'{name}: '
    if not line.startswith(prefix):
        raise SnapshotFormatError(f'Expected "{prefix}..." but got {line!r}')
    return line[len(prefix):].strip()


def snapshot_from_text(text: str, rows: int = BOARD_ROWS, columns: int = BOARD_COLUMNS) -> GameSnapshot:
    """Parses the line format produced by ``snapshot_to_text``.

    Pieces may belong to players missing from the Players line: those are
    players already eliminated from the rotation.
    """
    lines = text.splitlines()
    if len(lines) < 5:
        raise SnapshotFormatError('Invalid file format')
    _header_value(lines[0], 'Game')
    try:
        turn_count = int(_header_value(lines[1], 'Turn Count'))
    except ValueError as e:
        raise SnapshotFormatError(f'Bad turn count: {e}') from None
    players = tuple(p.strip() for p in _header_value(lines[2], 'Players').split(',') if p.strip())
    current = _header_value(lines[3], 'Current Player')

    records = [_record_from_line(line.strip()) for line in lines[5:] if line.strip()]
    if len(records) != rows * columns:
        raise SnapshotFormatError(f'Cell count does not match {rows}x{columns} dimensions')
    cells = tuple(tuple(records[r * columns:(r + 1) * columns]) for r in range(rows))

    snapshot = GameSnapshot(turn_count=turn_count, players=players, current_player=current, cells=cells)
    _validate(snapshot)
    return snapshot


# ---------- JSON codec ----------

def snapshot_to_json(snapshot: GameSnapshot) -> Dict[str, Any]:
    def rec_json(rec: Optional[PieceRecord]) -> Optional[Dict[str, Any]]:
        if rec is None:
            return None
        return {
            'kind': rec.kind.value,
            'owner': rec.owner,
            'facingUp': bool(rec.facing_up),
            'critical': bool(rec.critical),
        }

    return {
        'turnCount': int(snapshot.turn_count),
        'players': list(snapshot.players),
        'currentPlayer': snapshot.current_player,
        'cells': [[rec_json(rec) for rec in row] for row in snapshot.cells],
    }


def _json_flag(cell: Dict[str, Any], name: str, default: bool) -> bool:
    value = cell.get(name, default)
    if not isinstance(value, bool):
        raise ValueError(f'{name} must be true or false, got {value!r}')
    return value


def snapshot_from_json(obj: Dict[str, Any]) -> GameSnapshot:
    try:
        cells = tuple(
            tuple(
                None if c is None else PieceRecord(
                    kind=PieceKind(str(c['kind']).upper()),
                    owner=str(c['owner']),
                    facing_up=_json_flag(c, 'facingUp', True),
                    critical=_json_flag(c, 'critical', False),
                )
                for c in row
            )
            for row in obj['cells']
        )
        snapshot = GameSnapshot(
            turn_count=int(obj.get('turnCount', 0)),
            players=tuple(str(p) for p in obj['players']),
            current_player=str(obj['currentPlayer']),
            cells=cells,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotFormatError(f'bad state: {e}') from None
    _validate(snapshot)
    return snapshot


# ---------- files ----------

def save_to_file(game: GameMaster, path: str) -> None:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(snapshot_to_text(take_snapshot(game)))
    logger.info('saved game to %s', path)


def load_from_file(path: str) -> GameMaster:
    with open(path, 'r', encoding='utf-8') as f:
        snapshot = snapshot_from_text(f.read())
    logger.info('loaded game from %s', path)
    return game_from_snapshot(snapshot)
