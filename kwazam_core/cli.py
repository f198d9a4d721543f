from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional

from .config import configure_logging
from .errors import IllegalMoveError, NoPieceError, NotYourPieceError, SnapshotFormatError
from .game_master import GameMaster
from .layout import new_game
from .moves import find_path, legal_destinations, parse_move, parse_position
from .snapshot import load_from_file, save_to_file

HELP = """Commands:
  r,c r,c     move the piece at r,c to r,c (e.g. "6,0 5,0")
  moves r,c   list where the piece at r,c can go
  save PATH   save the game to a file
  load PATH   load a game from a file
  board       print the board
  quit        leave the game"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Kwazam Chess for two players in a terminal')
    parser.add_argument('--load', default=None, help='Start from a saved game file')
    parser.add_argument('--players', nargs=2, default=['1', '2'], metavar=('BOTTOM', 'TOP'),
                        help='Player ids; the first starts at the bottom and moves first')
    parser.add_argument('--show-paths', action='store_true', help='Show the squares each move travels')
    return parser


def _print_status(game: GameMaster) -> None:
    print(game.board.pretty())
    print(f"Turn {game.turn_count}: player {game.current_player} to move")


def play(game: GameMaster, read: Callable[[str], str] = input, show_paths: bool = False) -> GameMaster:
    """Runs the interactive loop until someone wins or the user quits.

    Returns the game being played when the loop ends, which may differ from
    the one passed in if a save was loaded.
    """
    winners: List[str] = []

    def on_win(player) -> None:
        winners.append(player.id)

    game.register_win_listener(on_win)
    _print_status(game)
    while not game.is_over:
        try:
            text = read(f"[{game.current_player}] > ").strip()
        except EOFError:
            break
        if not text:
            continue
        cmd, _, arg = text.partition(' ')
        if cmd in ('quit', 'exit', 'q'):
            break
        if cmd in ('help', '?'):
            print(HELP)
            continue
        if cmd == 'board':
            _print_status(game)
            continue
        if cmd == 'save':
            if not arg:
                print('Usage: save PATH')
                continue
            try:
                save_to_file(game, arg.strip())
            except OSError as e:
                print(f'Could not save: {e}')
                continue
            print(f'Saved to {arg.strip()}')
            continue
        if cmd == 'load':
            try:
                game = load_from_file(arg.strip())
            except (OSError, UnicodeDecodeError, SnapshotFormatError) as e:
                print(f'Could not load: {e}')
                continue
            game.register_win_listener(on_win)
            _print_status(game)
            continue
        if cmd == 'moves':
            try:
                pos = parse_position(arg)
            except ValueError:
                print('Usage: moves r,c')
                continue
            print('Legal moves:', [tuple(p) for p in legal_destinations(game, pos)])
            continue

        try:
            src, dst = parse_move(text)
        except ValueError:
            print('Could not parse. Try again (type "help" for commands).')
            continue
        if not (game.board.in_bounds(src) and game.board.in_bounds(dst)):
            print('That square is off the board.')
            continue
        path = find_path(game, src, dst)
        try:
            game.move_piece(src, dst)
        except NoPieceError:
            print('There is no piece there.')
            continue
        except NotYourPieceError:
            print('That piece belongs to the other player.')
            continue
        except IllegalMoveError:
            print('Illegal move. Try again.')
            continue
        if show_paths and path is not None:
            print('Path:', [tuple(p) for p in path])
        game.advance_turn()
        if not game.is_over:
            _print_status(game)

    if winners:
        print(game.board.pretty())
        print(f"Player {winners[-1]} wins!")
    return game


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(logging.WARNING)
    if args.load:
        game = load_from_file(args.load)
    else:
        game = new_game(args.players)
    print(HELP)
    play(game, show_paths=args.show_paths)
