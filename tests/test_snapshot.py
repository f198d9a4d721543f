import os
import shutil
import tempfile
import unittest

from game import (
    Board,
    GameMaster,
    GameSnapshot,
    Piece,
    PieceKind,
    PieceRecord,
    Player,
    Position,
    SnapshotFormatError,
    db_delete_game,
    db_list_games,
    db_load_game,
    db_store_game,
    game_from_snapshot,
    load_from_file,
    new_game,
    restore_snapshot,
    save_to_file,
    snapshot_from_json,
    snapshot_from_text,
    snapshot_to_json,
    snapshot_to_text,
    take_snapshot,
)


P1 = Player("1")
P2 = Player("2")


def played_game():
    game = new_game()
    game.move_piece(Position(6, 0), Position(5, 0))
    game.advance_turn()
    game.move_piece(Position(1, 4), Position(2, 4))
    game.advance_turn()
    game.move_piece(Position(7, 1), Position(5, 2))
    game.advance_turn()
    return game


class TestSnapshot(unittest.TestCase):
    def test_given_new_game_when_snapshotting_then_initial_values(self):
        snap = take_snapshot(new_game())
        self.assertEqual(snap.turn_count, 0)
        self.assertEqual(snap.players, ("1", "2"))
        self.assertEqual(snap.current_player, "1")
        self.assertEqual((snap.rows, snap.columns), (8, 5))
        self.assertEqual(snap.cells[7][2], PieceRecord(PieceKind.SAU, "1", True, True))
        self.assertEqual(snap.cells[1][0], PieceRecord(PieceKind.RAM, "2", False, False))
        self.assertIsNone(snap.cells[3][3])

    def test_given_played_game_when_restoring_into_new_game_then_snapshot_identical(self):
        game = played_game()
        snap = take_snapshot(game)
        other = new_game()
        restore_snapshot(other, snap)
        self.assertEqual(take_snapshot(other), snap)
        self.assertEqual(other.current_player, P2)
        self.assertEqual(other.turn_count, 3)

    def test_given_restored_game_when_ram_reaches_edge_then_it_turns_around(self):
        board = Board([P1, P2])
        board.place_piece(Position(1, 1), Piece(PieceKind.RAM, P1, facing_up=True))
        board.place_piece(Position(7, 2), Piece(PieceKind.SAU, P1, critical=True))
        board.place_piece(Position(4, 4), Piece(PieceKind.SAU, P2, critical=True))
        snap = take_snapshot(GameMaster(board, [P1, P2]))

        game = game_from_snapshot(snap)
        game.move_piece(Position(1, 1), Position(0, 1))
        self.assertFalse(game.board.piece_at(Position(0, 1)).facing_up)

    def test_given_finished_game_when_restored_then_still_over(self):
        board = Board([P1, P2])
        board.place_piece(Position(3, 0), Piece(PieceKind.TOR, P1))
        board.place_piece(Position(3, 4), Piece(PieceKind.SAU, P2, critical=True))
        board.place_piece(Position(7, 2), Piece(PieceKind.SAU, P1, critical=True))
        game = GameMaster(board, [P1, P2])
        game.move_piece(Position(3, 0), Position(3, 4))

        restored = game_from_snapshot(snapshot_from_text(snapshot_to_text(take_snapshot(game))))
        self.assertTrue(restored.is_over)
        self.assertEqual(restored.winner, P1)

    def test_given_mismatched_dimensions_when_restoring_then_format_error(self):
        snap = take_snapshot(new_game())
        small = GameSnapshot(snap.turn_count, snap.players, snap.current_player, snap.cells[:6])
        with self.assertRaises(SnapshotFormatError):
            restore_snapshot(new_game(), small)

    def test_given_switched_board_when_snapshotting_then_switched_kinds_recorded(self):
        snap = take_snapshot(played_game())
        self.assertIs(snap.cells[7][4].kind, PieceKind.XOR)
        self.assertIs(snap.cells[0][0].kind, PieceKind.XOR)


class TestTextCodec(unittest.TestCase):
    def test_given_played_game_when_round_tripping_text_then_equal(self):
        snap = take_snapshot(played_game())
        self.assertEqual(snapshot_from_text(snapshot_to_text(snap)), snap)

    def test_given_new_game_when_encoding_then_header_and_cell_lines(self):
        lines = snapshot_to_text(take_snapshot(new_game())).splitlines()
        self.assertEqual(lines[:5], ["Game: Kwazam Chess", "Turn Count: 0", "Players: 1, 2",
                                     "Current Player: 1", ""])
        self.assertEqual(len(lines), 5 + 40)
        self.assertEqual(lines[5:10], ["TOR_2", "BIZ_2", "SAU_2_CRITICAL", "BIZ_2", "XOR_2"])
        self.assertEqual(lines[10], "RAM_2")
        self.assertEqual(lines[15], "EMPTY")
        self.assertEqual(lines[35], "RAM_1_FACINGUP")
        self.assertEqual(lines[42], "SAU_1_CRITICAL")

    def test_given_bad_text_when_parsing_then_format_error(self):
        good = snapshot_to_text(take_snapshot(new_game()))
        lines = good.splitlines()
        broken = [
            "",
            "\n".join(lines[:30]),
            good.replace("TOR_2", "KING_2", 1),
            good.replace("Turn Count: 0", "Turn Count: zero"),
            good.replace("Current Player: 1", "Current Player: 9"),
            good.replace("Game: Kwazam Chess", "Kwazam Chess"),
            good.replace("SAU_2_CRITICAL", "SAU_2_SHINY"),
            good.replace("XOR_2", "XOR", 1),
        ]
        for text in broken:
            with self.assertRaises(SnapshotFormatError):
                snapshot_from_text(text)

    def test_given_eliminated_owner_when_parsing_then_pieces_kept(self):
        text = snapshot_to_text(take_snapshot(new_game())).replace("Players: 1, 2", "Players: 1")
        snap = snapshot_from_text(text)
        self.assertEqual(snap.players, ("1",))
        self.assertEqual(snap.owners(), ["1", "2"])
        self.assertTrue(game_from_snapshot(snap).is_over)


class TestJsonCodec(unittest.TestCase):
    def test_given_played_game_when_round_tripping_json_then_equal(self):
        snap = take_snapshot(played_game())
        obj = snapshot_to_json(snap)
        self.assertEqual(obj["turnCount"], 3)
        self.assertEqual(obj["currentPlayer"], "2")
        self.assertEqual(obj["cells"][7][2], {"kind": "SAU", "owner": "1", "facingUp": True, "critical": True})
        self.assertEqual(snapshot_from_json(obj), snap)

    def test_given_malformed_json_when_parsing_then_format_error(self):
        obj = snapshot_to_json(take_snapshot(new_game()))
        for bad in ({}, dict(obj, players=[]), dict(obj, turnCount=-1), dict(obj, cells="nope"),
                    dict(obj, currentPlayer="7")):
            with self.assertRaises(SnapshotFormatError):
                snapshot_from_json(bad)


class TestPersistence(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_given_saved_file_when_loading_then_same_game(self):
        game = played_game()
        path = os.path.join(self.tmp, "saves", "game.txt")
        save_to_file(game, path)
        self.assertTrue(os.path.exists(path))
        loaded = load_from_file(path)
        self.assertEqual(take_snapshot(loaded), take_snapshot(game))

    def test_given_db_when_storing_loading_listing_and_deleting_then_consistent(self):
        db_path = os.path.join(self.tmp, "nested", "saves.db")
        self.assertEqual(db_list_games(db_path), [])
        self.assertIsNone(db_load_game(db_path, "missing"))

        snap = take_snapshot(played_game())
        db_store_game(db_path, "slot-a", snap)
        self.assertEqual(db_load_game(db_path, "slot-a"), snap)
        listed = db_list_games(db_path)
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0][:3], ("slot-a", 3, "2"))

        fresh = take_snapshot(new_game())
        db_store_game(db_path, "slot-a", fresh)
        self.assertEqual(db_load_game(db_path, "slot-a"), fresh)
        self.assertEqual(len(db_list_games(db_path)), 1)

        self.assertTrue(db_delete_game(db_path, "slot-a"))
        self.assertFalse(db_delete_game(db_path, "slot-a"))
        self.assertEqual(db_list_games(db_path), [])

    def test_given_empty_slot_name_when_storing_then_value_error(self):
        with self.assertRaises(ValueError):
            db_store_game(os.path.join(self.tmp, "s.db"), "", take_snapshot(new_game()))


class TestPlayerIdsAndSizes(unittest.TestCase):
    def test_given_ids_with_separators_when_creating_game_then_value_error(self):
        for ids in (["red_team", "blue"], ["a,b", "c"], ["a b", "c"], ["", "c"]):
            with self.assertRaises(ValueError):
                new_game(ids)

    def test_given_unusual_but_storable_ids_when_saving_file_then_loaded_back(self):
        tmp = tempfile.mkdtemp()
        try:
            game = new_game(["red-team", "Blue.2"])
            path = os.path.join(tmp, "ids.txt")
            save_to_file(game, path)
            loaded = load_from_file(path)
            self.assertEqual(take_snapshot(loaded), take_snapshot(game))
            self.assertEqual(loaded.current_player, Player("red-team"))
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    def test_given_json_owner_with_separator_when_parsing_then_format_error(self):
        obj = snapshot_to_json(take_snapshot(new_game()))
        obj["cells"][7][2] = dict(obj["cells"][7][2], owner="red_team")
        with self.assertRaises(SnapshotFormatError):
            snapshot_from_json(obj)

    def test_given_non_boolean_flags_when_parsing_json_then_format_error(self):
        obj = snapshot_to_json(take_snapshot(new_game()))
        for name, value in (("facingUp", "false"), ("critical", 1)):
            bad = snapshot_to_json(take_snapshot(new_game()))
            bad["cells"][6][0] = dict(obj["cells"][6][0], **{name: value})
            with self.assertRaises(SnapshotFormatError):
                snapshot_from_json(bad)

    def test_given_small_grid_when_building_game_then_rejected_unless_size_requested(self):
        tiny = GameSnapshot(
            turn_count=0,
            players=("1", "2"),
            current_player="1",
            cells=(
                (PieceRecord(PieceKind.SAU, "1", critical=True), None),
                (None, PieceRecord(PieceKind.SAU, "2", critical=True)),
            ),
        )
        with self.assertRaises(SnapshotFormatError):
            game_from_snapshot(tiny)
        game = game_from_snapshot(tiny, rows=2, columns=2)
        self.assertEqual((game.board.rows, game.board.columns), (2, 2))


if __name__ == "__main__":
    unittest.main(verbosity=2)
