from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Tuple

from flask import Flask, jsonify, request

from kwazam_core.config import DEFAULT_DB, configure_logging, env_flag
from game import (
    GameMaster,
    KwazamGameMaster,
    OutOfBoundsError,
    Piece,
    PieceMoveError,
    PieceRecord,
    Position,
    SnapshotFormatError,
    db_delete_game,
    db_list_games,
    db_load_game,
    db_store_game,
    game_from_snapshot,
    legal_destinations,
    new_game,
    snapshot_from_json,
    snapshot_to_json,
    take_snapshot,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Status codes per recoverable move error kind; anything else is a bad request.
ERROR_STATUS = {"gameOver": 409}


class BadPayload(ValueError):
    pass


def state_to_json(game: GameMaster) -> Dict[str, Any]:
    out = snapshot_to_json(take_snapshot(game))
    out["winner"] = game.winner.id if game.winner is not None else None
    return out


def json_to_game(obj: Any) -> GameMaster:
    if not isinstance(obj, dict):
        raise BadPayload("state required")
    try:
        return game_from_snapshot(snapshot_from_json(obj))
    except (SnapshotFormatError, ValueError) as e:
        raise BadPayload(f"bad state: {e}") from None


def _pos_from_json(value: Any, name: str) -> Position:
    try:
        r, c = value
        return Position(int(r), int(c))
    except (TypeError, ValueError):
        raise BadPayload(f"{name} must be [row, column]") from None


def _game_payload(game: GameMaster) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"ok": True, "state": state_to_json(game)}
    if isinstance(game, KwazamGameMaster):
        payload["sprites"] = game.cell_sprites()
    return payload


def _error(kind: str, message: str, status: int = 400, **extra: Any) -> Tuple[Any, int]:
    body: Dict[str, Any] = {"ok": False, "error": kind, "message": message}
    body.update(extra)
    return jsonify(body), status


@app.errorhandler(BadPayload)
def _bad_request(e: BadPayload) -> Any:
    logger.debug("rejected request: %s", e)
    return _error("badState", str(e))


@app.get("/")
def index() -> Any:
    return jsonify({
        "ok": True,
        "game": "Kwazam Chess",
        "endpoints": ["/api/new", "/api/legal", "/api/move", "/api/saves", "/api/save", "/api/load"],
    })


# ---------- Core Game API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    players = body.get("players", ["1", "2"])
    if not isinstance(players, list) or len(players) != 2:
        raise BadPayload("players must be a list of two ids")
    try:
        game = new_game([str(p) for p in players])
    except ValueError as e:
        raise BadPayload(str(e)) from None
    return jsonify(_game_payload(game))


@app.post("/api/legal")
def api_legal() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    game = json_to_game(body.get("state"))
    src = _pos_from_json(body.get("from"), "from")
    moves = [[p.row, p.column] for p in legal_destinations(game, src)]
    return jsonify({"ok": True, "legalMoves": moves})


@app.post("/api/move")
def api_move() -> Any:
    """Applies one move for the current player and passes the turn."""
    body = request.get_json(force=True, silent=True) or {}
    game = json_to_game(body.get("state"))
    src = _pos_from_json(body.get("from"), "from")
    dst = _pos_from_json(body.get("to"), "to")

    captured: List[PieceRecord] = []

    def on_capture(piece: Piece) -> None:
        captured.append(PieceRecord.from_piece(piece))

    game.board.register_capture_listener(on_capture)
    try:
        game.move_piece(src, dst)
    except OutOfBoundsError as e:
        raise BadPayload(str(e)) from None
    except PieceMoveError as e:
        legal = [[p.row, p.column] for p in legal_destinations(game, src)]
        return _error(e.kind, str(e), ERROR_STATUS.get(e.kind, 400), legalMoves=legal)
    game.advance_turn()

    payload = _game_payload(game)
    payload["captured"] = [
        {"kind": rec.kind.value, "owner": rec.owner, "critical": rec.critical} for rec in captured
    ]
    return jsonify(payload)


# ---------- Save slots ----------

def _db_path() -> str:
    return app.config.get("KWAZAM_DB", DEFAULT_DB)


@app.get("/api/saves")
def api_saves() -> Any:
    saves = [
        {"slot": slot, "turnCount": turn, "currentPlayer": player, "savedAt": saved_at}
        for slot, turn, player, saved_at in db_list_games(_db_path())
    ]
    return jsonify({"ok": True, "saves": saves})


@app.post("/api/save")
def api_save() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    slot = str(body.get("slot", "")).strip()
    if not slot:
        raise BadPayload("slot required")
    game = json_to_game(body.get("state"))
    db_store_game(_db_path(), slot, take_snapshot(game))
    return jsonify({"ok": True, "slot": slot})


@app.post("/api/load")
def api_load() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    slot = str(body.get("slot", "")).strip()
    if not slot:
        raise BadPayload("slot required")
    try:
        snapshot = db_load_game(_db_path(), slot)
        if snapshot is None:
            return _error("notFound", f"no save named {slot!r}", 404)
        game = game_from_snapshot(snapshot)
    except SnapshotFormatError as e:
        raise BadPayload(f"save {slot!r} is unreadable: {e}") from None
    return jsonify(_game_payload(game))


@app.delete("/api/saves/<slot>")
def api_delete_save(slot: str) -> Any:
    if not db_delete_game(_db_path(), slot):
        return _error("notFound", f"no save named {slot!r}", 404)
    return jsonify({"ok": True, "slot": slot})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    configure_logging()
    debug = env_flag("FLASK_DEBUG", os.getenv("DEBUG", "0"))
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", "5000")), debug=debug)
