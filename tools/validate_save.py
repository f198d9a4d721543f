#!/usr/bin/env python3
"""
Validate Kwazam save files (or every slot of a save DB) and summarize them.

- Parses each save with the same codec the game uses.
- Checks:
  * exactly one critical piece per player still in the rotation
  * critical pieces are Sau
  * no piece kind outside RAM/BIZ/SAU/TOR/XOR (enforced by the parser)
  * a finished game (single player left) is reported as such
- Prints a JSON summary with per-save results

Usage:
  python tools/validate_save.py saves/game1.txt saves/game2.txt
  python tools/validate_save.py --db data/kwazam_saves.db
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from collections import Counter
from typing import Any, Dict, List

# Ensure the repo root is importable when run as a script
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from game import (  # noqa: E402
    GameSnapshot,
    PieceKind,
    SnapshotFormatError,
    db_list_games,
    db_load_game,
    snapshot_from_text,
)


def check_snapshot(snapshot: GameSnapshot) -> List[str]:
    """Returns a list of problems; empty if the snapshot is plausible."""
    problems: List[str] = []
    critical_by_owner: Counter = Counter()
    kinds: Counter = Counter()
    for row in snapshot.cells:
        for rec in row:
            if rec is None:
                continue
            kinds[rec.kind.value] += 1
            if rec.critical:
                critical_by_owner[rec.owner] += 1
                if rec.kind is not PieceKind.SAU:
                    problems.append(f"critical {rec.kind.value} owned by {rec.owner}")
    for pid in snapshot.players:
        n = critical_by_owner.get(pid, 0)
        if n != 1 and len(snapshot.players) > 1:
            problems.append(f"player {pid} has {n} critical pieces")
    return problems


def summarize(name: str, snapshot: GameSnapshot) -> Dict[str, Any]:
    pieces = Counter(rec.owner for row in snapshot.cells for rec in row if rec is not None)
    problems = check_snapshot(snapshot)
    return {
        "name": name,
        "turnCount": snapshot.turn_count,
        "players": list(snapshot.players),
        "currentPlayer": snapshot.current_player,
        "finished": len(snapshot.players) == 1,
        "piecesByOwner": dict(pieces),
        "ok": not problems,
        "problems": problems,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate Kwazam save files")
    parser.add_argument("files", nargs="*", help="Text save files to check")
    parser.add_argument("--db", default=None, help="Also check every slot in this save DB")
    args = parser.parse_args()

    results: List[Dict[str, Any]] = []
    for path in args.files:
        try:
            with open(path, "r", encoding="utf-8") as f:
                snapshot = snapshot_from_text(f.read())
        except (OSError, SnapshotFormatError) as e:
            results.append({"name": path, "ok": False, "problems": [str(e)]})
            continue
        results.append(summarize(path, snapshot))

    if args.db:
        for slot, _turn, _player, _saved_at in db_list_games(args.db):
            try:
                snapshot = db_load_game(args.db, slot)
            except SnapshotFormatError as e:
                results.append({"name": f"{args.db}:{slot}", "ok": False, "problems": [str(e)]})
                continue
            if snapshot is not None:
                results.append(summarize(f"{args.db}:{slot}", snapshot))

    bad = sum(1 for r in results if not r["ok"])
    print(json.dumps({"checked": len(results), "bad": bad, "results": results}, indent=2))
    sys.exit(1 if bad else 0)


if __name__ == "__main__":
    main()
