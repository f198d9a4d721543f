"""
Kwazam core Python package.

Rules engine for Kwazam Chess plus the thin collaborators around it.
Modules:
- types.py: Position, Player, board dimensions
- pieces.py: PieceKind, Piece (movement geometry, jumping, switching)
- board.py: Cell, Board (moves, captures, edge events)
- game_master.py: GameMaster, KwazamGameMaster (turns, elimination, win)
- layout.py: starting position and new_game
- moves.py: legal destinations and move parsing for front-ends
- snapshot.py: GameSnapshot and its text/JSON codecs
- db.py: sqlite save slots
- config.py: environment settings and logging setup
- errors.py: move rejection kinds and format errors
- cli.py: terminal front-end
"""
