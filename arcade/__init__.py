"""Puzzle arcade core: generation, move rules and scoring for three games.

This package exposes the public API surface via:

- ``arcade.engine.base.create_game``: builds a registered game by name.
- ``arcade.engine.session.SessionController``: drives one play session.
- ``arcade.engine.store`` stores: persist session documents.

Importing the package registers the sliding puzzle, number maze and sudoku.
"""

from .engine.base import PuzzleGame, create_game, get_game_names
from .engine.maze import MazeConfig, NumberMaze
from .engine.session import SessionController
from .engine.sliding import SlidingPuzzle, SlidingPuzzleConfig
from .engine.store import InMemorySessionStore, JsonSessionStore, SessionStore
from .engine.sudoku import Sudoku, SudokuConfig

__all__ = [
    "PuzzleGame",
    "create_game",
    "get_game_names",
    "SlidingPuzzle",
    "SlidingPuzzleConfig",
    "NumberMaze",
    "MazeConfig",
    "Sudoku",
    "SudokuConfig",
    "SessionController",
    "SessionStore",
    "JsonSessionStore",
    "InMemorySessionStore",
]

__version__ = "0.1.0"
