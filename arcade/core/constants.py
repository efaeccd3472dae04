"""Shared constants and enumerations for the arcade puzzle core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class GameType(str, Enum):
    """Games with a generator/legality/scoring core."""

    SLIDING_PUZZLE = "sliding-puzzle"
    NUMBER_MAZE = "number-maze"
    SUDOKU = "sudoku"


class SlidingDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class MazeDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"
    MASTER = "master"


class SudokuDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class MazeOperation(str, Enum):
    """Arithmetic operations a maze move may apply."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    SQUARE = "square"
    SQRT = "sqrt"


OPERAND_OPERATIONS = frozenset(
    {MazeOperation.ADD, MazeOperation.SUBTRACT, MazeOperation.MULTIPLY, MazeOperation.DIVIDE}
)


class SudokuMoveKind(str, Enum):
    FILL = "fill"
    CLEAR = "clear"
    HINT = "hint"


class SessionStatus(str, Enum):
    """Lifecycle of a play session. Everything but ACTIVE is frozen."""

    ACTIVE = "active"
    SOLVED = "solved"
    FAILED = "failed"
    ABANDONED = "abandoned"


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

EMPTY_TILE = 0
MIN_SLIDING_SIZE = 3
MAX_SLIDING_SIZE = 6
DEFAULT_SHUFFLE_MOVES = 1000

# Largest magnitude a maze value may reach through play.
MAZE_VALUE_LIMIT = 10 ** 15

SUDOKU_SIZE = 9
SUDOKU_BOX = 3
SUDOKU_CELLS = SUDOKU_SIZE * SUDOKU_SIZE


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


# ----------------------------------------------------------------------
# Per-difficulty generation parameters
# ----------------------------------------------------------------------
SLIDING_DEFAULT_SIZE: Dict[SlidingDifficulty, int] = {
    SlidingDifficulty.EASY: 3,
    SlidingDifficulty.MEDIUM: 4,
    SlidingDifficulty.HARD: 5,
    SlidingDifficulty.EXPERT: 6,
}

# Estimated optimal solve lengths, used when no per-puzzle lower bound is known.
SLIDING_OPTIMAL_MOVES: Dict[int, int] = {3: 22, 4: 80, 5: 150, 6: 250}


@dataclass(frozen=True)
class MazeParams:
    start_range: Tuple[int, int]
    additive_range: Tuple[int, int]
    factor_range: Tuple[int, int]
    max_abs_value: int


MAZE_PARAMS: Dict[MazeDifficulty, MazeParams] = {
    MazeDifficulty.BEGINNER: MazeParams((1, 10), (1, 5), (2, 2), 60),
    MazeDifficulty.INTERMEDIATE: MazeParams((1, 15), (1, 9), (2, 3), 120),
    MazeDifficulty.ADVANCED: MazeParams((1, 20), (1, 12), (2, 3), 250),
    MazeDifficulty.EXPERT: MazeParams((1, 25), (1, 15), (2, 4), 500),
    MazeDifficulty.MASTER: MazeParams((1, 30), (1, 20), (2, 5), 1000),
}


@dataclass(frozen=True)
class Benchmark:
    min_moves: int
    max_moves: int
    max_time: int


MAZE_BENCHMARKS: Dict[MazeDifficulty, Benchmark] = {
    MazeDifficulty.BEGINNER: Benchmark(15, 25, 300),
    MazeDifficulty.INTERMEDIATE: Benchmark(10, 14, 240),
    MazeDifficulty.ADVANCED: Benchmark(8, 9, 180),
    MazeDifficulty.EXPERT: Benchmark(6, 7, 120),
    MazeDifficulty.MASTER: Benchmark(4, 5, 90),
}


@dataclass(frozen=True)
class SudokuParams:
    cells_to_remove: int
    rotational_symmetry: bool
    max_hints: int
    max_mistakes: int


SUDOKU_PARAMS: Dict[SudokuDifficulty, SudokuParams] = {
    SudokuDifficulty.EASY: SudokuParams(35, True, 5, 5),
    SudokuDifficulty.MEDIUM: SudokuParams(45, True, 3, 3),
    SudokuDifficulty.HARD: SudokuParams(55, False, 2, 2),
    SudokuDifficulty.EXPERT: SudokuParams(65, False, 1, 1),
}
