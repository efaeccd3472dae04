"""Data models supporting the puzzle core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .constants import EMPTY_TILE, MazeOperation, SudokuMoveKind

Board = Tuple[Tuple[int, ...], ...]
Mask = Tuple[Tuple[bool, ...], ...]


# ----------------------------------------------------------------------
# Puzzle states
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SlidingPuzzleState:
    """Flat row-major tile sequence of a ``size x size`` sliding puzzle."""

    size: int
    tiles: Tuple[int, ...]

    @property
    def empty_index(self) -> int:
        return self.tiles.index(EMPTY_TILE)

    def coords(self, index: int) -> Tuple[int, int]:
        return divmod(index, self.size)

    def index(self, row: int, col: int) -> int:
        return row * self.size + col


@dataclass(frozen=True)
class MazeMove:
    operation: MazeOperation
    operand: Optional[Union[int, float]] = None

    def to_jsonable(self) -> Dict[str, Any]:
        return {"operation": MazeOperation(self.operation).value, "operand": self.operand}


@dataclass(frozen=True)
class MazeState:
    """Scalar number maze: reach ``target_number`` from ``start_number``."""

    start_number: int
    target_number: int
    current_number: int
    operations: Tuple[MazeMove, ...] = ()
    witness: Tuple[MazeMove, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class SudokuState:
    board: Board
    solution: Board
    given_mask: Mask

    def value(self, row: int, col: int) -> int:
        return self.board[row][col]

    def is_given(self, row: int, col: int) -> bool:
        return self.given_mask[row][col]


PuzzleState = Union[SlidingPuzzleState, MazeState, SudokuState]


# ----------------------------------------------------------------------
# Moves
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SlideMove:
    """Swap the empty cell with the tile currently at ``tile_index``."""

    tile_index: int

    def to_jsonable(self) -> Dict[str, Any]:
        return {"tile_index": self.tile_index}


@dataclass(frozen=True)
class SudokuMove:
    row: int
    col: int
    value: int = 0
    kind: SudokuMoveKind = SudokuMoveKind.FILL

    @classmethod
    def fill(cls, row: int, col: int, value: int) -> "SudokuMove":
        return cls(row=row, col=col, value=value, kind=SudokuMoveKind.FILL)

    @classmethod
    def clear(cls, row: int, col: int) -> "SudokuMove":
        return cls(row=row, col=col, value=0, kind=SudokuMoveKind.CLEAR)

    @classmethod
    def hint(cls, row: int, col: int) -> "SudokuMove":
        return cls(row=row, col=col, value=0, kind=SudokuMoveKind.HINT)

    def to_jsonable(self) -> Dict[str, Any]:
        return {"row": self.row, "col": self.col, "value": self.value, "kind": SudokuMoveKind(self.kind).value}


Move = Union[SlideMove, MazeMove, SudokuMove]


@dataclass(frozen=True)
class Hint:
    """Suggested next move plus a human-readable nudge."""

    move: Optional[Move]
    text: str


# ----------------------------------------------------------------------
# Session records
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class MoveLogEntry:
    """One applied move or consumed hint. Entries are appended once and never edited.

    ``move`` is ``None`` for a hint that only carried advice.
    """

    move_number: int
    move: Optional[Move]
    timestamp: float
    summary: Mapping[str, Any] = field(default_factory=dict, compare=False)
    is_correct: bool = True
    is_mistake: bool = False
    is_hint: bool = False


@dataclass(frozen=True)
class Telemetry:
    """Scoring inputs. Built by ``derive_telemetry`` from a move log."""

    move_count: int = 0
    elapsed_seconds: int = 0
    hints_used: int = 0
    mistakes: int = 0
    current_streak: int = 0
    best_streak: int = 0
    perfect_move_count: int = 0
    completed: bool = False


@dataclass(frozen=True)
class ScoreResult:
    score: int
    rating: str
    message: str = ""
    breakdown: Mapping[str, float] = field(default_factory=dict, compare=False)
