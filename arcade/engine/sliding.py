"""Sliding tile puzzle: scramble-by-legal-moves generation and move rules."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.constants import (
    DEFAULT_SHUFFLE_MOVES,
    EMPTY_TILE,
    MAX_SLIDING_SIZE,
    MIN_SLIDING_SIZE,
    ORTHOGONAL_STEPS,
    SLIDING_DEFAULT_SIZE,
    Bounds,
    GameType,
    SlidingDifficulty,
)
from ..core.exceptions import HintUnavailableError, IllegalMoveError, InvariantViolation
from ..core.models import Hint, ScoreResult, SlideMove, SlidingPuzzleState, Telemetry
from ..utils.logger import get_logger
from .base import PuzzleGame, register_game
from .scoring import score_sliding

LOGGER = get_logger(__name__)


@dataclass
class SlidingPuzzleConfig:
    size: Optional[int] = None
    shuffle_moves: int = DEFAULT_SHUFFLE_MOVES

    def resolve_size(self, difficulty: SlidingDifficulty) -> int:
        size = self.size if self.size is not None else SLIDING_DEFAULT_SIZE[difficulty]
        if not MIN_SLIDING_SIZE <= size <= MAX_SLIDING_SIZE:
            raise ValueError(
                f"Puzzle size must be between {MIN_SLIDING_SIZE} and {MAX_SLIDING_SIZE}, got {size}"
            )
        return size


# ----------------------------------------------------------------------
# Board helpers
# ----------------------------------------------------------------------
def solved_tiles(size: int) -> Tuple[int, ...]:
    """Canonical goal: ``1 .. N²-1`` in order with the empty cell last."""

    return tuple(range(1, size * size)) + (EMPTY_TILE,)


def neighbors(state: SlidingPuzzleState) -> List[int]:
    """Indices of tiles orthogonally adjacent to the empty cell."""

    bounds = Bounds(state.size, state.size)
    row, col = state.coords(state.empty_index)
    result = []
    for dr, dc in ORTHOGONAL_STEPS:
        nr, nc = row + dr, col + dc
        if bounds.contains(nr, nc):
            result.append(state.index(nr, nc))
    return result


def swap_empty(state: SlidingPuzzleState, tile_index: int) -> SlidingPuzzleState:
    tiles = list(state.tiles)
    empty = state.empty_index
    tiles[empty], tiles[tile_index] = tiles[tile_index], tiles[empty]
    return SlidingPuzzleState(size=state.size, tiles=tuple(tiles))


def manhattan_distance(state: SlidingPuzzleState) -> int:
    """Sum of each tile's grid distance from its home cell (empty excluded).

    Every move shifts one tile by one cell, so this is a lower bound on the
    number of moves left.
    """

    total = 0
    for index, value in enumerate(state.tiles):
        if value == EMPTY_TILE:
            continue
        row, col = state.coords(index)
        home_row, home_col = state.coords(value - 1)
        total += abs(row - home_row) + abs(col - home_col)
    return total


def inversion_count(tiles: Sequence[int]) -> int:
    values = [value for value in tiles if value != EMPTY_TILE]
    inversions = 0
    for i, value in enumerate(values):
        for other in values[i + 1:]:
            if value > other:
                inversions += 1
    return inversions


def is_solvable(state: SlidingPuzzleState) -> bool:
    """Parity test for reachability of the canonical goal.

    Odd widths need an even inversion count. Even widths need the inversion
    count plus the empty cell's row (counted from the bottom, starting at 1)
    to be odd.
    """

    inversions = inversion_count(state.tiles)
    if state.size % 2 == 1:
        return inversions % 2 == 0
    row_from_bottom = state.size - state.coords(state.empty_index)[0]
    return (inversions + row_from_bottom) % 2 == 1


def scramble(
    size: int,
    moves: int,
    rng: random.Random,
) -> Tuple[SlidingPuzzleState, List[SlideMove]]:
    """Apply ``moves`` uniformly random legal moves to the solved board.

    Returns the scrambled state and the applied path. A path that lands back
    on the goal gets one extra move, so the result is never pre-solved.
    """

    state = SlidingPuzzleState(size=size, tiles=solved_tiles(size))
    path: List[SlideMove] = []
    for _ in range(moves):
        target = rng.choice(neighbors(state))
        state = swap_empty(state, target)
        path.append(SlideMove(target))
    if state.tiles == solved_tiles(size):
        target = rng.choice(neighbors(state))
        state = swap_empty(state, target)
        path.append(SlideMove(target))
        LOGGER.debug("Scramble returned to the goal; applied one extra move")
    return state, path


def solution_path(size: int, path: Sequence[SlideMove]) -> List[SlideMove]:
    """Invert a scramble path into a sequence that restores the goal."""

    empties = [size * size - 1] + [move.tile_index for move in path]
    return [SlideMove(empties[i]) for i in range(len(path) - 1, -1, -1)]


# ----------------------------------------------------------------------
# Game
# ----------------------------------------------------------------------
@register_game
class SlidingPuzzle(PuzzleGame):
    name = GameType.SLIDING_PUZZLE.value
    description = "Slide tiles into order using the single empty cell"
    difficulty_type = SlidingDifficulty

    def __init__(self, config: Optional[SlidingPuzzleConfig] = None) -> None:
        self.config = config or SlidingPuzzleConfig()

    def generate(self, difficulty: Any, seed: Optional[int] = None) -> SlidingPuzzleState:
        state, _ = self.generate_with_path(difficulty, seed)
        return state

    def generate_with_path(
        self,
        difficulty: Any,
        seed: Optional[int] = None,
    ) -> Tuple[SlidingPuzzleState, List[SlideMove]]:
        difficulty = self.parse_difficulty(difficulty)
        size = self.config.resolve_size(difficulty)
        state, path = scramble(size, self.config.shuffle_moves, random.Random(seed))
        LOGGER.info(
            "Scrambled %dx%d puzzle with %d moves (distance %d)",
            size, size, len(path), manhattan_distance(state),
        )
        return state, path

    def is_legal(self, state: SlidingPuzzleState, move: Any) -> bool:
        if not isinstance(move, SlideMove):
            return False
        if not 0 <= move.tile_index < len(state.tiles):
            return False
        row, col = state.coords(move.tile_index)
        empty_row, empty_col = state.coords(state.empty_index)
        return abs(row - empty_row) + abs(col - empty_col) == 1

    def apply(self, state: SlidingPuzzleState, move: Any) -> SlidingPuzzleState:
        if not self.is_legal(state, move):
            raise IllegalMoveError(
                f"Tile {getattr(move, 'tile_index', move)!r} is not adjacent to the empty cell "
                f"at {state.empty_index}"
            )
        return swap_empty(state, move.tile_index)

    def is_complete(self, state: SlidingPuzzleState) -> bool:
        return state.tiles == solved_tiles(state.size)

    def score(self, telemetry: Telemetry, difficulty: Any) -> ScoreResult:
        difficulty = self.parse_difficulty(difficulty)
        return score_sliding(telemetry, difficulty, size=self.config.resolve_size(difficulty))

    def check_invariants(self, state: SlidingPuzzleState) -> None:
        expected = state.size * state.size
        if len(state.tiles) != expected:
            raise InvariantViolation(f"Expected {expected} tiles, found {len(state.tiles)}")
        if sorted(state.tiles) != list(range(expected)):
            raise InvariantViolation(f"Tile multiset corrupted: {state.tiles}")

    def hint(self, state: SlidingPuzzleState) -> Hint:
        if self.is_complete(state):
            raise HintUnavailableError("Puzzle is already solved")
        best = min(neighbors(state), key=lambda idx: (manhattan_distance(swap_empty(state, idx)), idx))
        return Hint(SlideMove(best), f"Try sliding tile {state.tiles[best]} into the empty space.")

    def classify(
        self,
        before: SlidingPuzzleState,
        move: Any,
        after: SlidingPuzzleState,
    ) -> Tuple[bool, bool]:
        return manhattan_distance(after) < manhattan_distance(before), False

    def perfect_moves(self, state: SlidingPuzzleState) -> int:
        return manhattan_distance(state)

    def summarize(self, state: SlidingPuzzleState) -> Dict[str, Any]:
        return {"empty_index": state.empty_index, "distance": manhattan_distance(state)}

    def state_to_jsonable(self, state: SlidingPuzzleState) -> Dict[str, Any]:
        return {"size": state.size, "tiles": list(state.tiles)}

    def state_from_jsonable(self, data: Mapping[str, Any]) -> SlidingPuzzleState:
        return SlidingPuzzleState(size=int(data["size"]), tiles=tuple(int(v) for v in data["tiles"]))

    def move_from_jsonable(self, data: Mapping[str, Any]) -> SlideMove:
        return SlideMove(int(data["tile_index"]))
