"""Sudoku: backtracking grid fill, cell removal and soft-validated moves.

Wrong digits are accepted and counted as mistakes rather than rejected, so a
player can see and correct them. Removal does not verify that the reduced
puzzle has a unique solution unless ``SudokuConfig.require_unique_solution``
is set, in which case every removal is checked with the CP-SAT solver.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..core.constants import (
    SUDOKU_BOX,
    SUDOKU_CELLS,
    SUDOKU_PARAMS,
    SUDOKU_SIZE,
    GameType,
    SudokuDifficulty,
    SudokuMoveKind,
)
from ..core.exceptions import (
    GenerationExhaustedError,
    HintUnavailableError,
    IllegalMoveError,
    InvariantViolation,
    PuzzleFormatError,
)
from ..core.models import Board, Hint, Mask, ScoreResult, SudokuMove, SudokuState, Telemetry
from ..utils.logger import get_logger
from .base import PuzzleGame, register_game
from .scoring import round_half_up, score_sudoku
from .solver import has_unique_solution, solve_sudoku

LOGGER = get_logger(__name__)

Cell = Tuple[int, int]
DIGITS = tuple(range(1, SUDOKU_SIZE + 1))


@dataclass
class SudokuConfig:
    require_unique_solution: bool = False
    fill_step_budget: int = 10_000
    max_restarts: int = 20
    cells_to_remove: Optional[int] = None
    solver_timeout: float = 10.0
    hint_seed: Optional[int] = None


@dataclass(frozen=True)
class Conflict:
    kind: str
    cells: Tuple[Cell, ...]
    value: int


# ----------------------------------------------------------------------
# Board helpers
# ----------------------------------------------------------------------
def box_cells(row: int, col: int) -> List[Cell]:
    top = (row // SUDOKU_BOX) * SUDOKU_BOX
    left = (col // SUDOKU_BOX) * SUDOKU_BOX
    return [(r, c) for r in range(top, top + SUDOKU_BOX) for c in range(left, left + SUDOKU_BOX)]


def peers(row: int, col: int) -> Set[Cell]:
    result = {(row, c) for c in range(SUDOKU_SIZE)}
    result.update((r, col) for r in range(SUDOKU_SIZE))
    result.update(box_cells(row, col))
    result.discard((row, col))
    return result


def candidates(board: Sequence[Sequence[int]], row: int, col: int) -> List[int]:
    """Digits not yet used by the cell's row, column or box (empty for filled cells)."""

    if board[row][col]:
        return []
    used = {board[r][c] for r, c in peers(row, col)}
    return [digit for digit in DIGITS if digit not in used]


def find_conflicts(board: Sequence[Sequence[int]], row: int, col: int, value: int) -> List[Conflict]:
    """Cells sharing ``value`` with ``(row, col)``, grouped by row, column and box."""

    groups = (
        ("row", [(row, c) for c in range(SUDOKU_SIZE)]),
        ("column", [(r, col) for r in range(SUDOKU_SIZE)]),
        ("box", box_cells(row, col)),
    )
    conflicts = []
    for kind, cells in groups:
        clashing = [cell for cell in cells if cell != (row, col) and board[cell[0]][cell[1]] == value]
        if clashing:
            conflicts.append(Conflict(kind=kind, cells=((row, col), *clashing), value=value))
    return conflicts


def board_conflicts(board: Sequence[Sequence[int]]) -> Set[Cell]:
    """Every filled cell that clashes with another filled cell."""

    result: Set[Cell] = set()
    for r in range(SUDOKU_SIZE):
        for c in range(SUDOKU_SIZE):
            value = board[r][c]
            if value and find_conflicts(board, r, c, value):
                result.add((r, c))
    return result


def filled_count(board: Sequence[Sequence[int]]) -> int:
    return sum(1 for row in board for value in row if value)


def completion_percent(board: Sequence[Sequence[int]]) -> int:
    """Share of filled cells, ignoring correctness."""

    return round_half_up(filled_count(board) / SUDOKU_CELLS * 100)


def is_valid_solution(board: Sequence[Sequence[int]]) -> bool:
    full = set(DIGITS)
    for i in range(SUDOKU_SIZE):
        if set(board[i]) != full:
            return False
        if {board[r][i] for r in range(SUDOKU_SIZE)} != full:
            return False
    for top in range(0, SUDOKU_SIZE, SUDOKU_BOX):
        for left in range(0, SUDOKU_SIZE, SUDOKU_BOX):
            if {board[r][c] for r, c in box_cells(top, left)} != full:
                return False
    return True


def freeze(board: Sequence[Sequence[int]]) -> Board:
    return tuple(tuple(row) for row in board)


def parse_board(text: str) -> Board:
    """Parse an 81-character board string; ``0`` or ``.`` marks an empty cell."""

    chars = [ch for ch in text if not ch.isspace()]
    if len(chars) != SUDOKU_CELLS:
        raise PuzzleFormatError(f"Expected {SUDOKU_CELLS} cells, got {len(chars)}")
    values = []
    for ch in chars:
        if ch == ".":
            values.append(0)
        elif ch.isdigit():
            values.append(int(ch))
        else:
            raise PuzzleFormatError(f"Unexpected character in board: {ch!r}")
    return tuple(tuple(values[r * SUDOKU_SIZE:(r + 1) * SUDOKU_SIZE]) for r in range(SUDOKU_SIZE))


def format_board(board: Sequence[Sequence[int]]) -> str:
    return "".join(str(value) if value else "." for row in board for value in row)


# ----------------------------------------------------------------------
# Generation
# ----------------------------------------------------------------------
def fill_grid(rng: random.Random, step_budget: int = 10_000) -> Optional[Board]:
    """Backtracking fill with shuffled digits.

    Returns ``None`` once ``step_budget`` placements have been tried.
    """

    grid = [[0] * SUDOKU_SIZE for _ in range(SUDOKU_SIZE)]
    steps = 0

    def place(index: int) -> bool:
        nonlocal steps
        if index == SUDOKU_CELLS:
            return True
        row, col = divmod(index, SUDOKU_SIZE)
        options = candidates(grid, row, col)
        rng.shuffle(options)
        for digit in options:
            steps += 1
            if steps > step_budget:
                return False
            grid[row][col] = digit
            if place(index + 1):
                return True
            grid[row][col] = 0
        return False

    if not place(0):
        return None
    return freeze(grid)


def _partner(cell: Cell) -> Cell:
    return SUDOKU_SIZE - 1 - cell[0], SUDOKU_SIZE - 1 - cell[1]


def remove_cells(
    solution: Board,
    count: int,
    symmetric: bool,
    rng: random.Random,
) -> Board:
    """Blank exactly ``count`` cells, in rotationally symmetric pairs when asked."""

    puzzle = [list(row) for row in solution]
    order = [(r, c) for r in range(SUDOKU_SIZE) for c in range(SUDOKU_SIZE)]
    rng.shuffle(order)
    removed = 0
    for cell in order:
        if removed >= count:
            break
        r, c = cell
        if not puzzle[r][c]:
            continue
        puzzle[r][c] = 0
        removed += 1
        pr, pc = _partner(cell)
        if symmetric and removed < count and puzzle[pr][pc]:
            puzzle[pr][pc] = 0
            removed += 1
    return freeze(puzzle)


def remove_cells_unique(
    solution: Board,
    count: int,
    symmetric: bool,
    rng: random.Random,
    timeout: float = 10.0,
) -> Board:
    """Blank up to ``count`` cells, undoing any removal that admits a second solution.

    Gives up after ``count * 3`` attempts, so hard targets may keep more givens.
    """

    puzzle = [list(row) for row in solution]
    removed = 0
    attempts = 0
    while removed < count and attempts < count * 3:
        attempts += 1
        cell = (rng.randrange(SUDOKU_SIZE), rng.randrange(SUDOKU_SIZE))
        if not puzzle[cell[0]][cell[1]]:
            continue
        blanked = [cell]
        partner = _partner(cell)
        if symmetric and partner != cell and puzzle[partner[0]][partner[1]] and removed + 2 <= count:
            blanked.append(partner)
        for r, c in blanked:
            puzzle[r][c] = 0
        if has_unique_solution(puzzle, timeout=timeout):
            removed += len(blanked)
        else:
            for r, c in blanked:
                puzzle[r][c] = solution[r][c]
    if removed < count:
        LOGGER.info("Uniqueness check kept %d of %d requested removals", removed, count)
    return freeze(puzzle)


# ----------------------------------------------------------------------
# Game
# ----------------------------------------------------------------------
@register_game
class Sudoku(PuzzleGame):
    name = GameType.SUDOKU.value
    description = "Fill the 9x9 grid so every row, column and box holds 1-9"
    difficulty_type = SudokuDifficulty
    applies_hints = True

    def __init__(self, config: Optional[SudokuConfig] = None) -> None:
        self.config = config or SudokuConfig()

    def generate(self, difficulty: Any, seed: Optional[int] = None) -> SudokuState:
        difficulty = self.parse_difficulty(difficulty)
        params = SUDOKU_PARAMS[difficulty]
        rng = random.Random(seed)
        solution: Optional[Board] = None
        for attempt in range(1, self.config.max_restarts + 1):
            solution = fill_grid(rng, self.config.fill_step_budget)
            if solution is not None:
                LOGGER.debug("Sudoku grid filled on attempt %d", attempt)
                break
            LOGGER.debug("Sudoku fill exceeded %d steps; restarting", self.config.fill_step_budget)
        if solution is None:
            LOGGER.warning("Sudoku generation exhausted %d restarts", self.config.max_restarts)
            raise GenerationExhaustedError(
                f"Could not fill a sudoku grid in {self.config.max_restarts} attempts"
            )

        count = self.config.cells_to_remove
        if count is None:
            count = params.cells_to_remove
        count = max(0, min(SUDOKU_CELLS, count))
        if self.config.require_unique_solution:
            board = remove_cells_unique(
                solution, count, params.rotational_symmetry, rng, self.config.solver_timeout
            )
        else:
            board = remove_cells(solution, count, params.rotational_symmetry, rng)
        mask = tuple(tuple(bool(value) for value in row) for row in board)
        LOGGER.info(
            "Sudoku generated (%s): %d givens, unique check %s",
            difficulty.value, filled_count(board),
            "on" if self.config.require_unique_solution else "off",
        )
        return SudokuState(board=board, solution=solution, given_mask=mask)

    def from_string(self, text: str) -> SudokuState:
        """Import an external puzzle, solving it to obtain the reference solution."""

        board = parse_board(text)
        if board_conflicts(board):
            raise PuzzleFormatError("Puzzle givens conflict with each other")
        solution = solve_sudoku(board, timeout=self.config.solver_timeout)
        if solution is None:
            raise PuzzleFormatError("Puzzle has no solution")
        mask = tuple(tuple(bool(value) for value in row) for row in board)
        return SudokuState(board=board, solution=solution, given_mask=mask)

    # ------------------------------------------------------------------
    # Move rules
    # ------------------------------------------------------------------
    def _rejection(self, state: SudokuState, move: Any) -> Optional[str]:
        if not isinstance(move, SudokuMove):
            return "Not a sudoku move"
        if not (0 <= move.row < SUDOKU_SIZE and 0 <= move.col < SUDOKU_SIZE):
            return f"Cell ({move.row}, {move.col}) is off the board"
        if state.is_given(move.row, move.col):
            return f"Cell ({move.row}, {move.col}) is a given"
        try:
            kind = SudokuMoveKind(move.kind)
        except ValueError:
            return f"Unknown move kind: {move.kind!r}"
        if kind == SudokuMoveKind.FILL:
            if isinstance(move.value, bool) or move.value not in DIGITS:
                return f"Value must be 1-9, got {move.value!r}"
        elif kind == SudokuMoveKind.HINT:
            if state.value(move.row, move.col) == state.solution[move.row][move.col]:
                return f"Cell ({move.row}, {move.col}) is already correct"
        return None

    def is_legal(self, state: SudokuState, move: Any) -> bool:
        return self._rejection(state, move) is None

    def is_hint_move(self, move: Any) -> bool:
        return isinstance(move, SudokuMove) and move.kind == SudokuMoveKind.HINT

    def apply(self, state: SudokuState, move: Any) -> SudokuState:
        reason = self._rejection(state, move)
        if reason is not None:
            raise IllegalMoveError(reason)
        kind = SudokuMoveKind(move.kind)
        if kind == SudokuMoveKind.FILL:
            value = move.value
        elif kind == SudokuMoveKind.CLEAR:
            value = 0
        else:
            value = state.solution[move.row][move.col]
        board = [list(row) for row in state.board]
        board[move.row][move.col] = value
        return SudokuState(board=freeze(board), solution=state.solution, given_mask=state.given_mask)

    def is_filled(self, state: SudokuState) -> bool:
        return filled_count(state.board) == SUDOKU_CELLS

    def is_complete(self, state: SudokuState) -> bool:
        return self.is_filled(state) and state.board == state.solution

    def score(self, telemetry: Telemetry, difficulty: Any) -> ScoreResult:
        return score_sudoku(telemetry, self.parse_difficulty(difficulty))

    def check_invariants(self, state: SudokuState) -> None:
        for name, grid in (("board", state.board), ("solution", state.solution), ("given_mask", state.given_mask)):
            if len(grid) != SUDOKU_SIZE or any(len(row) != SUDOKU_SIZE for row in grid):
                raise InvariantViolation(f"Sudoku {name} is not 9x9")
        if not is_valid_solution(state.solution):
            raise InvariantViolation("Sudoku solution breaks row/column/box uniqueness")
        for r in range(SUDOKU_SIZE):
            for c in range(SUDOKU_SIZE):
                value = state.board[r][c]
                if value not in (0,) + DIGITS:
                    raise InvariantViolation(f"Invalid value {value!r} at ({r}, {c})")
                if state.given_mask[r][c] and value != state.solution[r][c]:
                    raise InvariantViolation(f"Given cell ({r}, {c}) was modified")

    # ------------------------------------------------------------------
    # Session support
    # ------------------------------------------------------------------
    def hint(self, state: SudokuState) -> Hint:
        cells = [
            (r, c)
            for r in range(SUDOKU_SIZE)
            for c in range(SUDOKU_SIZE)
            if not state.board[r][c]
        ]
        if not cells:
            cells = [
                (r, c)
                for r in range(SUDOKU_SIZE)
                for c in range(SUDOKU_SIZE)
                if state.board[r][c] != state.solution[r][c]
            ]
        if not cells:
            raise HintUnavailableError("No cell left to hint")
        # Seeded from the board so the same position always gets the same hint.
        rng = random.Random(f"{self.config.hint_seed}:{format_board(state.board)}")
        row, col = rng.choice(cells)
        value = state.solution[row][col]
        return Hint(
            SudokuMove.hint(row, col),
            f"The value {value} goes in row {row + 1}, column {col + 1}",
        )

    def classify(self, before: SudokuState, move: Any, after: SudokuState) -> Tuple[bool, bool]:
        kind = SudokuMoveKind(move.kind)
        expected = before.solution[move.row][move.col]
        if kind == SudokuMoveKind.FILL:
            correct = move.value == expected
            return correct, not correct
        if kind == SudokuMoveKind.CLEAR:
            return before.board[move.row][move.col] != expected, False
        return True, False

    def perfect_moves(self, state: SudokuState) -> int:
        return sum(
            1
            for r in range(SUDOKU_SIZE)
            for c in range(SUDOKU_SIZE)
            if state.board[r][c] != state.solution[r][c]
        )

    def max_hints(self, difficulty: Any) -> Optional[int]:
        return SUDOKU_PARAMS[self.parse_difficulty(difficulty)].max_hints

    def max_mistakes(self, difficulty: Any) -> Optional[int]:
        return SUDOKU_PARAMS[self.parse_difficulty(difficulty)].max_mistakes

    def summarize(self, state: SudokuState) -> Dict[str, Any]:
        return {
            "filled": filled_count(state.board),
            "completion": completion_percent(state.board),
        }

    def state_to_jsonable(self, state: SudokuState) -> Dict[str, Any]:
        return {
            "board": [list(row) for row in state.board],
            "solution": [list(row) for row in state.solution],
            "given_mask": [list(row) for row in state.given_mask],
        }

    def state_from_jsonable(self, data: Mapping[str, Any]) -> SudokuState:
        mask: Mask = tuple(tuple(bool(v) for v in row) for row in data["given_mask"])
        return SudokuState(
            board=freeze([[int(v) for v in row] for row in data["board"]]),
            solution=freeze([[int(v) for v in row] for row in data["solution"]]),
            given_mask=mask,
        )

    def move_from_jsonable(self, data: Mapping[str, Any]) -> SudokuMove:
        return SudokuMove(
            row=int(data["row"]),
            col=int(data["col"]),
            value=int(data.get("value", 0)),
            kind=SudokuMoveKind(data.get("kind", SudokuMoveKind.FILL.value)),
        )
