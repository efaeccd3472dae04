"""CP-SAT sudoku solving and solution counting using OR-Tools."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from ..core.constants import SUDOKU_BOX, SUDOKU_SIZE
from ..core.exceptions import PuzzleFormatError, SolverTimeoutError
from ..core.models import Board
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

Cell = Tuple[int, int]


def _check_board(board: Sequence[Sequence[int]]) -> None:
    if len(board) != SUDOKU_SIZE or any(len(row) != SUDOKU_SIZE for row in board):
        raise PuzzleFormatError("Sudoku board must be 9x9")
    for row in board:
        for value in row:
            if not isinstance(value, int) or not 0 <= value <= SUDOKU_SIZE:
                raise PuzzleFormatError(f"Invalid sudoku cell value: {value!r}")


def _build_model(board: Sequence[Sequence[int]]) -> Tuple[cp_model.CpModel, Dict[Cell, cp_model.IntVar]]:
    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell variables (givens pinned to their digit)
    # ------------------------------------------------------------------
    cells: Dict[Cell, cp_model.IntVar] = {}
    for r in range(SUDOKU_SIZE):
        for c in range(SUDOKU_SIZE):
            given = board[r][c]
            low, high = (given, given) if given else (1, SUDOKU_SIZE)
            cells[(r, c)] = model.new_int_var(low, high, f"X_{r}_{c}")

    # ------------------------------------------------------------------
    # Step 2: Row, column and box uniqueness
    # ------------------------------------------------------------------
    for i in range(SUDOKU_SIZE):
        model.add_all_different([cells[(i, c)] for c in range(SUDOKU_SIZE)])
        model.add_all_different([cells[(r, i)] for r in range(SUDOKU_SIZE)])
    for box_row in range(0, SUDOKU_SIZE, SUDOKU_BOX):
        for box_col in range(0, SUDOKU_SIZE, SUDOKU_BOX):
            model.add_all_different([
                cells[(r, c)]
                for r in range(box_row, box_row + SUDOKU_BOX)
                for c in range(box_col, box_col + SUDOKU_BOX)
            ])
    return model, cells


def _new_solver(timeout: float) -> cp_model.CpSolver:
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 4
    return solver


def _extract(solver: cp_model.CpSolver, cells: Dict[Cell, cp_model.IntVar]) -> Board:
    return tuple(
        tuple(solver.value(cells[(r, c)]) for c in range(SUDOKU_SIZE))
        for r in range(SUDOKU_SIZE)
    )


def _forbid_assignment(
    model: cp_model.CpModel,
    cells: Dict[Cell, cp_model.IntVar],
    free: List[Cell],
    solution: Board,
) -> None:
    """Require at least one free cell to differ from ``solution``."""
    diffs = []
    for r, c in free:
        b = model.new_bool_var(f"ne_{r}_{c}_{len(diffs)}")
        model.add(cells[(r, c)] != solution[r][c]).only_enforce_if(b)
        model.add(cells[(r, c)] == solution[r][c]).only_enforce_if(~b)
        diffs.append(b)
    model.add_bool_or(diffs)


def solve_sudoku(board: Sequence[Sequence[int]], timeout: float = 10.0) -> Optional[Board]:
    """Return one completion of ``board`` (0 = empty), or ``None`` if none exists."""

    _check_board(board)
    model, cells = _build_model(board)
    solver = _new_solver(timeout)
    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no sudoku solution (status=%s)", solver.status_name(status))
        return None
    LOGGER.debug("CP-SAT: sudoku solved in %.3fs", solver.wall_time)
    return _extract(solver, cells)


def count_solutions(
    board: Sequence[Sequence[int]],
    limit: int = 2,
    timeout: float = 10.0,
) -> int:
    """Count completions of ``board``, stopping once ``limit`` are found.

    Raises :class:`SolverTimeoutError` when a solve ends without either a
    solution or a proof that none is left.
    """

    _check_board(board)
    model, cells = _build_model(board)
    free = [(r, c) for r in range(SUDOKU_SIZE) for c in range(SUDOKU_SIZE) if not board[r][c]]
    solver = _new_solver(timeout)
    found = 0
    while found < limit:
        status = solver.solve(model)
        if status == cp_model.INFEASIBLE:
            break
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            LOGGER.warning("CP-SAT: solution count stopped early (status=%s)", solver.status_name(status))
            raise SolverTimeoutError(
                f"Solution count unproven after {found} solution(s) ({solver.status_name(status)})"
            )
        found += 1
        if not free:
            break
        _forbid_assignment(model, cells, free, _extract(solver, cells))
    return found


def has_unique_solution(board: Sequence[Sequence[int]], timeout: float = 10.0) -> bool:
    """True only when CP-SAT proves exactly one completion exists."""
    try:
        return count_solutions(board, limit=2, timeout=timeout) == 1
    except SolverTimeoutError:
        return False
