"""Pretty-print helpers for puzzle boards and scores."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

from ..core.constants import EMPTY_TILE, SUDOKU_BOX, SUDOKU_SIZE
from ..core.models import MazeState, ScoreResult, SlidingPuzzleState, SudokuState

if TYPE_CHECKING:
    from ..engine.session import SessionController


def format_sliding(state: SlidingPuzzleState) -> str:
    width = len(str(state.size * state.size - 1))
    lines = []
    for r in range(state.size):
        row = state.tiles[r * state.size:(r + 1) * state.size]
        lines.append(" ".join("." * width if v == EMPTY_TILE else f"{v:>{width}}" for v in row))
    return "\n".join(lines)


def format_maze(state: MazeState) -> str:
    lines = [
        f"Start:   {state.start_number}",
        f"Target:  {state.target_number}",
        f"Current: {state.current_number}",
    ]
    if state.operations:
        steps = ", ".join(
            move.operation.value if move.operand is None else f"{move.operation.value} {move.operand}"
            for move in state.operations
        )
        lines.append(f"Moves:   {steps}")
    return "\n".join(lines)


def format_sudoku(state: SudokuState) -> str:
    divider = "------+-------+------"
    lines = []
    for r in range(SUDOKU_SIZE):
        if r and r % SUDOKU_BOX == 0:
            lines.append(divider)
        parts = []
        for c in range(SUDOKU_SIZE):
            if c and c % SUDOKU_BOX == 0:
                parts.append("|")
            value = state.board[r][c]
            parts.append(str(value) if value else ".")
        lines.append(" ".join(parts))
    return "\n".join(lines)


def format_state(state) -> str:
    if isinstance(state, SlidingPuzzleState):
        return format_sliding(state)
    if isinstance(state, MazeState):
        return format_maze(state)
    if isinstance(state, SudokuState):
        return format_sudoku(state)
    raise TypeError(f"Unsupported puzzle state: {type(state).__name__}")


def pretty_print_state(state, *, label: Optional[str] = None, stream=None) -> None:
    """Print a puzzle board in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_state(state), file=stream)


def print_score(result: ScoreResult, *, stream=None) -> None:
    stream = stream or sys.stdout
    print(f"Score:  {result.score}", file=stream)
    print(f"Rating: {result.rating}", file=stream)
    if result.message:
        print(f"        {result.message}", file=stream)
    if result.breakdown:
        print(file=stream)
        print("--- Breakdown ---", file=stream)
        for name, value in result.breakdown.items():
            print(f"  {name:<18} {value:g}", file=stream)


def print_session(session: "SessionController", *, stream=None) -> None:
    """Print board, status and telemetry of a session."""

    stream = stream or sys.stdout
    telemetry = session.telemetry
    print(f"Session {session.session_id} [{session.game.name}, {session.difficulty.value}]", file=stream)
    print(format_state(session.state), file=stream)
    print(file=stream)
    print(f"  Status:   {session.status.value}", file=stream)
    print(f"  Moves:    {telemetry.move_count} (perfect {telemetry.perfect_move_count})", file=stream)
    print(f"  Time:     {telemetry.elapsed_seconds}s", file=stream)
    print(f"  Hints:    {telemetry.hints_used}", file=stream)
    print(f"  Mistakes: {telemetry.mistakes}", file=stream)
    print(f"  Streak:   {telemetry.current_streak} (best {telemetry.best_streak})", file=stream)
