"""Number maze: reach a target integer by chaining arithmetic operations."""

from __future__ import annotations

import math
import numbers
import random
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..core.constants import (
    MAZE_BENCHMARKS,
    MAZE_PARAMS,
    MAZE_VALUE_LIMIT,
    OPERAND_OPERATIONS,
    GameType,
    MazeDifficulty,
    MazeOperation,
    MazeParams,
)
from ..core.exceptions import (
    GenerationExhaustedError,
    HintUnavailableError,
    IllegalMoveError,
    InvariantViolation,
)
from ..core.models import Hint, MazeMove, MazeState, ScoreResult, Telemetry
from ..utils.logger import get_logger
from .base import PuzzleGame, register_game
from .scoring import round_half_up, score_maze

LOGGER = get_logger(__name__)

Operand = Union[int, float]


@dataclass
class MazeConfig:
    min_steps: int = 8
    max_steps: int = 12
    max_restarts: int = 50
    max_step_attempts: int = 200


# ----------------------------------------------------------------------
# Arithmetic
# ----------------------------------------------------------------------
def validate_move(current: int, move: Any) -> Optional[str]:
    """Return why ``move`` is illegal at ``current``, or ``None`` if legal."""

    if not isinstance(move, MazeMove):
        return "Not a maze move"
    try:
        operation = MazeOperation(move.operation)
    except ValueError:
        return "Invalid operation"
    operand = move.operand
    if operation in OPERAND_OPERATIONS:
        if operand is None:
            return "Operand is required for this operation"
        if isinstance(operand, bool) or not isinstance(operand, numbers.Real):
            return "Operand must be a number"
        if not math.isfinite(operand):
            return "Operand must be finite"
        if operation == MazeOperation.DIVIDE and operand == 0:
            return "Cannot divide by zero"
    if operation == MazeOperation.SQRT and current < 0:
        return "Cannot take square root of negative number"
    if abs(apply_operation(current, operation, operand)) > MAZE_VALUE_LIMIT:
        return "Result is too large"
    return None


def apply_operation(current: int, operation: MazeOperation, operand: Optional[Operand] = None) -> int:
    """Apply one operation; every result is floored to an integer.

    Float operands are converted to exact fractions, so large values never
    pass through float arithmetic.
    """

    operation = MazeOperation(operation)
    if operation in OPERAND_OPERATIONS:
        value = Fraction(operand)
    if operation == MazeOperation.ADD:
        return math.floor(current + value)
    if operation == MazeOperation.SUBTRACT:
        return math.floor(current - value)
    if operation == MazeOperation.MULTIPLY:
        return math.floor(current * value)
    if operation == MazeOperation.DIVIDE:
        return math.floor(current / value)
    if operation == MazeOperation.SQUARE:
        return current * current
    return math.isqrt(current)


def hint_text(current: int, target: int) -> str:
    difference = target - current
    if difference == 0:
        return "You've reached the target!"
    if difference > 0:
        if difference > 100:
            return "Try multiplying to get closer to the target faster"
        if difference > 10:
            return "Try adding or multiplying to reach the target"
        return "You're close! Try adding to reach the target"
    if -difference > 100:
        return "Try dividing to reduce the number"
    if -difference > 10:
        return "Try subtracting or dividing"
    return "You're close! Try subtracting to reach the target"


def path_optimality(moves: int, difficulty: MazeDifficulty) -> int:
    """Percentage of the difficulty's benchmark minimum achieved by ``moves``."""

    optimal = MAZE_BENCHMARKS[MazeDifficulty(difficulty)].min_moves
    if moves <= optimal:
        return 100
    return round_half_up(optimal / moves * 100)


def meets_benchmark(moves: int, elapsed_seconds: int, difficulty: MazeDifficulty) -> bool:
    benchmark = MAZE_BENCHMARKS[MazeDifficulty(difficulty)]
    return moves <= benchmark.max_moves and elapsed_seconds <= benchmark.max_time


# ----------------------------------------------------------------------
# Generation
# ----------------------------------------------------------------------
def _random_step(current: int, params: MazeParams, rng: random.Random) -> MazeMove:
    operation = rng.choice(list(MazeOperation))
    if operation in (MazeOperation.ADD, MazeOperation.SUBTRACT):
        return MazeMove(operation, rng.randint(*params.additive_range))
    if operation in (MazeOperation.MULTIPLY, MazeOperation.DIVIDE):
        return MazeMove(operation, rng.randint(*params.factor_range))
    return MazeMove(operation)


def random_walk(
    start: int,
    steps: int,
    params: MazeParams,
    rng: random.Random,
    max_step_attempts: int = 200,
) -> Optional[List[MazeMove]]:
    """Walk ``steps`` value-changing legal moves within ``params.max_abs_value``.

    Returns ``None`` when some step exhausts its attempt budget.
    """

    current = start
    path: List[MazeMove] = []
    for _ in range(steps):
        for _attempt in range(max_step_attempts):
            move = _random_step(current, params, rng)
            if validate_move(current, move) is not None:
                continue
            result = apply_operation(current, move.operation, move.operand)
            if result == current or abs(result) > params.max_abs_value:
                continue
            path.append(move)
            current = result
            break
        else:
            return None
    return path


def replay(start: int, path: List[MazeMove]) -> int:
    current = start
    for move in path:
        current = apply_operation(current, move.operation, move.operand)
    return current


# ----------------------------------------------------------------------
# Game
# ----------------------------------------------------------------------
@register_game
class NumberMaze(PuzzleGame):
    name = GameType.NUMBER_MAZE.value
    description = "Reach the target number using arithmetic operations"
    difficulty_type = MazeDifficulty

    def __init__(self, config: Optional[MazeConfig] = None) -> None:
        self.config = config or MazeConfig()

    def generate(self, difficulty: Any, seed: Optional[int] = None) -> MazeState:
        difficulty = self.parse_difficulty(difficulty)
        params = MAZE_PARAMS[difficulty]
        rng = random.Random(seed)
        for attempt in range(1, self.config.max_restarts + 1):
            start = rng.randint(*params.start_range)
            steps = rng.randint(self.config.min_steps, self.config.max_steps)
            path = random_walk(start, steps, params, rng, self.config.max_step_attempts)
            if path is None:
                LOGGER.debug("Maze walk stalled on attempt %d; restarting", attempt)
                continue
            target = replay(start, path)
            if target == start:
                LOGGER.debug("Maze walk returned to its start on attempt %d; restarting", attempt)
                continue
            LOGGER.info(
                "Maze generated (%s): %d -> %d in %d steps (attempt %d)",
                difficulty.value, start, target, len(path), attempt,
            )
            return MazeState(
                start_number=start,
                target_number=target,
                current_number=start,
                witness=tuple(path),
            )
        LOGGER.warning("Maze generation exhausted %d restarts", self.config.max_restarts)
        raise GenerationExhaustedError(
            f"Could not build a {difficulty.value} maze in {self.config.max_restarts} attempts"
        )

    def is_legal(self, state: MazeState, move: Any) -> bool:
        return validate_move(state.current_number, move) is None

    def apply(self, state: MazeState, move: Any) -> MazeState:
        error = validate_move(state.current_number, move)
        if error is not None:
            raise IllegalMoveError(error)
        move = MazeMove(MazeOperation(move.operation), move.operand)
        result = apply_operation(state.current_number, move.operation, move.operand)
        return MazeState(
            start_number=state.start_number,
            target_number=state.target_number,
            current_number=result,
            operations=state.operations + (move,),
            witness=state.witness,
        )

    def is_complete(self, state: MazeState) -> bool:
        return state.current_number == state.target_number

    def score(self, telemetry: Telemetry, difficulty: Any) -> ScoreResult:
        return score_maze(telemetry, self.parse_difficulty(difficulty))

    def check_invariants(self, state: MazeState) -> None:
        if replay(state.start_number, list(state.operations)) != state.current_number:
            raise InvariantViolation(
                f"Current value {state.current_number} does not match the operation log"
            )
        if state.witness and replay(state.start_number, list(state.witness)) != state.target_number:
            raise InvariantViolation("Generation witness no longer reaches the target")

    def hint(self, state: MazeState) -> Hint:
        if self.is_complete(state):
            raise HintUnavailableError("Target already reached")
        done = len(state.operations)
        on_path = state.operations == state.witness[:done]
        if on_path and done < len(state.witness):
            move = state.witness[done]
            operand = "" if move.operand is None else f" {move.operand}"
            return Hint(move, f"Try {move.operation.value}{operand}")
        return Hint(None, hint_text(state.current_number, state.target_number))

    def classify(self, before: MazeState, move: Any, after: MazeState) -> Tuple[bool, bool]:
        gap_before = abs(before.target_number - before.current_number)
        gap_after = abs(after.target_number - after.current_number)
        return gap_after < gap_before, False

    def perfect_moves(self, state: MazeState) -> int:
        return len(state.witness)

    def summarize(self, state: MazeState) -> Dict[str, Any]:
        return {"current_number": state.current_number, "target_number": state.target_number}

    def state_to_jsonable(self, state: MazeState) -> Dict[str, Any]:
        return {
            "start_number": state.start_number,
            "target_number": state.target_number,
            "current_number": state.current_number,
            "operations": [move.to_jsonable() for move in state.operations],
            "witness": [move.to_jsonable() for move in state.witness],
        }

    def state_from_jsonable(self, data: Mapping[str, Any]) -> MazeState:
        return MazeState(
            start_number=int(data["start_number"]),
            target_number=int(data["target_number"]),
            current_number=int(data["current_number"]),
            operations=tuple(self.move_from_jsonable(item) for item in data.get("operations", [])),
            witness=tuple(self.move_from_jsonable(item) for item in data.get("witness", [])),
        )

    def move_from_jsonable(self, data: Mapping[str, Any]) -> MazeMove:
        return MazeMove(MazeOperation(data["operation"]), data.get("operand"))
