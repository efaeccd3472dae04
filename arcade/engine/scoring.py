"""Deterministic, table-driven score computation.

All three games share one formula shape::

    clamp((base + bonuses - penalties) * multiplier, floor, ceiling)

Every bonus and penalty is clamped at zero before summation, so a penalty
can never turn into a hidden bonus (and vice versa). Per-game constants live
in the ``*_SCORE_TABLE`` objects below; ratings and messages are ordered
band tables scanned top-down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ..core.constants import (
    SLIDING_OPTIMAL_MOVES,
    MazeDifficulty,
    SlidingDifficulty,
    SudokuDifficulty,
)
from ..core.models import ScoreResult, Telemetry


def round_half_up(value: float) -> int:
    """Round like JavaScript's ``Math.round`` (halves go up, not to even)."""

    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoreTerms:
    base: float
    bonuses: Mapping[str, float] = field(default_factory=dict)
    penalties: Mapping[str, float] = field(default_factory=dict)
    multiplier: float = 1.0
    floor: int = 0
    ceiling: Optional[int] = None

    def clamped_bonuses(self) -> Dict[str, float]:
        return {name: max(0.0, value) for name, value in self.bonuses.items()}

    def clamped_penalties(self) -> Dict[str, float]:
        return {name: max(0.0, value) for name, value in self.penalties.items()}

    def breakdown(self) -> Dict[str, float]:
        parts: Dict[str, float] = {"base": self.base}
        parts.update(self.clamped_bonuses())
        parts.update({name: -value for name, value in self.clamped_penalties().items()})
        parts["multiplier"] = self.multiplier
        return parts


def compute_bounded_score(terms: ScoreTerms) -> int:
    subtotal = (
        terms.base
        + sum(terms.clamped_bonuses().values())
        - sum(terms.clamped_penalties().values())
    )
    score = max(terms.floor, round_half_up(subtotal * terms.multiplier))
    if terms.ceiling is not None:
        score = min(terms.ceiling, score)
    return max(0, score)


# ----------------------------------------------------------------------
# Rating and message bands
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class RatingBand:
    threshold: float
    label: str


@dataclass(frozen=True)
class SudokuRatingBand:
    max_hints: int
    max_time_fraction: float
    label: str


@dataclass(frozen=True)
class MessageRule:
    """Message picked when both limits hold (``None`` means unconstrained)."""

    text: str
    max_moves: Optional[int] = None
    max_time: Optional[int] = None

    def matches(self, moves: int, elapsed: int) -> bool:
        if self.max_moves is not None and moves > self.max_moves:
            return False
        if self.max_time is not None and elapsed > self.max_time:
            return False
        return True


def rate(value: float, bands: Sequence[RatingBand], default: str) -> str:
    """Return the label of the first band whose threshold ``value`` reaches."""

    for band in bands:
        if value >= band.threshold:
            return band.label
    return default


def pick_message(moves: int, elapsed: int, rules: Sequence[MessageRule], default: str) -> str:
    for rule in rules:
        if rule.matches(moves, elapsed):
            return rule.text
    return default


def efficiency(reference: float, actual: float, cap: Optional[int] = None) -> int:
    """Percentage of ``reference`` over ``actual`` (actual floored at 1)."""

    value = round_half_up(reference / max(actual, 1) * 100)
    if cap is not None:
        value = min(cap, value)
    return value


# ----------------------------------------------------------------------
# Per-game tables
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SlidingScoreTable:
    base: int = 1000
    move_penalty_per_move: int = 5
    time_bonus_cap: int = 500
    time_bonus_per_second: int = 2
    perfect_bonus: int = 500
    floor: int = 50
    optimal_time: int = 120
    multipliers: Mapping[SlidingDifficulty, float] = field(
        default_factory=lambda: {
            SlidingDifficulty.EASY: 1.0,
            SlidingDifficulty.MEDIUM: 1.5,
            SlidingDifficulty.HARD: 2.0,
            SlidingDifficulty.EXPERT: 2.5,
        }
    )
    ratings: Tuple[RatingBand, ...] = (
        RatingBand(180, "Puzzle Master"),
        RatingBand(140, "Expert"),
        RatingBand(100, "Advanced"),
        RatingBand(60, "Intermediate"),
    )
    default_rating: str = "Beginner"
    messages: Tuple[MessageRule, ...] = (
        MessageRule("Outstanding! You solved it efficiently and quickly!", max_moves=80, max_time=180),
        MessageRule("Great job! You found an efficient solution!", max_moves=100),
        MessageRule("Well done! You solved it quickly!", max_time=240),
        MessageRule("Good work! You completed the puzzle!", max_moves=150),
    )
    default_message: str = "Nice try! Keep practicing to improve your efficiency!"


@dataclass(frozen=True)
class MazeScoreTable:
    base: int = 1000
    move_bonus_cap: int = 200
    move_bonus_per_move: int = 15
    time_bonus_cap: int = 300
    short_path_moves: int = 8
    short_path_bonus: int = 150
    speed_seconds: int = 120
    speed_bonus: int = 50
    floor: int = 50
    multipliers: Mapping[MazeDifficulty, float] = field(
        default_factory=lambda: {
            MazeDifficulty.BEGINNER: 1.0,
            MazeDifficulty.INTERMEDIATE: 1.2,
            MazeDifficulty.ADVANCED: 1.5,
            MazeDifficulty.EXPERT: 2.0,
            MazeDifficulty.MASTER: 2.5,
        }
    )
    ratings: Tuple[RatingBand, ...] = (
        RatingBand(400, "Math Master"),
        RatingBand(350, "Expert Navigator"),
        RatingBand(300, "Skilled Solver"),
        RatingBand(250, "Apprentice"),
    )
    default_rating: str = "Beginner"
    messages: Tuple[MessageRule, ...] = (
        MessageRule("Outstanding! You navigated the maze with perfect efficiency!", max_moves=8, max_time=120),
        MessageRule("Excellent! You found a very efficient path!", max_moves=10),
        MessageRule("Great speed! You solved it quickly!", max_time=180),
        MessageRule("Well done! Good pathfinding skills!", max_moves=15),
    )
    default_message: str = "Nice work! Keep practicing to improve your strategy!"


@dataclass(frozen=True)
class SudokuScoreTable:
    base: int = 1000
    time_bonus_cap: int = 3600
    hint_penalty: int = 50
    mistake_penalty: int = 25
    floor: int = 50
    baseline_seconds: int = 600
    multipliers: Mapping[SudokuDifficulty, float] = field(
        default_factory=lambda: {
            SudokuDifficulty.EASY: 1.0,
            SudokuDifficulty.MEDIUM: 1.5,
            SudokuDifficulty.HARD: 2.0,
            SudokuDifficulty.EXPERT: 3.0,
        }
    )
    ratings: Tuple[SudokuRatingBand, ...] = (
        SudokuRatingBand(0, 0.5, "Sudoku Master"),
        SudokuRatingBand(1, 0.7, "Expert"),
        SudokuRatingBand(2, 1.0, "Advanced"),
        SudokuRatingBand(3, 1.5, "Intermediate"),
    )
    default_rating: str = "Beginner"
    # Fraction of the best possible score for the difficulty.
    messages: Tuple[RatingBand, ...] = (
        RatingBand(0.9, "Perfect!"),
        RatingBand(0.75, "Excellent!"),
        RatingBand(0.6, "Great!"),
        RatingBand(0.45, "Good!"),
    )
    default_message: str = "Completed!"


SLIDING_SCORE_TABLE = SlidingScoreTable()
MAZE_SCORE_TABLE = MazeScoreTable()
SUDOKU_SCORE_TABLE = SudokuScoreTable()


def _incomplete(default_rating: str) -> ScoreResult:
    return ScoreResult(score=0, rating=default_rating, message="Puzzle not completed.")


# ----------------------------------------------------------------------
# Game scorers
# ----------------------------------------------------------------------
def sliding_terms(
    telemetry: Telemetry,
    difficulty: SlidingDifficulty,
    table: SlidingScoreTable = SLIDING_SCORE_TABLE,
) -> ScoreTerms:
    moves = telemetry.move_count
    perfect = telemetry.perfect_move_count
    bonuses = {
        "time_bonus": table.time_bonus_cap - telemetry.elapsed_seconds * table.time_bonus_per_second,
        # Fewer moves than the lower bound only happens off-session; treat it as perfect.
        "perfect_bonus": table.perfect_bonus if moves <= perfect else 0,
    }
    penalties = {"move_penalty": (moves - perfect) * table.move_penalty_per_move}
    return ScoreTerms(
        base=table.base,
        bonuses=bonuses,
        penalties=penalties,
        multiplier=table.multipliers[SlidingDifficulty(difficulty)],
        floor=table.floor,
    )


def score_sliding(
    telemetry: Telemetry,
    difficulty: SlidingDifficulty,
    size: int = 4,
    table: SlidingScoreTable = SLIDING_SCORE_TABLE,
) -> ScoreResult:
    if not telemetry.completed:
        return _incomplete(table.default_rating)
    terms = sliding_terms(telemetry, difficulty, table)
    move_eff = efficiency(SLIDING_OPTIMAL_MOVES.get(size, 80), telemetry.move_count, cap=100)
    time_eff = efficiency(table.optimal_time, telemetry.elapsed_seconds, cap=100)
    return ScoreResult(
        score=compute_bounded_score(terms),
        rating=rate(move_eff + time_eff, table.ratings, table.default_rating),
        message=pick_message(
            telemetry.move_count, telemetry.elapsed_seconds, table.messages, table.default_message
        ),
        breakdown={**terms.breakdown(), "move_efficiency": move_eff, "time_efficiency": time_eff},
    )


def maze_terms(
    telemetry: Telemetry,
    difficulty: MazeDifficulty,
    table: MazeScoreTable = MAZE_SCORE_TABLE,
) -> ScoreTerms:
    moves = telemetry.move_count
    elapsed = telemetry.elapsed_seconds
    bonuses = {
        "move_bonus": table.move_bonus_cap - moves * table.move_bonus_per_move,
        "time_bonus": table.time_bonus_cap - elapsed,
        "short_path_bonus": table.short_path_bonus if moves <= table.short_path_moves else 0,
        "speed_bonus": table.speed_bonus if elapsed <= table.speed_seconds else 0,
    }
    return ScoreTerms(
        base=table.base,
        bonuses=bonuses,
        multiplier=table.multipliers[MazeDifficulty(difficulty)],
        floor=table.floor,
    )


def score_maze(
    telemetry: Telemetry,
    difficulty: MazeDifficulty,
    table: MazeScoreTable = MAZE_SCORE_TABLE,
) -> ScoreResult:
    if not telemetry.completed:
        return _incomplete(table.default_rating)
    terms = maze_terms(telemetry, difficulty, table)
    move_eff = efficiency(table.move_bonus_cap, telemetry.move_count)
    time_eff = efficiency(table.time_bonus_cap, telemetry.elapsed_seconds)
    return ScoreResult(
        score=compute_bounded_score(terms),
        rating=rate(move_eff + time_eff, table.ratings, table.default_rating),
        message=pick_message(
            telemetry.move_count, telemetry.elapsed_seconds, table.messages, table.default_message
        ),
        breakdown={**terms.breakdown(), "move_efficiency": move_eff, "time_efficiency": time_eff},
    )


def sudoku_terms(
    telemetry: Telemetry,
    difficulty: SudokuDifficulty,
    table: SudokuScoreTable = SUDOKU_SCORE_TABLE,
) -> ScoreTerms:
    return ScoreTerms(
        base=table.base,
        bonuses={"time_bonus": table.time_bonus_cap - telemetry.elapsed_seconds},
        penalties={
            "hint_penalty": telemetry.hints_used * table.hint_penalty,
            "mistake_penalty": telemetry.mistakes * table.mistake_penalty,
        },
        multiplier=table.multipliers[SudokuDifficulty(difficulty)],
        floor=table.floor,
    )


def rate_sudoku(
    elapsed_seconds: int,
    hints_used: int,
    difficulty: SudokuDifficulty,
    table: SudokuScoreTable = SUDOKU_SCORE_TABLE,
) -> str:
    adjusted = elapsed_seconds / table.multipliers[SudokuDifficulty(difficulty)]
    for band in table.ratings:
        if hints_used <= band.max_hints and adjusted <= table.baseline_seconds * band.max_time_fraction:
            return band.label
    return table.default_rating


def score_sudoku(
    telemetry: Telemetry,
    difficulty: SudokuDifficulty,
    table: SudokuScoreTable = SUDOKU_SCORE_TABLE,
) -> ScoreResult:
    if not telemetry.completed:
        return _incomplete(table.default_rating)
    terms = sudoku_terms(telemetry, difficulty, table)
    score = compute_bounded_score(terms)
    best = (table.base + table.time_bonus_cap) * terms.multiplier
    return ScoreResult(
        score=score,
        rating=rate_sudoku(telemetry.elapsed_seconds, telemetry.hints_used, difficulty, table),
        message=rate(score / best, table.messages, table.default_message),
        breakdown=terms.breakdown(),
    )
