import unittest

from arcade.core.constants import MazeDifficulty, SlidingDifficulty, SudokuDifficulty
from arcade.core.models import MoveLogEntry, SlideMove, Telemetry
from arcade.engine.scoring import (
    ScoreTerms,
    compute_bounded_score,
    rate_sudoku,
    round_half_up,
    score_maze,
    score_sliding,
    score_sudoku,
)
from arcade.engine.telemetry import accuracy, derive_telemetry


class BoundedScoreTests(unittest.TestCase):
    def test_negative_terms_are_clamped(self) -> None:
        terms = ScoreTerms(base=100, bonuses={"bonus": -50}, penalties={"penalty": -30})
        self.assertEqual(compute_bounded_score(terms), 100)

    def test_floor_and_ceiling(self) -> None:
        self.assertEqual(compute_bounded_score(ScoreTerms(base=0, penalties={"p": 1000}, floor=50)), 50)
        self.assertEqual(compute_bounded_score(ScoreTerms(base=500, ceiling=100)), 100)

    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(-0.5), 0)

    def test_breakdown_lists_each_term(self) -> None:
        terms = ScoreTerms(base=1000, bonuses={"time_bonus": 20}, penalties={"hint_penalty": 50}, multiplier=2)
        self.assertEqual(
            terms.breakdown(),
            {"base": 1000, "time_bonus": 20, "hint_penalty": -50, "multiplier": 2},
        )


class ScoreEdgeTests(unittest.TestCase):
    def test_incomplete_sessions_score_zero(self) -> None:
        telemetry = Telemetry(move_count=3, elapsed_seconds=10, completed=False)
        self.assertEqual(score_sliding(telemetry, SlidingDifficulty.EASY).score, 0)
        self.assertEqual(score_maze(telemetry, MazeDifficulty.MASTER).score, 0)
        self.assertEqual(score_sudoku(telemetry, SudokuDifficulty.EXPERT).score, 0)
        self.assertEqual(score_sudoku(telemetry, SudokuDifficulty.EXPERT).rating, "Beginner")

    def test_floor_when_completed(self) -> None:
        telemetry = Telemetry(move_count=10_000, elapsed_seconds=100_000, hints_used=99, mistakes=99, completed=True)
        self.assertEqual(score_sliding(telemetry, SlidingDifficulty.EASY).score, 50)
        self.assertEqual(score_maze(telemetry, MazeDifficulty.BEGINNER).score, 1000)
        self.assertEqual(score_sudoku(telemetry, SudokuDifficulty.EASY).score, 50)

    def test_zero_telemetry_does_not_raise(self) -> None:
        telemetry = Telemetry(completed=True)
        self.assertGreater(score_maze(telemetry, MazeDifficulty.BEGINNER).score, 0)
        self.assertGreater(score_sudoku(telemetry, SudokuDifficulty.EASY).score, 0)


class ScoreMonotonicityTests(unittest.TestCase):
    def _assert_non_increasing(self, scores) -> None:
        for earlier, later in zip(scores, scores[1:]):
            self.assertGreaterEqual(earlier, later)

    def test_more_time_never_helps(self) -> None:
        times = range(0, 4000, 37)
        self._assert_non_increasing([
            score_sliding(Telemetry(move_count=40, elapsed_seconds=t, perfect_move_count=30, completed=True),
                          SlidingDifficulty.HARD).score
            for t in times
        ])
        self._assert_non_increasing([
            score_maze(Telemetry(move_count=9, elapsed_seconds=t, completed=True), MazeDifficulty.EXPERT).score
            for t in times
        ])
        self._assert_non_increasing([
            score_sudoku(Telemetry(elapsed_seconds=t, hints_used=1, completed=True), SudokuDifficulty.MEDIUM).score
            for t in times
        ])

    def test_more_moves_never_help(self) -> None:
        moves = range(30, 400, 7)
        self._assert_non_increasing([
            score_sliding(Telemetry(move_count=m, elapsed_seconds=60, perfect_move_count=30, completed=True),
                          SlidingDifficulty.MEDIUM).score
            for m in moves
        ])
        self._assert_non_increasing([
            score_maze(Telemetry(move_count=m - 30, elapsed_seconds=60, completed=True),
                       MazeDifficulty.INTERMEDIATE).score
            for m in moves
        ])

    def test_fewer_moves_than_lower_bound_never_scores_higher(self) -> None:
        self._assert_non_increasing([
            score_sliding(Telemetry(move_count=m, elapsed_seconds=60, perfect_move_count=30, completed=True),
                          SlidingDifficulty.MEDIUM).score
            for m in range(0, 60)
        ])

    def test_hints_and_mistakes_never_help(self) -> None:
        self._assert_non_increasing([
            score_sudoku(Telemetry(elapsed_seconds=900, hints_used=h, completed=True), SudokuDifficulty.HARD).score
            for h in range(0, 40)
        ])
        self._assert_non_increasing([
            score_sudoku(Telemetry(elapsed_seconds=900, mistakes=m, completed=True), SudokuDifficulty.HARD).score
            for m in range(0, 80)
        ])


class RatingTests(unittest.TestCase):
    def test_sudoku_rating_bands(self) -> None:
        self.assertEqual(rate_sudoku(250, 0, SudokuDifficulty.EASY), "Sudoku Master")
        self.assertEqual(rate_sudoku(900, 0, SudokuDifficulty.EXPERT), "Sudoku Master")
        self.assertEqual(rate_sudoku(600, 2, SudokuDifficulty.EASY), "Advanced")
        self.assertEqual(rate_sudoku(2000, 5, SudokuDifficulty.EASY), "Beginner")

    def test_sudoku_message_scales_with_best_score(self) -> None:
        result = score_sudoku(Telemetry(completed=True), SudokuDifficulty.EASY)
        self.assertEqual(result.score, 4600)
        self.assertEqual(result.message, "Perfect!")

    def test_slow_sliding_game(self) -> None:
        telemetry = Telemetry(move_count=400, elapsed_seconds=900, perfect_move_count=40, completed=True)
        result = score_sliding(telemetry, SlidingDifficulty.MEDIUM, size=4)
        self.assertEqual(result.rating, "Beginner")
        self.assertEqual(result.message, "Nice try! Keep practicing to improve your efficiency!")

    def test_maze_message_order(self) -> None:
        telemetry = Telemetry(move_count=10, elapsed_seconds=500, completed=True)
        self.assertEqual(
            score_maze(telemetry, MazeDifficulty.BEGINNER).message,
            "Excellent! You found a very efficient path!",
        )


class TelemetryTests(unittest.TestCase):
    def _entry(self, number, ts, correct=True, mistake=False, hint=False):
        return MoveLogEntry(
            move_number=number,
            move=SlideMove(0),
            timestamp=ts,
            is_correct=correct,
            is_mistake=mistake,
            is_hint=hint,
        )

    def test_counters_derive_from_log(self) -> None:
        entries = [
            self._entry(1, 101.0),
            self._entry(2, 102.0),
            self._entry(3, 103.0, correct=False, mistake=True),
            self._entry(4, 104.0, hint=True),
            self._entry(5, 105.9),
        ]
        telemetry = derive_telemetry(entries, 100.0, perfect_move_count=3, completed=True)
        self.assertEqual(telemetry.move_count, 4)
        self.assertEqual(telemetry.hints_used, 1)
        self.assertEqual(telemetry.mistakes, 1)
        self.assertEqual(telemetry.elapsed_seconds, 5)
        self.assertEqual(telemetry.current_streak, 1)
        self.assertEqual(telemetry.best_streak, 2)
        self.assertEqual(telemetry.perfect_move_count, 3)
        self.assertTrue(telemetry.completed)
        self.assertEqual(accuracy(entries), 75)

    def test_accuracy_rounds_halves_up(self) -> None:
        entries = [self._entry(1, 101.0)] + [
            self._entry(n, 100.0 + n, correct=False, mistake=True) for n in range(2, 9)
        ]
        self.assertEqual(accuracy(entries), 13)

    def test_empty_log(self) -> None:
        telemetry = derive_telemetry([], 50.0)
        self.assertEqual(telemetry, Telemetry())
        self.assertEqual(accuracy([]), 100)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
