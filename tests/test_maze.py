import unittest

from arcade.core.constants import MazeDifficulty, MazeOperation
from arcade.core.exceptions import GenerationExhaustedError, HintUnavailableError, IllegalMoveError
from arcade.core.models import MazeMove, MazeState, Telemetry
from arcade.engine.maze import (
    MazeConfig,
    NumberMaze,
    apply_operation,
    hint_text,
    meets_benchmark,
    path_optimality,
    replay,
    validate_move,
)
from arcade.engine.scoring import score_maze


class MazeArithmeticTests(unittest.TestCase):
    def test_results_are_floored(self) -> None:
        self.assertEqual(apply_operation(7, MazeOperation.DIVIDE, 2), 3)
        self.assertEqual(apply_operation(-7, MazeOperation.DIVIDE, 2), -4)
        self.assertEqual(apply_operation(10, MazeOperation.SQRT), 3)
        self.assertEqual(apply_operation(3, MazeOperation.MULTIPLY, 1.5), 4)
        self.assertEqual(apply_operation(1, MazeOperation.ADD, 2.5), 3)
        self.assertEqual(apply_operation(-4, MazeOperation.SQUARE), 16)

    def test_operand_rules(self) -> None:
        self.assertIsNone(validate_move(5, MazeMove(MazeOperation.ADD, 3)))
        self.assertIsNone(validate_move(-5, MazeMove(MazeOperation.SQUARE)))
        self.assertIsNotNone(validate_move(5, MazeMove(MazeOperation.ADD)))
        self.assertIsNotNone(validate_move(5, MazeMove(MazeOperation.DIVIDE, 0)))
        self.assertIsNotNone(validate_move(-1, MazeMove(MazeOperation.SQRT)))
        self.assertIsNotNone(validate_move(5, MazeMove(MazeOperation.MULTIPLY, True)))
        self.assertIsNotNone(validate_move(5, MazeMove("teleport", 1)))

    def test_large_values_stay_exact(self) -> None:
        self.assertEqual(apply_operation(10 ** 30, MazeOperation.MULTIPLY, 1.5), 15 * 10 ** 29)
        self.assertEqual(apply_operation(10 ** 30 + 1, MazeOperation.DIVIDE, 0.5), 2 * 10 ** 30 + 2)
        self.assertEqual(apply_operation(-(10 ** 20), MazeOperation.ADD, 0.5), -(10 ** 20))

    def test_oversized_results_are_illegal(self) -> None:
        self.assertIsNotNone(validate_move(5, MazeMove(MazeOperation.MULTIPLY, 1e300)))
        self.assertIsNotNone(validate_move(10 ** 8, MazeMove(MazeOperation.SQUARE)))
        self.assertIsNone(validate_move(10 ** 7, MazeMove(MazeOperation.SQUARE)))

    def test_repeated_squaring_then_fractional_multiply(self) -> None:
        game = NumberMaze()
        state = MazeState(start_number=5, target_number=7, current_number=5)
        square = MazeMove(MazeOperation.SQUARE)
        for _ in range(4):
            state = game.apply(state, square)
        self.assertEqual(state.current_number, 152587890625)
        self.assertFalse(game.is_legal(state, square))
        with self.assertRaises(IllegalMoveError):
            game.apply(state, square)

        half_again = MazeMove(MazeOperation.MULTIPLY, 1.5)
        self.assertTrue(game.is_legal(state, half_again))
        after = game.apply(state, half_again)
        self.assertEqual(after.current_number, 228881835937)
        game.check_invariants(after)

    def test_apply_rejects_division_by_zero(self) -> None:
        game = NumberMaze()
        state = MazeState(start_number=4, target_number=9, current_number=4)
        with self.assertRaises(IllegalMoveError):
            game.apply(state, MazeMove(MazeOperation.DIVIDE, 0))

    def test_apply_logs_operation(self) -> None:
        game = NumberMaze()
        state = MazeState(start_number=4, target_number=9, current_number=4)
        after = game.apply(state, MazeMove(MazeOperation.ADD, 5))
        self.assertEqual(after.current_number, 9)
        self.assertEqual(after.operations, (MazeMove(MazeOperation.ADD, 5),))
        self.assertTrue(game.is_complete(after))
        self.assertFalse(game.is_complete(state))


class MazeGenerationTests(unittest.TestCase):
    def test_witness_reaches_target(self) -> None:
        game = NumberMaze()
        for difficulty in MazeDifficulty:
            for seed in range(5):
                state = game.generate(difficulty, seed=seed)
                self.assertNotEqual(state.start_number, state.target_number)
                self.assertEqual(state.current_number, state.start_number)
                self.assertTrue(8 <= len(state.witness) <= 12)
                self.assertEqual(replay(state.start_number, list(state.witness)), state.target_number)
                game.check_invariants(state)

    def test_witness_is_playable(self) -> None:
        game = NumberMaze()
        state = game.generate("advanced", seed=21)
        for move in state.witness:
            state = game.apply(state, move)
        self.assertTrue(game.is_complete(state))

    def test_same_seed_same_maze(self) -> None:
        game = NumberMaze()
        first = game.generate("expert", seed=8)
        second = game.generate("expert", seed=8)
        self.assertEqual(first, second)
        self.assertEqual(first.witness, second.witness)

    def test_exhausted_budget_raises(self) -> None:
        game = NumberMaze(MazeConfig(max_restarts=3, max_step_attempts=0))
        with self.assertRaises(GenerationExhaustedError):
            game.generate("beginner", seed=1)


class MazeHintTests(unittest.TestCase):
    def test_hint_follows_witness_until_divergence(self) -> None:
        game = NumberMaze()
        state = game.generate("beginner", seed=4)
        self.assertEqual(game.hint(state).move, state.witness[0])

        detour = MazeMove(MazeOperation.SQUARE)
        if detour == state.witness[0]:
            detour = MazeMove(MazeOperation.ADD, 1000)
        diverged = game.apply(state, detour)
        if not game.is_complete(diverged):
            hint = game.hint(diverged)
            self.assertIsNone(hint.move)
            self.assertTrue(hint.text)

    def test_hint_text_thresholds(self) -> None:
        self.assertIn("multiplying", hint_text(0, 200))
        self.assertIn("adding or multiplying", hint_text(0, 20))
        self.assertIn("close", hint_text(5, 8))
        self.assertIn("dividing", hint_text(500, 2))
        self.assertIn("reached", hint_text(5, 5))

    def test_no_hint_at_target(self) -> None:
        state = MazeState(start_number=3, target_number=3, current_number=3)
        with self.assertRaises(HintUnavailableError):
            NumberMaze().hint(state)

    def test_benchmarks(self) -> None:
        self.assertEqual(path_optimality(10, MazeDifficulty.BEGINNER), 100)
        self.assertEqual(path_optimality(30, MazeDifficulty.BEGINNER), 50)
        self.assertEqual(path_optimality(32, MazeDifficulty.MASTER), 13)
        self.assertTrue(meets_benchmark(20, 200, MazeDifficulty.BEGINNER))
        self.assertFalse(meets_benchmark(26, 200, MazeDifficulty.BEGINNER))


class MazeScoreTests(unittest.TestCase):
    def test_six_moves_in_one_hundred_seconds(self) -> None:
        telemetry = Telemetry(move_count=6, elapsed_seconds=100, completed=True)
        result = score_maze(telemetry, MazeDifficulty.BEGINNER)
        self.assertEqual(result.score, 1510)
        self.assertEqual(result.rating, "Math Master")
        self.assertEqual(result.message, "Outstanding! You navigated the maze with perfect efficiency!")

    def test_multiplier_applies_to_whole_sum(self) -> None:
        telemetry = Telemetry(move_count=6, elapsed_seconds=100, completed=True)
        self.assertEqual(score_maze(telemetry, MazeDifficulty.MASTER).score, 3775)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
