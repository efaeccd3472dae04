import io
import unittest

from arcade.core.models import MazeMove, MazeState, ScoreResult, SlidingPuzzleState
from arcade.core.constants import MazeOperation
from arcade.engine.base import get_game_info
from arcade.engine.session import SessionController
from arcade.engine.sudoku import Sudoku
from arcade.utils.pretty import format_state, pretty_print_state, print_score, print_session


class PrettyPrintTests(unittest.TestCase):
    def test_sliding_board(self) -> None:
        state = SlidingPuzzleState(size=3, tiles=(1, 2, 3, 4, 5, 6, 7, 8, 0))
        self.assertEqual(format_state(state), "1 2 3\n4 5 6\n7 8 .")

    def test_maze_lists_operations(self) -> None:
        state = MazeState(
            start_number=2,
            target_number=9,
            current_number=4,
            operations=(MazeMove(MazeOperation.SQUARE),),
        )
        text = format_state(state)
        self.assertIn("Target:  9", text)
        self.assertIn("Moves:   square", text)

    def test_sudoku_grid_has_box_dividers(self) -> None:
        state = Sudoku().generate("easy", seed=1)
        lines = format_state(state).splitlines()
        self.assertEqual(len(lines), 11)
        self.assertEqual(lines[3], "------+-------+------")

    def test_unknown_state_rejected(self) -> None:
        with self.assertRaises(TypeError):
            format_state(object())

    def test_print_helpers_write_to_stream(self) -> None:
        stream = io.StringIO()
        pretty_print_state(SlidingPuzzleState(size=3, tiles=(1, 2, 3, 4, 5, 6, 7, 8, 0)), label="board", stream=stream)
        print_score(ScoreResult(score=1510, rating="Math Master", message="Nice", breakdown={"base": 1000}), stream=stream)
        session = SessionController.start(Sudoku(), "easy", seed=2)
        print_session(session, stream=stream)
        output = stream.getvalue()
        self.assertIn("board", output)
        self.assertIn("Score:  1510", output)
        self.assertIn("base", output)
        self.assertIn("Status:   active", output)

    def test_game_info(self) -> None:
        names = {info["name"] for info in get_game_info()}
        self.assertIn("number-maze", names)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
