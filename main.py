"""CLI entrypoint for the puzzle arcade core."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict

from arcade.core.constants import GameType
from arcade.engine.base import create_game
from arcade.engine.maze import MazeConfig
from arcade.engine.session import SessionController
from arcade.engine.sliding import SlidingPuzzleConfig
from arcade.engine.store import JsonSessionStore
from arcade.engine.sudoku import SudokuConfig
from arcade.utils.logger import configure_logging
from arcade.utils.pretty import pretty_print_state

DEFAULT_DIFFICULTY = {
    GameType.SLIDING_PUZZLE.value: "medium",
    GameType.NUMBER_MAZE.value: "beginner",
    GameType.SUDOKU.value: "easy",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate solvable sliding puzzles, number mazes and sudoku boards",
    )
    parser.add_argument(
        "--game",
        type=str,
        choices=[g.value for g in GameType],
        required=True,
        help="Game to generate",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        default=None,
        help="Difficulty tier (defaults per game: medium / beginner / easy)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--size", type=int, help="Sliding puzzle size override (3-6)")
    parser.add_argument(
        "--shuffle-moves",
        type=int,
        default=SlidingPuzzleConfig.shuffle_moves,
        help="Random legal moves used to scramble a sliding puzzle",
    )
    parser.add_argument(
        "--require-unique",
        action="store_true",
        help="Only remove sudoku cells while the puzzle keeps a unique solution",
    )
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Start a session and save it to the JSON session store",
    )
    parser.add_argument(
        "--store-dir",
        type=Path,
        help="Session store directory (default: $ARCADE_STORE_DIR or local_db/collections/sessions)",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR; default: $ARCADE_LOG_LEVEL or INFO)",
    )
    return parser


def build_game(args: argparse.Namespace):
    if args.game == GameType.SLIDING_PUZZLE.value:
        return create_game(args.game, config=SlidingPuzzleConfig(size=args.size, shuffle_moves=args.shuffle_moves))
    if args.game == GameType.NUMBER_MAZE.value:
        return create_game(args.game, config=MazeConfig())
    return create_game(args.game, config=SudokuConfig(require_unique_solution=args.require_unique))


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    if args.size is not None and args.game != GameType.SLIDING_PUZZLE.value:
        parser.error("--size only applies to sliding-puzzle")
    if args.require_unique and args.game != GameType.SUDOKU.value:
        parser.error("--require-unique only applies to sudoku")

    game = build_game(args)
    difficulty = args.difficulty or DEFAULT_DIFFICULTY[args.game]
    try:
        game.parse_difficulty(difficulty)
    except ValueError as exc:
        parser.error(str(exc))

    payload: Dict[str, Any] = {"game": game.name, "difficulty": difficulty, "seed": args.seed}
    if args.persist:
        store = JsonSessionStore(args.store_dir)
        session = SessionController.start(game, difficulty, seed=args.seed, store=store)
        state = session.state
        payload["session_id"] = session.session_id
        payload["perfect_move_count"] = session.perfect_move_count
    else:
        state = game.generate(difficulty, seed=args.seed)
        payload["perfect_move_count"] = game.perfect_moves(state)
    payload["state"] = game.state_to_jsonable(state)

    pretty_print_state(state, label=f"{game.name} ({difficulty})")

    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)


if __name__ == "__main__":  # pragma: no cover
    main()
