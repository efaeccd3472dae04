"""Game interface and the registry games add themselves to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from ..core.models import Hint, Move, PuzzleState, ScoreResult, Telemetry


class PuzzleGame(ABC):
    """
    Abstract base class for a playable puzzle.

    Every method is pure: states and moves are frozen dataclasses and
    ``apply`` returns a new state. Subclasses define ``name``,
    ``description`` and ``difficulty_type`` class attributes.

    Attributes:
        name: Registry key (a ``GameType`` value)
        description: Human-readable description for listings
        difficulty_type: Enum of the game's difficulty tiers
        applies_hints: Whether a consumed hint changes the state
    """

    name: str = "base"
    description: str = "Base puzzle"
    difficulty_type: Type[Enum]
    applies_hints: bool = False

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    @abstractmethod
    def generate(self, difficulty: Any, seed: Optional[int] = None) -> PuzzleState:
        """Build a non-trivial initial state that is solvable by construction."""

    @abstractmethod
    def is_legal(self, state: PuzzleState, move: Move) -> bool:
        """Return whether ``move`` is accepted by the movement rules."""

    @abstractmethod
    def apply(self, state: PuzzleState, move: Move) -> PuzzleState:
        """Return the state after ``move``; raise ``IllegalMoveError`` if illegal."""

    @abstractmethod
    def is_complete(self, state: PuzzleState) -> bool:
        """Return whether the win condition holds."""

    @abstractmethod
    def score(self, telemetry: Telemetry, difficulty: Any) -> ScoreResult:
        """Map telemetry to a bounded score. Never raises."""

    @abstractmethod
    def check_invariants(self, state: PuzzleState) -> None:
        """Raise ``InvariantViolation`` when ``state`` is structurally broken."""

    # ------------------------------------------------------------------
    # Session support
    # ------------------------------------------------------------------
    @abstractmethod
    def hint(self, state: PuzzleState) -> Hint:
        """Suggest a next move; raise ``HintUnavailableError`` if none exists."""

    @abstractmethod
    def classify(self, before: PuzzleState, move: Move, after: PuzzleState) -> Tuple[bool, bool]:
        """Return ``(is_correct, is_mistake)`` for an applied move."""

    @abstractmethod
    def perfect_moves(self, state: PuzzleState) -> int:
        """Lower bound (or best known count) of moves needed from ``state``."""

    def is_hint_move(self, move: Any) -> bool:
        """True for moves that may only arrive through a hint request."""
        return False

    def max_hints(self, difficulty: Any) -> Optional[int]:
        return None

    def max_mistakes(self, difficulty: Any) -> Optional[int]:
        return None

    def parse_difficulty(self, value: Any) -> Enum:
        try:
            return self.difficulty_type(value)
        except ValueError:
            options = ", ".join(member.value for member in self.difficulty_type)
            raise ValueError(f"Unknown {self.name} difficulty: {value}. Available: {options}") from None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    @abstractmethod
    def summarize(self, state: PuzzleState) -> Dict[str, Any]:
        """Small dict describing ``state`` for move-log entries."""

    @abstractmethod
    def state_to_jsonable(self, state: PuzzleState) -> Dict[str, Any]:
        ...

    @abstractmethod
    def state_from_jsonable(self, data: Mapping[str, Any]) -> PuzzleState:
        ...

    @abstractmethod
    def move_from_jsonable(self, data: Mapping[str, Any]) -> Move:
        ...


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------
_GAMES: Dict[str, Type[PuzzleGame]] = {}


def register_game(cls: Type[PuzzleGame]) -> Type[PuzzleGame]:
    """
    Decorator to register a game class.

    Usage:
        @register_game
        class MyGame(PuzzleGame):
            name = "my-game"
            ...
    """
    _GAMES[cls.name] = cls
    return cls


def create_game(name: str, **kwargs: Any) -> PuzzleGame:
    """
    Create a game instance by name.

    Raises:
        ValueError: If the game name is not registered
    """
    key = getattr(name, "value", name)
    if key not in _GAMES:
        available = ", ".join(_GAMES.keys())
        raise ValueError(f"Unknown game: {key}. Available: {available}")
    return _GAMES[key](**kwargs)


def get_game_names() -> List[str]:
    return list(_GAMES.keys())


def get_game_info() -> List[Dict[str, str]]:
    return [{"name": cls.name, "description": cls.description} for cls in _GAMES.values()]
