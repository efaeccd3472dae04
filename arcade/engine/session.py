"""Session controller: the only stateful piece of the arcade core.

The controller owns one puzzle state, validates and applies moves through the
game, keeps the append-only move log and asks for a score exactly once after
the session freezes (solved, failed or abandoned).
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..core.constants import SessionStatus
from ..core.exceptions import ArcadeError, HintUnavailableError, IllegalMoveError, SessionClosedError
from ..core.models import Hint, Move, MoveLogEntry, PuzzleState, ScoreResult, Telemetry
from ..utils.logger import get_logger
from .base import PuzzleGame, create_game
from .store import SessionStore
from .telemetry import derive_telemetry

LOGGER = get_logger(__name__)

Clock = Callable[[], float]


class SessionController:
    """Drive one play session of a registered game."""

    def __init__(
        self,
        game: PuzzleGame,
        difficulty: Any,
        state: PuzzleState,
        *,
        session_id: Optional[str] = None,
        store: Optional[SessionStore] = None,
        clock: Clock = time.time,
        started_at: Optional[float] = None,
        initial_state: Optional[PuzzleState] = None,
        log: Sequence[MoveLogEntry] = (),
        status: SessionStatus = SessionStatus.ACTIVE,
        ended_at: Optional[float] = None,
        perfect_move_count: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.game = game
        self.difficulty = game.parse_difficulty(difficulty)
        self.store = store
        self.clock = clock
        self.session_id = session_id or SessionStore.new_id()
        self.seed = seed
        self.initial_state = initial_state if initial_state is not None else state
        self.started_at = started_at if started_at is not None else clock()
        self.ended_at = ended_at
        self.perfect_move_count = (
            perfect_move_count if perfect_move_count is not None else game.perfect_moves(self.initial_state)
        )
        self._state = state
        self._log: List[MoveLogEntry] = list(log)
        self._status = SessionStatus(status)
        self._result: Optional[ScoreResult] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def start(
        cls,
        game: PuzzleGame | str,
        difficulty: Any,
        seed: Optional[int] = None,
        *,
        store: Optional[SessionStore] = None,
        clock: Clock = time.time,
    ) -> "SessionController":
        if isinstance(game, str):
            game = create_game(game)
        state = game.generate(difficulty, seed=seed)
        game.check_invariants(state)
        controller = cls(game, difficulty, state, store=store, clock=clock, seed=seed)
        LOGGER.info(
            "Session %s started: %s (%s)",
            controller.session_id, game.name, controller.difficulty.value,
        )
        controller.save()
        return controller

    @classmethod
    def restore(
        cls,
        session_id: str,
        store: SessionStore,
        *,
        game: Optional[PuzzleGame] = None,
        clock: Clock = time.time,
    ) -> "SessionController":
        stored = store.load(session_id)
        meta = stored.metadata
        game = game or create_game(meta["game"])
        log = [_entry_from_jsonable(game, item) for item in meta.get("moves", [])]
        controller = cls(
            game,
            meta["difficulty"],
            game.state_from_jsonable(stored.state),
            session_id=session_id,
            store=store,
            clock=clock,
            started_at=meta["started_at"],
            initial_state=game.state_from_jsonable(meta["initial_state"]),
            log=log,
            status=SessionStatus(meta["status"]),
            ended_at=meta.get("ended_at"),
            perfect_move_count=meta.get("perfect_move_count"),
            seed=meta.get("seed"),
        )
        game.check_invariants(controller.state)
        LOGGER.info("Session %s restored with %d log entries", session_id, len(log))
        return controller

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> PuzzleState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def log(self) -> tuple:
        return tuple(self._log)

    @property
    def is_active(self) -> bool:
        return self._status == SessionStatus.ACTIVE

    @property
    def telemetry(self) -> Telemetry:
        ended = self.ended_at if self.ended_at is not None else self.clock()
        return derive_telemetry(
            self._log,
            self.started_at,
            ended,
            perfect_move_count=self.perfect_move_count,
            completed=self._status == SessionStatus.SOLVED,
        )

    @property
    def hints_remaining(self) -> Optional[int]:
        limit = self.game.max_hints(self.difficulty)
        if limit is None:
            return None
        used = sum(1 for entry in self._log if entry.is_hint)
        return max(0, limit - used)

    @property
    def mistakes_remaining(self) -> Optional[int]:
        limit = self.game.max_mistakes(self.difficulty)
        if limit is None:
            return None
        made = sum(1 for entry in self._log if entry.is_mistake)
        return max(0, limit - made)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _ensure_active(self) -> None:
        if not self.is_active:
            raise SessionClosedError(f"Session {self.session_id} is {self._status.value}")

    def move(self, move: Move) -> MoveLogEntry:
        """Validate and apply ``move``; illegal moves leave the session untouched."""

        self._ensure_active()
        if self.game.is_hint_move(move):
            LOGGER.debug("Session %s rejected hint move %r sent as a play", self.session_id, move)
            raise IllegalMoveError("Hints must be requested with request_hint()")
        before = self._state
        try:
            after = self.game.apply(before, move)
        except IllegalMoveError as exc:
            LOGGER.debug("Session %s rejected move %r: %s", self.session_id, move, exc)
            raise
        self.game.check_invariants(after)
        is_correct, is_mistake = self.game.classify(before, move, after)
        entry = self._append(move, after, is_correct=is_correct, is_mistake=is_mistake)
        self._after_change()
        return entry

    def request_hint(self) -> Hint:
        """Consume one hint. Games with ``applies_hints`` also fill the hinted cell."""

        self._ensure_active()
        if self.hints_remaining == 0:
            raise HintUnavailableError(f"No hints left for session {self.session_id}")
        hint = self.game.hint(self._state)
        after = self._state
        if self.game.applies_hints and hint.move is not None:
            after = self.game.apply(self._state, hint.move)
            self.game.check_invariants(after)
        self._append(hint.move, after, is_correct=True, is_mistake=False, is_hint=True)
        self._after_change()
        return hint

    def abandon(self) -> None:
        self._ensure_active()
        self._freeze(SessionStatus.ABANDONED, self.clock())
        LOGGER.info("Session %s abandoned", self.session_id)
        self.save()

    def result(self) -> ScoreResult:
        """Score the frozen session. Computed once and cached."""

        if self.is_active:
            raise ArcadeError(f"Session {self.session_id} is still active")
        if self._result is None:
            self._result = self.game.score(self.telemetry, self.difficulty)
            LOGGER.info(
                "Session %s scored %d (%s)", self.session_id, self._result.score, self._result.rating
            )
            self.save()
        return self._result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _append(
        self,
        move: Optional[Move],
        after: PuzzleState,
        *,
        is_correct: bool,
        is_mistake: bool,
        is_hint: bool = False,
    ) -> MoveLogEntry:
        entry = MoveLogEntry(
            move_number=len(self._log) + 1,
            move=move,
            timestamp=self.clock(),
            summary=self.game.summarize(after),
            is_correct=is_correct,
            is_mistake=is_mistake,
            is_hint=is_hint,
        )
        self._log.append(entry)
        self._state = after
        return entry

    def _after_change(self) -> None:
        timestamp = self._log[-1].timestamp
        if self.game.is_complete(self._state):
            self._freeze(SessionStatus.SOLVED, timestamp)
            LOGGER.info("Session %s solved after %d entries", self.session_id, len(self._log))
        elif self.mistakes_remaining == 0:
            self._freeze(SessionStatus.FAILED, timestamp)
            LOGGER.warning("Session %s failed: mistake limit reached", self.session_id)
        self.save()

    def _freeze(self, status: SessionStatus, timestamp: float) -> None:
        self._status = status
        self.ended_at = timestamp

    def to_document(self) -> Dict[str, Any]:
        return {
            "game": self.game.name,
            "difficulty": self.difficulty.value,
            "status": self._status.value,
            "seed": self.seed,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "perfect_move_count": self.perfect_move_count,
            "initial_state": self.game.state_to_jsonable(self.initial_state),
            "moves": [_entry_to_jsonable(entry) for entry in self._log],
            "score": None if self._result is None else {
                "score": self._result.score,
                "rating": self._result.rating,
                "message": self._result.message,
                "breakdown": dict(self._result.breakdown),
            },
        }

    def save(self) -> None:
        if self.store is None:
            return
        self.store.save(
            self.session_id,
            self.game.state_to_jsonable(self._state),
            self.telemetry,
            self.to_document(),
        )


def _entry_to_jsonable(entry: MoveLogEntry) -> Dict[str, Any]:
    return {
        "move_number": entry.move_number,
        "move": None if entry.move is None else entry.move.to_jsonable(),
        "timestamp": entry.timestamp,
        "summary": dict(entry.summary),
        "is_correct": entry.is_correct,
        "is_mistake": entry.is_mistake,
        "is_hint": entry.is_hint,
    }


def _entry_from_jsonable(game: PuzzleGame, data: Mapping[str, Any]) -> MoveLogEntry:
    move = data.get("move")
    return MoveLogEntry(
        move_number=int(data["move_number"]),
        move=None if move is None else game.move_from_jsonable(move),
        timestamp=float(data["timestamp"]),
        summary=dict(data.get("summary", {})),
        is_correct=bool(data.get("is_correct", True)),
        is_mistake=bool(data.get("is_mistake", False)),
        is_hint=bool(data.get("is_hint", False)),
    )
