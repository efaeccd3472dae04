"""Custom exception hierarchy for the puzzle core."""


class ArcadeError(Exception):
    """Base exception for recoverable puzzle failures."""


class IllegalMoveError(ArcadeError):
    """Raised when a move is rejected by the game's movement rules."""


class GenerationExhaustedError(ArcadeError):
    """Raised when a generator runs out of its attempt budget."""


class SessionClosedError(ArcadeError):
    """Raised when a frozen session receives another action."""


class HintUnavailableError(ArcadeError):
    """Raised when no hint can be given (budget spent or nothing left to hint)."""


class PuzzleFormatError(ArcadeError):
    """Raised when a serialized board cannot be parsed or solved."""


class SessionNotFoundError(ArcadeError):
    """Raised when the session store has no document for an id."""


class SolverTimeoutError(ArcadeError):
    """Raised when CP-SAT stops before proving a result."""


class InvariantViolation(AssertionError):
    """Raised when a puzzle state breaks its structural invariant.

    Deliberately outside :class:`ArcadeError`: this signals corrupted state
    from a caller bug and must not be caught by routine recovery paths.
    """
