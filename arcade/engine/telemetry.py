"""Telemetry as a pure projection of the append-only move log."""

from __future__ import annotations

from typing import Optional, Sequence

from ..core.models import MoveLogEntry, Telemetry
from .scoring import round_half_up


def streaks(entries: Sequence[MoveLogEntry]) -> tuple:
    """Return ``(current, best)`` runs of consecutive correct non-hint moves."""

    current = best = 0
    for entry in entries:
        if entry.is_hint:
            continue
        if entry.is_correct:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return current, best


def derive_telemetry(
    entries: Sequence[MoveLogEntry],
    started_at: float,
    ended_at: Optional[float] = None,
    *,
    perfect_move_count: int = 0,
    completed: bool = False,
) -> Telemetry:
    """Aggregate scoring inputs from ``entries``.

    ``ended_at`` defaults to the timestamp of the last entry (or the start
    when the log is empty). Elapsed time is truncated to whole seconds and
    never negative.
    """

    if ended_at is None:
        ended_at = entries[-1].timestamp if entries else started_at
    current, best = streaks(entries)
    return Telemetry(
        move_count=sum(1 for entry in entries if not entry.is_hint),
        elapsed_seconds=max(0, int(ended_at - started_at)),
        hints_used=sum(1 for entry in entries if entry.is_hint),
        mistakes=sum(1 for entry in entries if entry.is_mistake),
        current_streak=current,
        best_streak=best,
        perfect_move_count=perfect_move_count,
        completed=completed,
    )


def accuracy(entries: Sequence[MoveLogEntry]) -> int:
    """Percentage of non-hint moves flagged correct (100 for an empty log)."""

    moves = [entry for entry in entries if not entry.is_hint]
    if not moves:
        return 100
    correct = sum(1 for entry in moves if entry.is_correct)
    return round_half_up(correct * 100 / len(moves))
