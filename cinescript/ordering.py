"""
cinescript.ordering - Shot renumbering and adjacent reordering.

A shot's number is always its 1-based position within the scene. These
functions never modify their input; they return new lists of shot copies.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from cinescript.models import Shot


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


def reindex(shots: Sequence[Shot]) -> list[Shot]:
    """Rewrite shot numbers to 1..N by position.

    Shots already carrying the right number are reused as-is, so reindexing
    an ordered list is a no-op.

    Args:
        shots: Shots in display order

    Returns:
        New list with the same shots in the same order, numbered 1..N
    """
    return [
        shot if shot.number == position else shot.model_copy(update={"number": position})
        for position, shot in enumerate(shots, 1)
    ]


def move(shots: Sequence[Shot], target_id: str, direction: Direction | str) -> list[Shot]:
    """Swap a shot with its neighbour above or below, then renumber.

    Moving an unknown shot, the first shot up, or the last shot down
    leaves the order unchanged.

    Args:
        shots: Shots in display order
        target_id: ID of the shot to move
        direction: "up" or "down"

    Returns:
        New list of shots, numbered 1..N
    """
    direction = Direction(direction)
    index = next((i for i, s in enumerate(shots) if s.id == target_id), None)
    if index is None:
        return list(shots)

    swap_index = index - 1 if direction is Direction.UP else index + 1
    if swap_index < 0 or swap_index >= len(shots):
        return list(shots)

    reordered = list(shots)
    reordered[index], reordered[swap_index] = reordered[swap_index], reordered[index]
    return reindex(reordered)


def is_contiguous(shots: Sequence[Shot]) -> bool:
    """Check that shot numbers run 1..N in list order."""
    return all(shot.number == position for position, shot in enumerate(shots, 1))
