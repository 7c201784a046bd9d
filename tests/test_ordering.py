"""Tests for cinescript.ordering module."""

from __future__ import annotations

import pytest

from cinescript.models import Shot
from cinescript.ordering import Direction, is_contiguous, move, reindex


def ids(shots: list[Shot]) -> list[str]:
    return [s.id for s in shots]


def numbers(shots: list[Shot]) -> list[int]:
    return [s.number for s in shots]


class TestReindex:
    def test_renumbers_by_position(self) -> None:
        shots = [Shot(id="C", number=3), Shot(id="A", number=1)]
        result = reindex(shots)
        assert ids(result) == ["C", "A"]
        assert numbers(result) == [1, 2]

    def test_is_idempotent(self, shots_abc: list[Shot]) -> None:
        shuffled = [shots_abc[2], shots_abc[0], shots_abc[1]]
        once = reindex(shuffled)
        assert reindex(once) == once

    def test_does_not_modify_input(self) -> None:
        shots = [Shot(id="B", number=2), Shot(id="A", number=1)]
        reindex(shots)
        assert numbers(shots) == [2, 1]

    def test_reuses_correctly_numbered_shots(self, shots_abc: list[Shot]) -> None:
        result = reindex(shots_abc)
        assert all(a is b for a, b in zip(result, shots_abc))

    def test_empty(self) -> None:
        assert reindex([]) == []


class TestMove:
    def test_move_down_swaps_with_next(self) -> None:
        shots = [Shot(id="A", number=1), Shot(id="B", number=2)]
        result = move(shots, "A", "down")
        assert ids(result) == ["B", "A"]
        assert numbers(result) == [1, 2]

    def test_move_up_swaps_with_previous(self, shots_abc: list[Shot]) -> None:
        result = move(shots_abc, "C", Direction.UP)
        assert ids(result) == ["A", "C", "B"]
        assert numbers(result) == [1, 2, 3]

    def test_first_up_is_noop(self, shots_abc: list[Shot]) -> None:
        result = move(shots_abc, "A", "up")
        assert result == shots_abc

    def test_last_down_is_noop(self, shots_abc: list[Shot]) -> None:
        result = move(shots_abc, "C", "down")
        assert result == shots_abc

    def test_unknown_id_is_noop(self, shots_abc: list[Shot]) -> None:
        result = move(shots_abc, "missing", "down")
        assert result == shots_abc

    def test_only_adjacent_pair_changes(self) -> None:
        shots = [Shot(id=c, number=i) for i, c in enumerate("ABCDE", 1)]
        result = move(shots, "C", "down")
        changed = [i for i, (a, b) in enumerate(zip(shots, result)) if a != b]
        assert changed == [2, 3]
        assert ids(result) == ["A", "B", "D", "C", "E"]

    def test_does_not_modify_input(self, shots_abc: list[Shot]) -> None:
        move(shots_abc, "A", "down")
        assert ids(shots_abc) == ["A", "B", "C"]
        assert numbers(shots_abc) == [1, 2, 3]

    def test_invalid_direction_raises(self, shots_abc: list[Shot]) -> None:
        with pytest.raises(ValueError):
            move(shots_abc, "A", "sideways")


class TestIsContiguous:
    def test_contiguous(self, shots_abc: list[Shot]) -> None:
        assert is_contiguous(shots_abc) is True

    def test_gap(self) -> None:
        assert is_contiguous([Shot(id="A", number=1), Shot(id="B", number=3)]) is False

    def test_empty(self) -> None:
        assert is_contiguous([]) is True
