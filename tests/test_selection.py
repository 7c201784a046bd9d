"""Tests for cinescript.selection module."""

from __future__ import annotations

from cinescript import selection, store
from cinescript.models import Project
from cinescript.selection import Selection, SelectionState


class TestInitial:
    def test_selects_stored_project_and_first_scene(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        assert sel.current_project_id == "P1"
        assert sel.active_scene_id == "S1"
        assert sel.active_shot is None

    def test_project_without_scenes(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P2")
        assert selection.state(sel) is SelectionState.PROJECT_NO_SCENE

    def test_unknown_id_falls_back_to_first(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "gone")
        assert sel.current_project_id == "P1"

    def test_empty_collection(self) -> None:
        sel = selection.initial([], None)
        assert selection.state(sel) is SelectionState.EMPTY


class TestTransitions:
    def test_switch_project_selects_first_scene(self, projects: list[Project]) -> None:
        sel = Selection(current_project_id="P2")
        result = selection.switch_project(sel, projects, "P1")
        assert result.current_project_id == "P1"
        assert result.active_scene_id == "S1"

    def test_switch_project_discards_open_shot(self, projects: list[Project]) -> None:
        sel = selection.open_shot(selection.initial(projects, "P1"), projects, "A")
        assert sel.active_shot is not None
        result = selection.switch_project(sel, projects, "P2")
        assert result.active_shot is None
        assert result.active_scene_id is None

    def test_switch_to_unknown_project_is_noop(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        assert selection.switch_project(sel, projects, "nope") is sel

    def test_select_scene(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        assert selection.select_scene(sel, projects, "S2").active_scene_id == "S2"

    def test_select_scene_of_other_project_is_noop(self, projects: list[Project]) -> None:
        projects, scene_id = store.create_scene(projects, "P2")
        sel = selection.initial(projects, "P1")
        assert selection.select_scene(sel, projects, scene_id) is sel

    def test_open_shot_requires_active_scene(self, projects: list[Project]) -> None:
        sel = selection.select_scene(selection.initial(projects, "P1"), projects, "S2")
        assert selection.open_shot(sel, projects, "A") is sel

    def test_open_and_close_shot(self, projects: list[Project]) -> None:
        sel = selection.open_shot(selection.initial(projects, "P1"), projects, "B")
        assert sel.active_shot is not None
        assert sel.active_shot.id == "B"
        assert selection.close_shot(sel).active_shot is None


class TestReconcile:
    def test_valid_selection_is_returned_unchanged(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        assert selection.reconcile(sel, projects) is sel

    def test_deleted_project_falls_back_to_first(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P2")
        remaining = store.delete_project(projects, "P2")
        result = selection.reconcile(sel, remaining)
        assert result.current_project_id == "P1"
        assert result.active_scene_id == "S1"

    def test_deleted_active_scene_falls_back_to_first(self, projects: list[Project]) -> None:
        sel = selection.select_scene(selection.initial(projects, "P1"), projects, "S2")
        remaining = store.delete_scene(projects, "P1", "S2")
        assert selection.reconcile(sel, remaining).active_scene_id == "S1"

    def test_last_scene_deleted_clears_scene(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        remaining = store.delete_scene(projects, "P1", "S1")
        remaining = store.delete_scene(remaining, "P1", "S2")
        result = selection.reconcile(sel, remaining)
        assert result.current_project_id == "P1"
        assert result.active_scene_id is None

    def test_deleted_shot_drops_snapshot(self, projects: list[Project]) -> None:
        sel = selection.open_shot(selection.initial(projects, "P1"), projects, "B")
        remaining = store.delete_shot(projects, "P1", "S1", "B")
        result = selection.reconcile(sel, remaining)
        assert result.active_shot is None
        assert result.active_scene_id == "S1"

    def test_empty_collection(self, projects: list[Project]) -> None:
        sel = selection.initial(projects, "P1")
        result = selection.reconcile(sel, [])
        assert selection.state(result) is SelectionState.EMPTY


class TestValidate:
    def test_valid(self, projects: list[Project]) -> None:
        assert selection.validate(selection.initial(projects, "P1"), projects) == []

    def test_dangling_project(self, projects: list[Project]) -> None:
        problems = selection.validate(Selection(current_project_id="X"), projects)
        assert len(problems) == 1
        assert "'X'" in problems[0]

    def test_scenes_but_none_active(self, projects: list[Project]) -> None:
        problems = selection.validate(Selection(current_project_id="P1"), projects)
        assert problems == ["project P1 has scenes but none is active"]

    def test_dangling_scene(self, projects: list[Project]) -> None:
        sel = Selection(current_project_id="P2", active_scene_id="S1")
        assert len(selection.validate(sel, projects)) == 1
