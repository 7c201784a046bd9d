"""Tests for cinescript.session module."""

from __future__ import annotations

import json

import pytest

from cinescript.exceptions import InvariantError
from cinescript.models import CameraMovement, Project, Shot, ShotSize, ShotSuggestion
from cinescript.persistence import CURRENT_PROJECT_KEY, PROJECTS_KEY, MemoryStorage
from cinescript.selection import SelectionState
from cinescript.session import ShotListSession


def stored(storage: MemoryStorage) -> tuple[list[dict], str]:
    return json.loads(storage.data[PROJECTS_KEY]), storage.data[CURRENT_PROJECT_KEY]


class TestOpen:
    def test_first_run_seeds_demo_project(self, storage: MemoryStorage) -> None:
        session = ShotListSession.open(storage)
        assert session.current_project.name == "NEON PROTOCOL"
        assert session.active_scene.title == "The Awakening"
        assert session.state is SelectionState.PROJECT_WITH_SCENE

    def test_restores_current_project(self, projects: list[Project]) -> None:
        storage = MemoryStorage()
        ShotListSession(storage, projects, "P2").save()
        session = ShotListSession.open(storage)
        assert session.selection.current_project_id == "P2"
        assert session.state is SelectionState.PROJECT_NO_SCENE

    def test_lenient_mode_repairs_numbering(self, storage: MemoryStorage) -> None:
        shots = [Shot(id="A", number=1), Shot(id="B", number=5)]
        project = Project(id="P1", scenes=[{"id": "S1", "shots": shots}])
        session = ShotListSession(storage, [project], "P1")
        assert [s.number for s in session.active_scene.shots] == [1, 2]

    def test_strict_mode_rejects_bad_numbering(self, storage: MemoryStorage) -> None:
        shots = [Shot(id="A", number=2)]
        project = Project(id="P1", scenes=[{"id": "S1", "shots": shots}])
        with pytest.raises(InvariantError, match="shot numbers"):
            ShotListSession(storage, [project], "P1", strict_invariants=True)

    def test_strict_mode_rejects_duplicate_ids(self, storage: MemoryStorage) -> None:
        projects = [Project(id="P1", name="A"), Project(id="P1", name="B")]
        with pytest.raises(InvariantError, match="not unique"):
            ShotListSession(storage, projects, "P1", strict_invariants=True)


class TestProjectIntents:
    def test_create_project_switches_and_persists(
        self, session: ShotListSession, storage: MemoryStorage
    ) -> None:
        snapshot = session.create_project()
        assert snapshot.created_id is not None
        assert snapshot.selection.current_project_id == snapshot.created_id
        assert snapshot.state is SelectionState.PROJECT_NO_SCENE

        data, current_id = stored(storage)
        assert len(data) == 3
        assert current_id == snapshot.created_id

    def test_delete_current_project_falls_back(self, session: ShotListSession) -> None:
        snapshot = session.delete_project("P1")
        assert [p.id for p in snapshot.projects] == ["P2"]
        assert snapshot.selection.current_project_id == "P2"

    def test_delete_only_project_leaves_blank(self, storage: MemoryStorage) -> None:
        session = ShotListSession.open(storage, strict_invariants=True)
        seed_id = session.current_project.id
        snapshot = session.delete_project(seed_id)
        assert len(snapshot.projects) == 1
        assert snapshot.current_project.name == "UNTITLED PROJECT"
        assert snapshot.selection.current_project_id != seed_id
        assert snapshot.selection.current_project_id == snapshot.projects[0].id

    def test_update_project(self, session: ShotListSession, storage: MemoryStorage) -> None:
        edited = session.current_project.model_copy(update={"director": "N. Ray"})
        snapshot = session.update_project(edited)
        assert snapshot.current_project.director == "N. Ray"
        data, _ = stored(storage)
        assert data[0]["director"] == "N. Ray"

    def test_switch_project(self, session: ShotListSession, storage: MemoryStorage) -> None:
        snapshot = session.switch_project("P2")
        assert snapshot.selection.current_project_id == "P2"
        assert snapshot.selection.active_scene_id is None
        assert stored(storage)[1] == "P2"

    def test_switch_to_unknown_project_changes_nothing(
        self, session: ShotListSession, storage: MemoryStorage
    ) -> None:
        before = session.selection
        snapshot = session.switch_project("nope")
        assert snapshot.selection == before
        assert storage.data == {}


class TestSceneIntents:
    def test_create_scene_activates_it(self, session: ShotListSession) -> None:
        snapshot = session.create_scene()
        assert snapshot.selection.active_scene_id == snapshot.created_id
        assert snapshot.active_scene.number == "3A"

    def test_select_scene_is_not_persisted(
        self, session: ShotListSession, storage: MemoryStorage
    ) -> None:
        snapshot = session.select_scene("S2")
        assert snapshot.selection.active_scene_id == "S2"
        assert storage.data == {}

    def test_delete_active_scene(self, session: ShotListSession) -> None:
        session.select_scene("S2")
        snapshot = session.delete_scene("S2")
        assert snapshot.selection.active_scene_id == "S1"

    def test_delete_other_scene_keeps_active(self, session: ShotListSession) -> None:
        session.select_scene("S2")
        snapshot = session.delete_scene("S1")
        assert snapshot.selection.active_scene_id == "S2"

    def test_delete_last_scene(self, session: ShotListSession) -> None:
        session.delete_scene("S1")
        snapshot = session.delete_scene("S2")
        assert snapshot.state is SelectionState.PROJECT_NO_SCENE

    def test_update_scene(self, session: ShotListSession) -> None:
        scene = session.active_scene.model_copy(update={"location": "Rooftop"})
        snapshot = session.update_scene(scene)
        assert snapshot.active_scene.location == "Rooftop"


class TestShotIntents:
    def test_add_shot_opens_it(self, session: ShotListSession) -> None:
        snapshot = session.add_shot("S2")
        assert snapshot.selection.active_scene_id == "S2"
        assert snapshot.selection.active_shot.id == snapshot.created_id
        assert snapshot.selection.active_shot.number == 1

    def test_add_shot_defaults_to_active_scene(self, session: ShotListSession) -> None:
        snapshot = session.add_shot()
        assert [s.number for s in snapshot.active_scene.shots] == [1, 2, 3, 4]

    def test_update_shot_closes_snapshot(self, session: ShotListSession) -> None:
        session.open_shot("B")
        shot = session.selection.active_shot.model_copy(update={"lens": "50mm"})
        snapshot = session.update_shot(shot)
        assert snapshot.selection.active_shot is None
        assert session.find_shot("B").lens == "50mm"

    def test_delete_open_shot_drops_snapshot(self, session: ShotListSession) -> None:
        session.open_shot("B")
        snapshot = session.delete_shot("B")
        assert snapshot.selection.active_shot is None
        assert [(s.id, s.number) for s in snapshot.active_scene.shots] == [("A", 1), ("C", 2)]

    def test_move_shot(self, session: ShotListSession, storage: MemoryStorage) -> None:
        snapshot = session.move_shot("C", "up")
        assert [s.id for s in snapshot.active_scene.shots] == ["A", "C", "B"]
        data, _ = stored(storage)
        assert [s["id"] for s in data[0]["scenes"][0]["shots"]] == ["A", "C", "B"]

    def test_boundary_move_does_not_write(
        self, session: ShotListSession, storage: MemoryStorage
    ) -> None:
        session.move_shot("A", "up")
        assert storage.data == {}

    def test_open_and_close_shot(self, session: ShotListSession) -> None:
        assert session.open_shot("A").selection.active_shot.id == "A"
        assert session.close_shot().selection.active_shot is None

    def test_save_failure_keeps_state(self, projects: list[Project], failing_storage) -> None:
        session = ShotListSession(failing_storage, projects, "P1", strict_invariants=True)
        snapshot = session.add_shot()
        assert snapshot.warning is not None
        assert "No space left" in snapshot.warning
        assert len(session.active_scene.shots) == 4


class TestCollaboratorResults:
    def test_apply_suggestion(self, session: ShotListSession) -> None:
        token = session.request_token("A")
        suggestion = ShotSuggestion(lens="85mm", size=ShotSize.CU, lighting="Soft key")
        snapshot = session.apply_suggestion(token, suggestion)
        assert snapshot.warning is None
        shot = session.find_shot("A")
        assert shot.lens == "85mm"
        assert shot.size is ShotSize.CU
        assert shot.number == 1

    def test_suggestion_for_edited_shot_is_discarded(self, session: ShotListSession) -> None:
        token = session.request_token("A")
        session.update_shot(session.find_shot("A").model_copy(update={"lens": "35mm"}))

        snapshot = session.apply_suggestion(
            token, ShotSuggestion(lens="85mm", movement=CameraMovement.CRANE)
        )
        assert "discarded" in snapshot.warning
        assert session.find_shot("A").lens == "35mm"

    def test_suggestion_for_deleted_shot_is_discarded(self, session: ShotListSession) -> None:
        token = session.request_token("B")
        session.delete_shot("B")
        snapshot = session.apply_suggestion(token, ShotSuggestion(lens="85mm"))
        assert "no longer exists" in snapshot.warning
        assert [s.id for s in snapshot.active_scene.shots] == ["A", "C"]

    def test_moved_shot_still_receives_result(self, session: ShotListSession) -> None:
        token = session.request_token("A")
        session.move_shot("A", "down")
        session.apply_image(token, "data:image/png;base64,AAAA")
        shot = session.find_shot("A")
        assert shot.image_url == "data:image/png;base64,AAAA"
        assert shot.number == 2

    def test_second_image_after_first_is_stale(self, session: ShotListSession) -> None:
        first = session.request_token("A")
        second = session.request_token("A")
        session.apply_image(first, "https://example.com/1.png")
        snapshot = session.apply_image(second, "https://example.com/2.png")
        assert snapshot.warning is not None
        assert session.find_shot("A").image_url == "https://example.com/1.png"

    def test_request_token_unknown_shot(self, session: ShotListSession) -> None:
        assert session.request_token("Z") is None

    def test_revisions_are_per_session(self, storage: MemoryStorage) -> None:
        first = ShotListSession.open(storage, strict_invariants=True)
        first.save()
        second = ShotListSession.open(storage, strict_invariants=True)

        token = first.request_token("shot_1")
        second.update_shot(second.find_shot("shot_1").model_copy(update={"lens": "35mm"}))

        snapshot = first.apply_suggestion(token, ShotSuggestion(lens="85mm"))
        assert snapshot.warning is None
        assert first.find_shot("shot_1").lens == "85mm"
