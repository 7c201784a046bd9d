"""
cinescript.session - Application state controller.

ShotListSession owns the project collection and the selection. Every intent
goes through it: the store applies the structural change, the selection is
reconciled against the result, invariants are checked, and the new state is
written through to storage before a Snapshot is returned.

Storage failures never roll back the in-memory state; they come back as a
warning on the snapshot.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from cinescript import ordering, persistence, selection, store
from cinescript.exceptions import InvariantError, PersistenceError
from cinescript.llm.enrich import apply_suggestion
from cinescript.models import Project, Scene, Shot, ShotSuggestion
from cinescript.ordering import Direction
from cinescript.persistence import Storage
from cinescript.selection import Selection, SelectionState

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """Immutable view of the session after an operation."""

    model_config = ConfigDict(frozen=True)

    projects: list[Project]
    selection: Selection
    created_id: str | None = None
    warning: str | None = None

    @property
    def current_project(self) -> Project | None:
        return store.find_project(self.projects, self.selection.current_project_id)

    @property
    def active_scene(self) -> Scene | None:
        return store.find_scene(self.current_project, self.selection.active_scene_id)

    @property
    def state(self) -> SelectionState:
        return selection.state(self.selection)


class RequestToken(BaseModel):
    """Identifies the shot revision a collaborator request was made against."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    scene_id: str
    shot_id: str
    revision: int


class ShotListSession:
    """Single owner of the shot list state."""

    def __init__(
        self,
        storage: Storage,
        projects: list[Project],
        current_project_id: str | None,
        strict_invariants: bool = False,
    ) -> None:
        self.storage = storage
        self.strict_invariants = strict_invariants
        self._projects = list(projects)
        self._selection = selection.initial(self._projects, current_project_id)
        self._revisions: dict[str, int] = {}
        self._projects, self._selection = self._guard(self._projects, self._selection)

    @classmethod
    def open(cls, storage: Storage, strict_invariants: bool = False) -> ShotListSession:
        """Load the stored collection, seeding it on first run."""
        projects, current_id = persistence.load(storage)
        return cls(storage, projects, current_id, strict_invariants=strict_invariants)

    # State access

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def current_project(self) -> Project | None:
        return store.find_project(self._projects, self._selection.current_project_id)

    @property
    def active_scene(self) -> Scene | None:
        return store.find_scene(self.current_project, self._selection.active_scene_id)

    @property
    def state(self) -> SelectionState:
        return selection.state(self._selection)

    def snapshot(self, created_id: str | None = None, warning: str | None = None) -> Snapshot:
        return Snapshot(
            projects=list(self._projects),
            selection=self._selection,
            created_id=created_id,
            warning=warning,
        )

    def save(self) -> str | None:
        """Write the current state to storage; returns a warning on failure."""
        try:
            persistence.save(self.storage, self._projects, self._selection.current_project_id)
        except PersistenceError as e:
            logger.warning("%s", e)
            return str(e)
        return None

    # Internals

    def _current_id(self) -> str:
        return self._selection.current_project_id or ""

    def _scene_id(self, scene_id: str | None) -> str:
        return scene_id or self._selection.active_scene_id or ""

    def _problems(self, projects: list[Project], sel: Selection) -> list[str]:
        problems = []
        duplicates = store.duplicate_ids(projects)
        if duplicates:
            problems.append(f"ids {duplicates} are not unique")
        for project in projects:
            for scene in project.scenes:
                if not ordering.is_contiguous(scene.shots):
                    numbers = [s.number for s in scene.shots]
                    problems.append(f"scene {scene.id} has shot numbers {numbers}")
        problems.extend(selection.validate(sel, projects))
        return problems

    def _guard(self, projects: list[Project], sel: Selection) -> tuple[list[Project], Selection]:
        problems = self._problems(projects, sel)
        if not problems:
            return projects, sel
        if self.strict_invariants:
            raise InvariantError(problems)

        logger.error("Invariant check failed, rebuilding order and selection: %s", problems)
        rebuilt = [
            project.model_copy(
                update={
                    "scenes": [
                        scene.model_copy(update={"shots": ordering.reindex(scene.shots)})
                        for scene in project.scenes
                    ]
                }
            )
            for project in projects
        ]
        return rebuilt, selection.reconcile(sel, rebuilt)

    def _commit(
        self,
        projects: list[Project],
        sel: Selection,
        created_id: str | None = None,
    ) -> Snapshot:
        sel = selection.reconcile(sel, projects)
        if projects is self._projects and sel == self._selection:
            return self.snapshot(created_id=created_id)

        projects, sel = self._guard(projects, sel)
        persist = projects is not self._projects or (
            sel.current_project_id != self._selection.current_project_id
        )
        self._projects, self._selection = projects, sel
        warning = self.save() if persist else None
        return self.snapshot(created_id=created_id, warning=warning)

    def _bump(self, shot_id: str) -> None:
        self._revisions[shot_id] = self._revisions.get(shot_id, 0) + 1

    # Projects

    def create_project(self) -> Snapshot:
        """Add a blank project and make it current."""
        projects, project_id = store.create_project(self._projects)
        sel = selection.switch_project(self._selection, projects, project_id)
        return self._commit(projects, sel, created_id=project_id)

    def delete_project(self, project_id: str) -> Snapshot:
        projects = store.delete_project(self._projects, project_id)
        return self._commit(projects, self._selection)

    def update_project(self, project: Project) -> Snapshot:
        projects = store.update_project(self._projects, project)
        return self._commit(projects, self._selection)

    def switch_project(self, project_id: str) -> Snapshot:
        sel = selection.switch_project(self._selection, self._projects, project_id)
        return self._commit(self._projects, sel)

    # Scenes

    def create_scene(self) -> Snapshot:
        """Append a blank scene to the current project and activate it."""
        projects, scene_id = store.create_scene(self._projects, self._current_id())
        sel = self._selection
        if scene_id is not None:
            sel = selection.select_scene(sel, projects, scene_id)
        return self._commit(projects, sel, created_id=scene_id)

    def update_scene(self, scene: Scene) -> Snapshot:
        projects = store.update_scene(self._projects, self._current_id(), scene)
        return self._commit(projects, self._selection)

    def delete_scene(self, scene_id: str) -> Snapshot:
        projects = store.delete_scene(self._projects, self._current_id(), scene_id)
        for shot_id in self._shot_ids(scene_id):
            self._revisions.pop(shot_id, None)
        return self._commit(projects, self._selection)

    def select_scene(self, scene_id: str) -> Snapshot:
        sel = selection.select_scene(self._selection, self._projects, scene_id)
        return self._commit(self._projects, sel)

    def _shot_ids(self, scene_id: str) -> list[str]:
        scene = store.find_scene(self.current_project, scene_id)
        return [s.id for s in scene.shots] if scene else []

    # Shots

    def add_shot(self, scene_id: str | None = None) -> Snapshot:
        """Append a blank shot to a scene and open it for editing."""
        scene_id = self._scene_id(scene_id)
        projects, shot_id = store.add_shot(self._projects, self._current_id(), scene_id)
        sel = self._selection
        if shot_id is not None:
            sel = selection.select_scene(sel, projects, scene_id)
            sel = selection.open_shot(sel, projects, shot_id)
        return self._commit(projects, sel, created_id=shot_id)

    def update_shot(self, shot: Shot, scene_id: str | None = None) -> Snapshot:
        """Save an edited shot and close the edit snapshot."""
        projects = store.update_shot(
            self._projects, self._current_id(), self._scene_id(scene_id), shot
        )
        if projects is not self._projects:
            self._bump(shot.id)
        return self._commit(projects, selection.close_shot(self._selection))

    def delete_shot(self, shot_id: str, scene_id: str | None = None) -> Snapshot:
        projects = store.delete_shot(
            self._projects, self._current_id(), self._scene_id(scene_id), shot_id
        )
        if projects is not self._projects:
            self._revisions.pop(shot_id, None)
        return self._commit(projects, self._selection)

    def move_shot(
        self, shot_id: str, direction: Direction | str, scene_id: str | None = None
    ) -> Snapshot:
        projects = store.move_shot(
            self._projects, self._current_id(), self._scene_id(scene_id), shot_id, direction
        )
        return self._commit(projects, self._selection)

    def open_shot(self, shot_id: str) -> Snapshot:
        sel = selection.open_shot(self._selection, self._projects, shot_id)
        return self._commit(self._projects, sel)

    def close_shot(self) -> Snapshot:
        return self._commit(self._projects, selection.close_shot(self._selection))

    def find_shot(self, shot_id: str, scene_id: str | None = None) -> Shot | None:
        scene = store.find_scene(self.current_project, self._scene_id(scene_id))
        return store.find_shot(scene, shot_id)

    # Collaborator results

    def request_token(self, shot_id: str, scene_id: str | None = None) -> RequestToken | None:
        """Capture the shot revision before calling an AI collaborator.

        Revisions live in this session only and are not persisted, so results
        are checked against edits made through the same session. Two CLI
        processes working on the same shot do not see each other's edits.
        """
        scene_id = self._scene_id(scene_id)
        if self.find_shot(shot_id, scene_id) is None:
            return None
        return RequestToken(
            project_id=self._current_id(),
            scene_id=scene_id,
            shot_id=shot_id,
            revision=self._revisions.get(shot_id, 0),
        )

    def _resolve(self, token: RequestToken) -> Shot | str:
        shot = store.find_shot(
            store.find_scene(store.find_project(self._projects, token.project_id), token.scene_id),
            token.shot_id,
        )
        if shot is None:
            return f"Shot {token.shot_id} no longer exists; result discarded"
        if self._revisions.get(token.shot_id, 0) != token.revision:
            return f"Shot {token.shot_id} was edited while the request ran; result discarded"
        return shot

    def _apply(self, token: RequestToken, shot: Shot) -> Snapshot:
        projects = store.update_shot(self._projects, token.project_id, token.scene_id, shot)
        if projects is not self._projects:
            self._bump(shot.id)
        return self._commit(projects, self._selection)

    def apply_suggestion(self, token: RequestToken, suggestion: ShotSuggestion) -> Snapshot:
        """Merge AI-suggested details into a shot unless it changed meanwhile."""
        shot = self._resolve(token)
        if isinstance(shot, str):
            logger.warning("%s", shot)
            return self.snapshot(warning=shot)
        return self._apply(token, apply_suggestion(shot, suggestion))

    def apply_image(self, token: RequestToken, image_url: str) -> Snapshot:
        """Attach a generated image to a shot unless it changed meanwhile."""
        shot = self._resolve(token)
        if isinstance(shot, str):
            logger.warning("%s", shot)
            return self.snapshot(warning=shot)
        return self._apply(token, shot.model_copy(update={"image_url": image_url}))
