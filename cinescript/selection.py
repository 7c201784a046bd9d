"""
cinescript.selection - Current project / active scene tracking.

The selection holds IDs, never references into the project tree, and is
re-validated against the live collection after every change. An optional
shot snapshot holds the shot currently open for editing.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from cinescript.models import Project, Shot
from cinescript.store import find_project, find_scene, find_shot

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    EMPTY = "empty"
    PROJECT_NO_SCENE = "project_no_scene"
    PROJECT_WITH_SCENE = "project_with_scene"


class Selection(BaseModel):
    """Immutable selection value; transitions return new instances."""

    model_config = ConfigDict(frozen=True)

    current_project_id: str | None = None
    active_scene_id: str | None = None
    active_shot: Shot | None = None


def state(selection: Selection) -> SelectionState:
    if selection.current_project_id is None:
        return SelectionState.EMPTY
    if selection.active_scene_id is None:
        return SelectionState.PROJECT_NO_SCENE
    return SelectionState.PROJECT_WITH_SCENE


def _enter(project: Project | None) -> Selection:
    if project is None:
        return Selection()
    first_scene = project.scenes[0].id if project.scenes else None
    return Selection(current_project_id=project.id, active_scene_id=first_scene)


def initial(projects: list[Project], project_id: str | None) -> Selection:
    """Build the selection for a freshly loaded collection."""
    project = find_project(projects, project_id)
    if project is None and projects:
        project = projects[0]
    return _enter(project)


def switch_project(selection: Selection, projects: list[Project], project_id: str) -> Selection:
    """Make another project current and select its first scene.

    Any open shot snapshot is discarded. Unknown IDs leave the selection
    unchanged.
    """
    project = find_project(projects, project_id)
    if project is None:
        logger.debug("Cannot switch to unknown project %s", project_id)
        return selection
    return _enter(project)


def select_scene(selection: Selection, projects: list[Project], scene_id: str) -> Selection:
    """Activate a scene of the current project."""
    project = find_project(projects, selection.current_project_id)
    if find_scene(project, scene_id) is None:
        logger.debug("Scene %s is not in the current project", scene_id)
        return selection
    return Selection(current_project_id=selection.current_project_id, active_scene_id=scene_id)


def open_shot(selection: Selection, projects: list[Project], shot_id: str) -> Selection:
    """Start editing a shot of the active scene."""
    project = find_project(projects, selection.current_project_id)
    scene = find_scene(project, selection.active_scene_id)
    shot = find_shot(scene, shot_id)
    if shot is None:
        return selection
    return selection.model_copy(update={"active_shot": shot})


def close_shot(selection: Selection) -> Selection:
    if selection.active_shot is None:
        return selection
    return selection.model_copy(update={"active_shot": None})


def reconcile(selection: Selection, projects: list[Project]) -> Selection:
    """Re-validate the selection against a new project collection.

    - a current project that no longer exists is replaced by the first one
    - an active scene that left the current project is replaced by its first
      scene, or cleared when it has none
    - a shot snapshot whose shot was deleted from the active scene is dropped
    """
    project = find_project(projects, selection.current_project_id)
    if project is None:
        if selection.current_project_id is not None:
            logger.debug("Current project %s is gone", selection.current_project_id)
        return _enter(projects[0] if projects else None)

    scene = find_scene(project, selection.active_scene_id)
    if scene is None:
        return _enter(project)

    active_shot = selection.active_shot
    if active_shot is not None and find_shot(scene, active_shot.id) is None:
        logger.debug("Discarding edit snapshot of deleted shot %s", active_shot.id)
        active_shot = None

    if active_shot is selection.active_shot:
        return selection
    return selection.model_copy(update={"active_shot": active_shot})


def validate(selection: Selection, projects: list[Project]) -> list[str]:
    """List every way the selection fails to reference live entities."""
    problems = []
    if not projects:
        if selection.current_project_id is not None:
            problems.append("selection points at a project but the collection is empty")
        return problems

    project = find_project(projects, selection.current_project_id)
    if project is None:
        problems.append(f"current project {selection.current_project_id!r} does not exist")
        return problems

    if selection.active_scene_id is None:
        if project.scenes:
            problems.append(f"project {project.id} has scenes but none is active")
    else:
        scene = find_scene(project, selection.active_scene_id)
        if scene is None:
            problems.append(
                f"active scene {selection.active_scene_id!r} is not in project {project.id}"
            )
        elif selection.active_shot is not None:
            shot_id = selection.active_shot.id
            if find_shot(scene, shot_id) is None:
                problems.append(f"edit snapshot references missing shot {shot_id}")
    return problems
