"""
cinescript.store - Structural operations on the project collection.

Every function takes the current list of projects and returns a new one;
inputs are never modified in place. Operations addressing a project, scene
or shot that does not exist are no-ops and return the input list itself.
Creating operations also return the new entity's ID, or None on a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from cinescript import ordering
from cinescript.exceptions import InvariantError
from cinescript.models import Project, Scene, Shot
from cinescript.ordering import Direction

logger = logging.getLogger(__name__)

Projects = list[Project]


def _check(projects: Projects) -> None:
    if not isinstance(projects, list):
        raise InvariantError([f"project collection must be a list, got {type(projects).__name__}"])
    for i, project in enumerate(projects):
        if not isinstance(project, Project):
            raise InvariantError([f"item {i} is {type(project).__name__}, not Project"])


def _map_project(
    projects: Projects,
    project_id: str,
    fn: Callable[[Project], Project],
) -> Projects:
    for i, project in enumerate(projects):
        if project.id == project_id:
            updated = fn(project)
            if updated is project:
                return projects
            result = list(projects)
            result[i] = updated
            return result
    logger.debug("No project %s, skipping", project_id)
    return projects


def _map_scene(
    projects: Projects,
    project_id: str,
    scene_id: str,
    fn: Callable[[Scene], Scene],
) -> Projects:
    def on_project(project: Project) -> Project:
        for i, scene in enumerate(project.scenes):
            if scene.id == scene_id:
                updated = fn(scene)
                if updated is scene:
                    return project
                scenes = list(project.scenes)
                scenes[i] = updated
                return project.model_copy(update={"scenes": scenes})
        logger.debug("No scene %s in project %s, skipping", scene_id, project_id)
        return project

    return _map_project(projects, project_id, on_project)


def find_project(projects: Projects, project_id: str | None) -> Project | None:
    return next((p for p in projects if p.id == project_id), None)


def find_scene(project: Project | None, scene_id: str | None) -> Scene | None:
    if project is None:
        return None
    return next((s for s in project.scenes if s.id == scene_id), None)


def find_shot(scene: Scene | None, shot_id: str | None) -> Shot | None:
    if scene is None:
        return None
    return next((s for s in scene.shots if s.id == shot_id), None)


def duplicate_ids(projects: Projects) -> list[str]:
    """List project, scene and shot IDs that occur more than once."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for project in projects:
        ids = [project.id]
        for scene in project.scenes:
            ids.append(scene.id)
            ids.extend(shot.id for shot in scene.shots)
        for entity_id in ids:
            if entity_id in seen and entity_id not in duplicates:
                duplicates.append(entity_id)
            seen.add(entity_id)
    return duplicates


# Projects


def new_project() -> Project:
    """Build a blank project with placeholder metadata."""
    return Project(name="UNTITLED PROJECT", description="", director="TBD", dop="TBD")


def create_project(projects: Projects) -> tuple[Projects, str]:
    """Append a blank project."""
    _check(projects)
    project = new_project()
    return [*projects, project], project.id


def delete_project(projects: Projects, project_id: str) -> Projects:
    """Remove a project and everything in it.

    Deleting the last project inserts a fresh blank one, so the collection
    is never left empty.
    """
    _check(projects)
    remaining = [p for p in projects if p.id != project_id]
    if len(remaining) == len(projects):
        return projects
    if not remaining:
        logger.info("Deleted last project %s, creating a blank replacement", project_id)
        remaining = [new_project()]
    return remaining


def update_project(projects: Projects, project: Project) -> Projects:
    """Replace the project with the same ID."""
    _check(projects)
    return _map_project(projects, project.id, lambda _: project)


# Scenes


def create_scene(projects: Projects, project_id: str) -> tuple[Projects, str | None]:
    """Append a blank scene (EXT / DAY, location TBD) to a project."""
    _check(projects)
    project = find_project(projects, project_id)
    if project is None:
        return projects, None

    scene = Scene(
        number=f"{len(project.scenes) + 1}A",
        title="NEW SCENE",
        location="TBD",
    )
    result = _map_project(
        projects,
        project_id,
        lambda p: p.model_copy(update={"scenes": [*p.scenes, scene]}),
    )
    return result, scene.id


def update_scene(projects: Projects, project_id: str, scene: Scene) -> Projects:
    """Replace the scene with the same ID inside a project."""
    _check(projects)
    return _map_scene(projects, project_id, scene.id, lambda _: scene)


def delete_scene(projects: Projects, project_id: str, scene_id: str) -> Projects:
    """Remove a scene and all of its shots."""
    _check(projects)

    def on_project(project: Project) -> Project:
        scenes = [s for s in project.scenes if s.id != scene_id]
        if len(scenes) == len(project.scenes):
            return project
        return project.model_copy(update={"scenes": scenes})

    return _map_project(projects, project_id, on_project)


# Shots


def add_shot(
    projects: Projects, project_id: str, scene_id: str
) -> tuple[Projects, str | None]:
    """Append a blank shot numbered after the scene's last shot."""
    _check(projects)
    scene = find_scene(find_project(projects, project_id), scene_id)
    if scene is None:
        return projects, None

    shot = Shot(number=len(scene.shots) + 1)
    result = _map_scene(
        projects,
        project_id,
        scene_id,
        lambda s: s.model_copy(update={"shots": [*s.shots, shot]}),
    )
    return result, shot.id


def update_shot(projects: Projects, project_id: str, scene_id: str, shot: Shot) -> Projects:
    """Replace the shot with the same ID, keeping its number as given."""
    _check(projects)

    def on_scene(scene: Scene) -> Scene:
        for i, existing in enumerate(scene.shots):
            if existing.id == shot.id:
                shots = list(scene.shots)
                shots[i] = shot
                return scene.model_copy(update={"shots": shots})
        return scene

    return _map_scene(projects, project_id, scene_id, on_scene)


def delete_shot(projects: Projects, project_id: str, scene_id: str, shot_id: str) -> Projects:
    """Remove a shot and renumber the rest of the scene."""
    _check(projects)

    def on_scene(scene: Scene) -> Scene:
        shots = [s for s in scene.shots if s.id != shot_id]
        if len(shots) == len(scene.shots):
            return scene
        return scene.model_copy(update={"shots": ordering.reindex(shots)})

    return _map_scene(projects, project_id, scene_id, on_scene)


def move_shot(
    projects: Projects,
    project_id: str,
    scene_id: str,
    shot_id: str,
    direction: Direction | str,
) -> Projects:
    """Swap a shot with its neighbour in the given direction."""
    _check(projects)

    def on_scene(scene: Scene) -> Scene:
        shots = ordering.move(scene.shots, shot_id, direction)
        if [s.id for s in shots] == [s.id for s in scene.shots]:
            return scene
        return scene.model_copy(update={"shots": shots})

    return _map_scene(projects, project_id, scene_id, on_scene)
