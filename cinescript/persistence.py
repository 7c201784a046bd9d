"""
cinescript.persistence - Saving and loading the project collection.

The collection lives in a small key-value store under two keys: ``projects``
holds the JSON array of projects and ``current_project_id`` the ID of the
project that was open last. Missing or unreadable data falls back to a demo
seed project.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from cinescript.exceptions import PersistenceError
from cinescript.io import read_text, write_text
from cinescript.models import (
    CameraAngle,
    CameraMovement,
    FocusType,
    Lighting,
    Project,
    Scene,
    Shot,
    ShotFraming,
    ShotSize,
    TimeOfDay,
    now_ms,
)
from cinescript.store import duplicate_ids

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"
CURRENT_PROJECT_KEY = "current_project_id"


class Storage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process storage, mainly for tests and embedding."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStorage:
    """One file per key inside a data directory, written atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        suffix = ".json" if key == PROJECTS_KEY else ".txt"
        return self.directory / f"{key}{suffix}"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return read_text(path)

    def set(self, key: str, value: str) -> None:
        write_text(self.path_for(key), value)


def seed_project() -> Project:
    """Demo project shown on first run."""
    return Project(
        id="proj_1",
        name="NEON PROTOCOL",
        description="A high-stakes cyberpunk thriller set in New Tokyo, 2089.",
        director="A. Kubrik",
        dop="R. Deakins",
        created_at=now_ms(),
        scenes=[
            Scene(
                id="scene_1",
                number="1A",
                title="The Awakening",
                location="Cryo Chamber",
                time_of_day=TimeOfDay.INT,
                lighting=Lighting.ARTIFICIAL,
                shots=[
                    Shot(
                        id="shot_1",
                        number=1,
                        size=ShotSize.CU,
                        angle=CameraAngle.EYE_LEVEL,
                        movement=CameraMovement.STATIC,
                        framing=ShotFraming.SINGLE,
                        focus=FocusType.SHALLOW,
                        description="Hero wakes up, eyes opening slowly. Blue flare.",
                        notes="Use macro lens.",
                        lens="100mm Macro",
                        camera="Alexa Mini LF",
                        aperture="T2.8",
                        fps=24,
                        resolution="4K OG",
                        color_temp="5600K",
                    ),
                    Shot(
                        id="shot_2",
                        number=2,
                        size=ShotSize.LS,
                        angle=CameraAngle.HIGH,
                        movement=CameraMovement.DOLLY_OUT,
                        framing=ShotFraming.SINGLE,
                        focus=FocusType.DEEP,
                        description="Wide shot of the cryo room. Steam rising.",
                        notes="Haze machine required.",
                        lens="24mm",
                        camera="Alexa Mini LF",
                        aperture="T4",
                        fps=24,
                        resolution="4K OG",
                        color_temp="3200K",
                    ),
                ],
            )
        ],
    )


def _seed() -> tuple[list[Project], str]:
    project = seed_project()
    return [project], project.id


def load(storage: Storage) -> tuple[list[Project], str]:
    """Load the project collection and the current project ID.

    Falls back to the seed project when nothing is stored or the stored
    data cannot be parsed. A missing current ID defaults to the first
    project.

    Returns:
        Tuple of (projects, current_project_id)
    """
    try:
        raw = storage.get(PROJECTS_KEY)
        current_id = storage.get(CURRENT_PROJECT_KEY)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read stored projects, using seed data: %s", e)
        return _seed()

    if raw is None:
        logger.info("No stored projects, using seed data")
        return _seed()

    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        projects = [Project.model_validate(item) for item in data]
        duplicates = duplicate_ids(projects)
        if duplicates:
            raise ValueError(f"duplicate ids {duplicates}")
    except (ValueError, ValidationError) as e:
        logger.warning("Stored projects are unreadable, using seed data: %s", e)
        return _seed()

    if not projects:
        logger.warning("Stored project list is empty, using seed data")
        return _seed()

    current_id = (current_id or "").strip()
    if not any(p.id == current_id for p in projects):
        current_id = projects[0].id
    return projects, current_id


def save(storage: Storage, projects: list[Project], current_project_id: str | None) -> None:
    """Write the project collection and current project ID.

    Raises:
        PersistenceError: If either value could not be written
    """
    try:
        payload = json.dumps([p.to_storage() for p in projects], indent=2, ensure_ascii=False)
        storage.set(PROJECTS_KEY, payload)
        storage.set(CURRENT_PROJECT_KEY, current_project_id or "")
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(f"Failed to save projects: {e}") from e
