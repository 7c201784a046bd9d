"""
cinescript.workspace - Workspace directory management.

A workspace is a directory holding cinescript.yaml, the stored shot lists
(data/), optional prompt overrides (prompts/) and CSV exports (exports/).
"""

from __future__ import annotations

from pathlib import Path

from cinescript.config import (
    CONFIG_FILENAME,
    CineScriptConfig,
    create_default_config,
    load_config,
    write_config,
)
from cinescript.exceptions import WorkspaceError
from cinescript.persistence import FileStorage
from cinescript.session import ShotListSession

ACTIVE_SCENE_KEY = "active_scene_id"


class Workspace:
    """Represents a CineScript workspace directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.config_path = path / CONFIG_FILENAME
        self.prompts_dir = path / "prompts"
        self.export_dir = path / "exports"
        self._config: CineScriptConfig | None = None

    @property
    def config(self) -> CineScriptConfig:
        if self._config is None:
            self._config = load_config(self.path)
        return self._config

    @property
    def data_dir(self) -> Path:
        return self.config.storage_dir(self.path)

    def exists(self) -> bool:
        return self.config_path.exists()

    def create(self) -> ShotListSession:
        """Create the workspace layout and store the seed project.

        Raises:
            WorkspaceError: If a workspace already exists at this path
        """
        if self.exists():
            raise WorkspaceError(f"Workspace already exists: {self.path}")

        self.path.mkdir(parents=True, exist_ok=True)
        self.prompts_dir.mkdir(exist_ok=True)
        self.export_dir.mkdir(exist_ok=True)

        write_config(create_default_config(self.path.name), self.config_path)
        self._config = None
        self.data_dir.mkdir(parents=True, exist_ok=True)

        session = self.open_session()
        session.save()
        return session

    def storage(self) -> FileStorage:
        return FileStorage(self.data_dir)

    def open_session(self) -> ShotListSession:
        """Open the stored shot list, restoring the last active scene."""
        storage = self.storage()
        session = ShotListSession.open(storage, strict_invariants=self.config.strict_invariants)
        scene_id = (storage.get(ACTIVE_SCENE_KEY) or "").strip()
        if scene_id:
            session.select_scene(scene_id)
        return session

    def remember_scene(self, session: ShotListSession) -> None:
        """Store the active scene so the next command starts from it."""
        self.storage().set(ACTIVE_SCENE_KEY, session.selection.active_scene_id or "")


def find_workspace_dir(start: Path | None = None) -> Path | None:
    """Find the workspace directory by looking for cinescript.yaml upwards."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILENAME).exists():
            return current
        if current == current.parent:
            return None
        current = current.parent
