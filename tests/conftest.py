"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from cinescript.models import Project, Scene, Shot
from cinescript.persistence import MemoryStorage
from cinescript.session import ShotListSession

# Keep Rich from wrapping CLI output at the default 80 columns under CliRunner.
os.environ.setdefault("COLUMNS", "200")


def make_shots(*ids: str) -> list[Shot]:
    return [Shot(id=shot_id, number=i) for i, shot_id in enumerate(ids, 1)]


@pytest.fixture
def shots_abc() -> list[Shot]:
    """Three shots A, B, C numbered 1, 2, 3."""
    return make_shots("A", "B", "C")


@pytest.fixture
def sample_project() -> Project:
    """Project P1 with scenes S1 (shots A, B, C) and S2 (no shots)."""
    return Project(
        id="P1",
        name="Test Feature",
        director="Dir",
        dop="Dop",
        created_at=1_700_000_000_000,
        scenes=[
            Scene(id="S1", number="1", title="Opening", shots=make_shots("A", "B", "C")),
            Scene(id="S2", number="2", title="Chase", location="Docks"),
        ],
    )


@pytest.fixture
def empty_project() -> Project:
    return Project(id="P2", name="Second Unit", created_at=1_700_000_001_000)


@pytest.fixture
def projects(sample_project: Project, empty_project: Project) -> list[Project]:
    return [sample_project, empty_project]


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(projects: list[Project], storage: MemoryStorage) -> ShotListSession:
    """Strict session over the sample projects, current project P1."""
    return ShotListSession(storage, projects, "P1", strict_invariants=True)


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail, e.g. a full disk."""

    def set(self, key: str, value: str) -> None:
        raise OSError("No space left on device")


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace directory with a config file."""
    workspace_dir = tmp_path / "test_workspace"
    workspace_dir.mkdir()
    (workspace_dir / "prompts").mkdir()
    (workspace_dir / "exports").mkdir()

    config = {"workspace_name": "test_workspace", "data_dir": "data"}
    with open(workspace_dir / "cinescript.yaml", "w") as f:
        yaml.dump(config, f)

    return workspace_dir


@pytest.fixture
def suggestion_response() -> dict:
    """A typical LLM shot suggestion, including one out-of-domain value."""
    return {
        "lens": "85mm",
        "aperture": "T1.8",
        "camera": "Sony Venice 2",
        "lighting": "Soft key from window",
        "size": "Close-Up",
        "angle": "Low Angle",
        "movement": "Whip Pan",
        "framing": "Over the Shoulder",
        "focus": "Shallow Focus",
    }
