"""
cinescript.export.csv - CSV shot chart generator.

One row per shot across all scenes of a project. The header row is written
bare; every data cell is quoted with embedded quotes doubled.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

from cinescript.exceptions import ExportError
from cinescript.io import write_text
from cinescript.models import Project, Scene, Shot

HEADERS = [
    "Scene",
    "Shot #",
    "Size",
    "Angle",
    "Movement",
    "Framing",
    "Focus",
    "Description",
    "Lens",
    "Camera",
    "Aperture",
    "FPS",
    "Resolution",
    "Color Temp",
    "Timecode",
    "Takes",
    "Status",
    "AD Notes",
    "Production Notes",
]


def quote_cell(value: str) -> str:
    """Quote a cell, doubling any embedded quote characters."""
    return '"' + value.replace('"', '""') + '"'


def _text(value: object) -> str:
    if value is None:
        return ""
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def shot_row(scene: Scene, shot: Shot) -> list[str]:
    return [
        scene.label,
        str(shot.number),
        _text(shot.size),
        _text(shot.angle),
        _text(shot.movement),
        _text(shot.framing),
        _text(shot.focus),
        shot.description,
        shot.lens,
        shot.camera,
        shot.aperture,
        _text(shot.fps),
        shot.resolution,
        shot.color_temp,
        _text(shot.timecode),
        _text(shot.takes),
        _text(shot.status),
        _text(shot.ad_notes),
        shot.notes,
    ]


def to_delimited_text(project: Project) -> bytes:
    """Render a project's shot chart as UTF-8 CSV bytes."""
    lines = [",".join(HEADERS)]
    for scene in project.scenes:
        for shot in scene.shots:
            lines.append(",".join(quote_cell(cell) for cell in shot_row(scene, shot)))
    return "\n".join(lines).encode("utf-8")


def export_filename(project: Project, on: date | None = None) -> str:
    """Build a filesystem-safe file name, e.g. ``NEON_PROTOCOL_shot_chart_2026-01-31.csv``."""
    on = on or date.today()
    safe_name = re.sub(r"[^a-z0-9]", "_", project.name, flags=re.IGNORECASE)
    return f"{safe_name}_shot_chart_{on.isoformat()}.csv"


def write_csv(project: Project, output_path: Path) -> Path:
    """Write the shot chart to a file.

    Raises:
        ExportError: If the file can't be written
    """
    try:
        write_text(output_path, to_delimited_text(project).decode("utf-8"))
    except OSError as e:
        raise ExportError(f"Failed to write {output_path}: {e}") from e
    return output_path
