"""
cinescript.io - Text file helpers with atomic writes.

Used by the file storage backend and the CSV exporter.
"""

from __future__ import annotations

import tempfile
from pathlib import Path


def read_text(path: Path) -> str:
    """Read text file with UTF-8 encoding.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    with open(path, encoding="utf-8") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    """Write text file atomically.

    Writes to a temp file in the same directory first, then renames over
    the destination so an interrupted write never leaves a truncated file.

    Args:
        path: Destination path; parent directories are created
        content: Text content to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)
