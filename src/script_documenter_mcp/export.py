"""Export helpers: final content per grouping, zip archive, review diff.

Nothing here mutates ProjectFile records.
"""

from __future__ import annotations

import difflib
import io
import logging
import zipfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from .errors import ExportError
from .models.project import ProjectFile

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "documented_project.zip"
FOLDER_BY_GROUPING: dict[str, str] = {
    "main": "main_project",
    "frontend": "frontend_project",
}


def final_contents(files: Sequence[ProjectFile]) -> dict[str, str]:
    """Map file name → content to export (documented when included, else original)."""
    return {f.name: f.final_content for f in files}


def build_archive(groupings: Mapping[str, Sequence[ProjectFile]]) -> bytes:
    """Zip every grouping into its own folder; empty groupings get no folder.

    Raises:
        ExportError: If the archive cannot be built.
    """
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zipf:
            for grouping, files in groupings.items():
                if not files:
                    continue
                folder = FOLDER_BY_GROUPING.get(grouping, f"{grouping}_project")
                for name, content in final_contents(files).items():
                    zipf.writestr(f"{folder}/{name}", content)
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise ExportError(f"Failed to create zip archive: {exc}") from exc
    return buffer.getvalue()


def write_archive(data: bytes, directory: str | Path, filename: str = ARCHIVE_NAME) -> Path:
    """Write archive bytes to *directory*/*filename*, creating the directory.

    Raises:
        ValueError: If *filename* is not a bare file name.
        ExportError: If the file cannot be written.
    """
    if "/" in filename or "\\" in filename or filename in {"", ".", ".."}:
        raise ValueError(f"Archive filename must be a bare file name: '{filename}'")
    target = Path(directory).expanduser() / filename
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Failed to write archive to {target}: {exc}") from exc
    logger.info("Wrote %d-byte archive to %s", len(data), target)
    return target


def unified_diff(file: ProjectFile, context_lines: int = 3) -> str:
    """Unified diff of original vs. documented content ("" when unchanged or pending)."""
    if file.documented_content is None:
        return ""
    diff = difflib.unified_diff(
        file.content.splitlines(keepends=True),
        file.documented_content.splitlines(keepends=True),
        fromfile=f"a/{file.name}",
        tofile=f"b/{file.name}",
        n=context_lines,
    )
    return "".join(diff)
