"""Project tools: upload, analyze, cancel, review, export on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import get_config
from ..errors import make_tool_error
from ..export import ARCHIVE_NAME, build_archive, final_contents, unified_diff, write_archive
from ..models.project import GROUPINGS, ProjectFile, UploadedFile
from ..tracing import trace
from ..types import DocLanguageParam, FileNameParam, GroupingParam, coerce_json_param
from ..workspace import workspace

logger = logging.getLogger(__name__)
project_server = FastMCP("project")


def _file_entry(f: ProjectFile) -> dict:
    """Compact per-file listing (no content bodies)."""
    return {
        "name": f.name,
        "language": f.language,
        "state": f.state,
        "has_changes": f.has_changes,
        "is_included": f.is_included,
        "error": f.error,
    }


def _status_payload() -> dict:
    snapshot = workspace.snapshot()
    return {
        "state": workspace.state.value,
        "progress": workspace.progress_message,
        "groupings": {g: [_file_entry(f) for f in snapshot[g]] for g in GROUPINGS},
        "last_run": workspace.last_summary.model_dump(mode="json") if workspace.last_summary else None,
    }


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=False))
@trace(name="project_upload", span_type="TOOL")
async def project_upload(
    grouping: GroupingParam,
    files: Annotated[list[UploadedFile] | None, Field(
        description="Inline files as [{name, content}]",
    )] = None,
    paths: Annotated[list[str] | None, Field(description="Local file paths to read")] = None,
) -> dict:
    """Replace a grouping's files with a new upload.

    Provide exactly one of files (inline name/content pairs) or paths
    (local files read as UTF-8). Each file is classified by extension;
    unrecognised extensions are kept but never sent for documentation.

    Args:
        grouping: "main" or "frontend".
        files: Inline files.
        paths: Local file paths.

    Returns:
        Dict with grouping and the uploaded file listing.
    """
    files = coerce_json_param(files, list)
    paths = coerce_json_param(paths, list)
    try:
        if (files is None) == (paths is None):
            raise ValueError("Provide exactly one of: files or paths")
        if paths is not None:
            uploaded = await workspace.upload_paths(grouping, paths)
        else:
            items = [f if isinstance(f, UploadedFile) else UploadedFile.model_validate(f) for f in files]
            uploaded = workspace.upload_files(grouping, items)
        return {"grouping": grouping, "files": [_file_entry(f) for f in uploaded]}
    except Exception as exc:
        return make_tool_error(exc)


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, openWorldHint=True))
@trace(name="project_analyze", span_type="TOOL")
async def project_analyze(doc_language: DocLanguageParam = None) -> dict:
    """Document every uploaded code file with Gemini, one file at a time.

    Files are processed in order (all "main", then all "frontend"). A
    failure on one file is recorded on that file and the run continues.
    Call project_cancel to stop at the next file boundary.

    Args:
        doc_language: Language of the generated comments.

    Returns:
        Dict with the run summary and per-file states.
    """
    try:
        language = doc_language or get_config().default_doc_language
        summary = await workspace.run_analysis(language)
        return {"summary": summary.model_dump(mode="json"), **_status_payload()}
    except Exception as exc:
        return make_tool_error(exc)


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, idempotentHint=True, openWorldHint=False))
@trace(name="project_cancel", span_type="TOOL")
async def project_cancel() -> dict:
    """Stop the active analysis run after the file currently in flight.

    Returns:
        Dict with whether a run was active and the current progress message.
    """
    was_running = workspace.cancel_analysis()
    return {"cancel_requested": True, "was_running": was_running, "progress": workspace.progress_message}


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
async def project_status() -> dict:
    """Report run state, progress, and per-file results for both groupings."""
    return _status_payload()


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, idempotentHint=False, openWorldHint=False))
@trace(name="project_toggle", span_type="TOOL")
async def project_toggle(grouping: GroupingParam, file_name: FileNameParam) -> dict:
    """Include or exclude a file's documented version from the export.

    Args:
        grouping: "main" or "frontend".
        file_name: File to toggle.

    Returns:
        Dict with the file's updated listing entry.
    """
    try:
        return _file_entry(workspace.toggle_inclusion(grouping, file_name))
    except Exception as exc:
        return make_tool_error(exc)


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
async def project_diff(
    grouping: GroupingParam,
    file_name: FileNameParam,
    include_content: Annotated[bool, Field(description="Also return full original and documented text")] = False,
) -> dict:
    """Show what documentation changed in one file as a unified diff.

    Args:
        grouping: "main" or "frontend".
        file_name: File to review.
        include_content: Return both full texts alongside the diff.

    Returns:
        Dict with the diff, state, and error (if the file failed).
    """
    try:
        f = workspace.get_file(grouping, file_name)
        result = {**_file_entry(f), "diff": unified_diff(f)}
        if include_content:
            result["original"] = f.content
            result["documented"] = f.documented_content
        return result
    except Exception as exc:
        return make_tool_error(exc)


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=False))
@trace(name="project_export", span_type="TOOL")
async def project_export(
    output_dir: Annotated[str | None, Field(
        description="Directory for the archive (defaults to DOCUMENTER_EXPORT_DIR)",
    )] = None,
    filename: Annotated[str, Field(min_length=1, description="Archive file name")] = ARCHIVE_NAME,
) -> dict:
    """Write the documented project as a zip archive.

    Included files use their documented content; excluded, failed, or
    unprocessed files keep their original content. Files are placed under
    main_project/ and frontend_project/.

    Returns:
        Dict with archive path, size, and the exported entries per grouping.
    """
    try:
        snapshot = workspace.snapshot()
        if not any(snapshot.values()):
            raise ValueError("No files uploaded: nothing to export")
        data = build_archive(snapshot)
        path = write_archive(data, output_dir or get_config().export_dir, filename)
        return {
            "path": str(path),
            "size_bytes": len(data),
            "entries": {g: sorted(final_contents(snapshot[g])) for g in GROUPINGS if snapshot[g]},
        }
    except Exception as exc:
        logger.error("Export failed: %s", exc)
        return make_tool_error(exc)


@project_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False))
@trace(name="project_reset", span_type="TOOL")
async def project_reset() -> dict:
    """Discard both groupings and all results."""
    try:
        workspace.reset()
        return _status_payload()
    except Exception as exc:
        return make_tool_error(exc)
