"""Sequential documentation pipeline over a project's combined file list.

Files are processed strictly one at a time, in order. A failure on one
file is recorded on that file and never stops the run. Cancellation is
cooperative: the token is checked only between files, so an in-flight
Gemini call always completes first.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence

from .classifier import extension_of
from .documentation import document
from .errors import ConfigurationError, DocumentationError, describe_service_error
from .models.project import Progress, ProjectFile, RunState, RunSummary
from .tracing import file_span

logger = logging.getLogger(__name__)

Documenter = Callable[[str, str, str, str], Awaitable[str]]
ProgressSink = Callable[[Progress], object]


class CancellationToken:
    """Single shared cancel flag for one run: one writer, one reader."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def reset(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def _first_named(files: Sequence[ProjectFile], stem: str) -> ProjectFile | None:
    """First file named ``<stem>*`` or ``*.<stem>``, case-insensitive."""
    for f in files:
        if f.name.lower().startswith(stem) or extension_of(f.name) == stem:
            return f
    return None


def build_project_context(files: Sequence[ProjectFile]) -> str:
    """Describe the project for the model: file list, README, CHANGELOG.

    The README and CHANGELOG sections come from the first file whose name
    starts with ``readme`` / ``changelog`` or carries it as its extension
    (``notes.readme``), case-insensitive. Each section is omitted when no
    such file exists.
    """
    listing = "\n".join(f"- {f.name}" for f in files)
    context = f"This project contains the following files:\n{listing}"

    readme = _first_named(files, "readme")
    if readme is not None:
        context += f"\n\n--- PROJECT README ---\n{readme.content}\n--- END README ---"

    changelog = _first_named(files, "changelog")
    if changelog is not None:
        context += f"\n\n--- PROJECT CHANGELOG ---\n{changelog.content}\n--- END CHANGELOG ---"

    return context


async def _notify(on_progress: ProgressSink | None, progress: Progress) -> None:
    """Deliver a progress update; sink failures are logged, never raised."""
    if on_progress is None:
        return
    try:
        result = on_progress(progress)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.warning("Progress callback failed for %s", progress.file_name, exc_info=True)


async def run_pipeline(
    files: Sequence[ProjectFile],
    doc_language: str,
    *,
    token: CancellationToken | None = None,
    on_progress: ProgressSink | None = None,
    documenter: Documenter | None = None,
) -> RunSummary:
    """Document *files* in order, writing each outcome onto its record.

    Args:
        files: Combined file list (all "main" files, then all "frontend").
        doc_language: ``"en"`` or ``"ru"``.
        token: Cancellation token; reset at the start of the run.
        on_progress: Sync or async callable receiving a :class:`Progress`
            before each file is processed.
        documenter: Documentation coroutine, defaults to
            :func:`~script_documenter_mcp.documentation.document`.

    Returns:
        RunSummary with counts. A cancelled run is still ``COMPLETED``;
        files never reached keep both result fields as ``None``.

    Raises:
        ConfigurationError: If the API key is missing. Nothing else escapes.
    """
    token = token or CancellationToken()
    token.reset()
    documenter = documenter or document

    total = len(files)
    summary = RunSummary(state=RunState.RUNNING, doc_language=doc_language, total=total)
    project_context = build_project_context(files)
    logger.info("Documentation run started: %d file(s), language=%s", total, doc_language)

    for index, file in enumerate(files, start=1):
        if token.cancelled:
            summary.cancelled = True
            logger.info("Run cancelled before %s (%d/%d)", file.name, index, total)
            break

        await _notify(on_progress, Progress(index=index, total=total, file_name=file.name))
        summary.processed += 1
        with file_span(file, doc_language, index, total):
            try:
                file.documented_content = await documenter(
                    file.content, file.language, project_context, doc_language,
                )
                summary.documented += 1
            except ConfigurationError:
                raise
            except DocumentationError as exc:
                file.error = str(exc)
                summary.failed += 1
                logger.warning("Failed to document %s: %s", file.name, exc)
            except Exception as exc:
                file.error = describe_service_error(exc)
                summary.failed += 1
                logger.warning("Failed to document %s: %s", file.name, exc, exc_info=True)

    summary.state = RunState.COMPLETED
    logger.info(
        "Documentation run finished: %d documented, %d failed, %d skipped%s",
        summary.documented,
        summary.failed,
        total - summary.processed,
        " (cancelled)" if summary.cancelled else "",
    )
    return summary
