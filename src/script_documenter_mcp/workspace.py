"""In-memory project workspace: the two file groupings plus run state."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from .classifier import classify
from .config import VALID_DOC_LANGUAGES
from .errors import AnalysisInProgress, ProjectFileNotFound
from .models.project import (
    GROUPINGS,
    Grouping,
    Progress,
    ProjectFile,
    RunState,
    RunSummary,
    UploadedFile,
)
from .pipeline import CancellationToken, ProgressSink, run_pipeline

logger = logging.getLogger(__name__)


def _check_grouping(grouping: str) -> Grouping:
    if grouping not in GROUPINGS:
        allowed = ", ".join(GROUPINGS)
        raise ValueError(f"Unknown grouping '{grouping}'. Allowed: {allowed}")
    return grouping  # type: ignore[return-value]


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


class ProjectWorkspace:
    """Holds the uploaded groupings and drives analysis runs.

    At most one run is active at a time. Records are mutated in place by
    the pipeline; everything handed back to callers is a deep copy.
    """

    def __init__(self) -> None:
        self._groupings: dict[Grouping, list[ProjectFile]] = {g: [] for g in GROUPINGS}
        self._token = CancellationToken()
        self.state = RunState.IDLE
        self.progress_message = ""
        self.last_summary: RunSummary | None = None

    def upload_files(
        self,
        grouping: str,
        files: Iterable[UploadedFile | tuple[str, str]],
    ) -> list[ProjectFile]:
        """Replace *grouping*'s files, classifying each by name.

        A name repeated within one upload keeps its first position and the
        last supplied content, so names stay unique within the grouping.
        """
        group = _check_grouping(grouping)
        self._ensure_idle()
        records: dict[str, ProjectFile] = {}
        for item in files:
            if not isinstance(item, UploadedFile):
                name, content = item
                item = UploadedFile(name=name, content=content)
            if item.name in records:
                records[item.name].content = item.content
                continue
            records[item.name] = ProjectFile(
                name=item.name,
                content=item.content,
                language=classify(item.name),
            )
        self._groupings[group] = list(records.values())
        if self.state == RunState.COMPLETED:
            self.state = RunState.IDLE
        logger.info("Uploaded %d file(s) to %s", len(records), group)
        return self.files(group)

    async def upload_paths(self, grouping: str, paths: Sequence[str | Path]) -> list[ProjectFile]:
        """Read local files (UTF-8, undecodable bytes replaced) and upload them.

        All contents are read before the grouping is replaced.

        Raises:
            FileNotFoundError: If any path is not an existing file.
        """
        resolved = [Path(p).expanduser() for p in paths]
        for path in resolved:
            if not path.is_file():
                raise FileNotFoundError(f"File not found: {path}")
        contents = await asyncio.gather(*(asyncio.to_thread(_read_text, p) for p in resolved))
        return self.upload_files(grouping, [(p.name, c) for p, c in zip(resolved, contents)])

    def files(self, grouping: str) -> list[ProjectFile]:
        """Deep copies of *grouping*'s records, in insertion order."""
        return [f.model_copy(deep=True) for f in self._groupings[_check_grouping(grouping)]]

    def combined_files(self) -> list[ProjectFile]:
        """Live records in processing order: all of "main", then "frontend"."""
        return [f for g in GROUPINGS for f in self._groupings[g]]

    def snapshot(self) -> dict[Grouping, list[ProjectFile]]:
        return {g: self.files(g) for g in GROUPINGS}

    def get_file(self, grouping: str, file_name: str) -> ProjectFile:
        """Return a copy of one record.

        Raises:
            ProjectFileNotFound: If *file_name* is not in *grouping*.
        """
        return self._find(grouping, file_name).model_copy(deep=True)

    def _find(self, grouping: str, file_name: str) -> ProjectFile:
        group = _check_grouping(grouping)
        for f in self._groupings[group]:
            if f.name == file_name:
                return f
        raise ProjectFileNotFound(f"No file named '{file_name}' in the {group} grouping")

    def _ensure_idle(self) -> None:
        if self.state == RunState.RUNNING:
            raise AnalysisInProgress("An analysis run is already in progress")

    async def run_analysis(
        self,
        doc_language: str,
        on_progress: ProgressSink | None = None,
    ) -> RunSummary:
        """Run the documentation pipeline over every uploaded file.

        Previous results are cleared first. With no files uploaded the
        workspace stays idle and an empty summary is returned.

        Raises:
            AnalysisInProgress: If a run is already active.
            ValueError: If *doc_language* is not a supported language.
            ConfigurationError: If the Gemini API key is missing.
        """
        self._ensure_idle()
        if doc_language not in VALID_DOC_LANGUAGES:
            allowed = ", ".join(sorted(VALID_DOC_LANGUAGES))
            raise ValueError(
                f"Unsupported documentation language '{doc_language}'. Allowed: {allowed}"
            )
        files = self.combined_files()
        if not files:
            self.state = RunState.IDLE
            return RunSummary(state=RunState.IDLE, doc_language=doc_language)

        for f in files:
            f.clear_result()

        async def _track(progress: Progress) -> None:
            self.progress_message = progress.message
            if on_progress is not None:
                result = on_progress(progress)
                if inspect.isawaitable(result):
                    await result

        self.state = RunState.RUNNING
        try:
            summary = await run_pipeline(
                files,
                doc_language,
                token=self._token,
                on_progress=_track,
            )
        except BaseException:
            self.state = RunState.IDLE
            raise
        finally:
            self.progress_message = ""

        self.state = RunState.COMPLETED
        self.last_summary = summary
        return summary

    def cancel_analysis(self) -> bool:
        """Request cancellation at the next file boundary.

        Returns:
            True if a run was active when the request was made.
        """
        self._token.cancel()
        return self.state == RunState.RUNNING

    def toggle_inclusion(self, grouping: str, file_name: str) -> ProjectFile:
        """Flip ``is_included`` on one record and return a copy of it."""
        record = self._find(grouping, file_name)
        record.is_included = not record.is_included
        return record.model_copy(deep=True)

    def reset(self) -> None:
        """Discard all files and results; back to ``IDLE``."""
        self._ensure_idle()
        for g in GROUPINGS:
            self._groupings[g] = []
        self._token.reset()
        self.state = RunState.IDLE
        self.progress_message = ""
        self.last_summary = None


workspace = ProjectWorkspace()
