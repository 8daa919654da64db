"""Project data models: uploaded files, run state, and run summaries.

ProjectFile is mutated in place by the documentation pipeline; callers
outside the workspace only ever see copies (see ``ProjectWorkspace.snapshot``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Grouping = Literal["main", "frontend"]
DocLanguage = Literal["en", "ru"]

# Combined processing order: all of "main", then all of "frontend".
GROUPINGS: tuple[Grouping, ...] = ("main", "frontend")

FileState = Literal["pending", "documented", "failed"]


class ProjectFile(BaseModel):
    """One uploaded file and its documentation outcome."""

    name: str
    content: str = ""
    language: str
    documented_content: str | None = None
    error: str | None = None
    is_included: bool = True

    @property
    def state(self) -> FileState:
        if self.error is not None:
            return "failed"
        if self.documented_content is not None:
            return "documented"
        return "pending"

    @property
    def has_changes(self) -> bool:
        return self.documented_content is not None and self.documented_content != self.content

    @property
    def final_content(self) -> str:
        """Content written at export time."""
        if self.is_included and self.documented_content is not None:
            return self.documented_content
        return self.content

    def clear_result(self) -> None:
        self.documented_content = None
        self.error = None


class UploadedFile(BaseModel):
    """Raw file as supplied by the client (name + text)."""

    name: str = Field(min_length=1)
    content: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """A bare file name: it becomes an archive entry under the grouping folder."""
        if "/" in value or "\\" in value:
            raise ValueError(f"File name must not contain path separators: '{value}'")
        if value in {".", ".."} or "\0" in value:
            raise ValueError(f"Invalid file name: '{value}'")
        return value


class RunState(str, Enum):
    """Analysis run lifecycle states."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class RunSummary(BaseModel):
    """Outcome of one pipeline run."""

    state: RunState = RunState.COMPLETED
    doc_language: str = "en"
    total: int = 0
    processed: int = 0
    documented: int = 0
    failed: int = 0
    cancelled: bool = False


@dataclass(frozen=True)
class Progress:
    """Advisory progress notification, emitted before each file."""

    index: int
    total: int
    file_name: str

    @property
    def message(self) -> str:
        return f"Analyzing {self.index}/{self.total}: {self.file_name}"
