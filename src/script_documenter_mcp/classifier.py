"""File-name → language label classification."""

from __future__ import annotations

CODE_LABEL = "code"

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "java": "Java",
    "go": "Go",
    "gs": "Google Apps Script",
}


def extension_of(file_name: str) -> str:
    """Return the lower-cased text after the last ``.``, or ``""`` without one."""
    _, dot, ext = file_name.rpartition(".")
    return ext.lower() if dot else ""


def classify(file_name: str) -> str:
    """Map a file name to its language label.

    Unknown or missing extensions map to :data:`CODE_LABEL`, which marks
    the file as not eligible for documentation.
    """
    return LANGUAGE_BY_EXTENSION.get(extension_of(file_name), CODE_LABEL)


def is_documentable(language: str) -> bool:
    return language != CODE_LABEL
