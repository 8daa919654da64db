"""Structured error handling: exceptions, categories, and tool error model."""

from __future__ import annotations

import json
from enum import Enum

from google.genai import errors as genai_errors
from pydantic import BaseModel

UNKNOWN_SERVICE_ERROR = "An unknown error occurred while communicating with the AI model."
SERVER_FAILURE_HINT = (
    "\nThis could be a temporary issue with the AI service or the request might be too large. "
    "Please try again later or with fewer files."
)
_SERVER_FAILURE_MARKERS = ("500", "Rpc failed")


class DocumentationError(Exception):
    """Documentation generation failed for a single file.

    The message is always human-readable and safe to show to the user.
    """


class ConfigurationError(RuntimeError):
    """A required setting (the API key) is missing. Fatal at startup."""


class ExportError(RuntimeError):
    """Building or writing the documented-project archive failed."""


class ProjectFileNotFound(KeyError):
    """No file with the given name exists in the grouping."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "File not found"


class AnalysisInProgress(RuntimeError):
    """A second analysis run was requested while one is still active."""


def _nested_error_message(payload: object) -> str | None:
    """Return ``payload["error"]["message"]`` when present and non-empty."""
    if not isinstance(payload, dict):
        return None
    inner = payload.get("error")
    if not isinstance(inner, dict):
        return None
    message = inner.get("message")
    return str(message) if message else None


def describe_service_error(error: BaseException) -> str:
    """Turn any Gemini call failure into a user-facing message.

    JSON messages carrying ``{"error": {"message": ...}}`` surface the
    nested text; anything else is reported verbatim. Server-side failures
    get a retry hint appended. Never returns an empty string.
    """
    raw = str(error).strip()
    nested: str | None = None

    if isinstance(error, genai_errors.APIError):
        nested = _nested_error_message(error.details)
    if nested is None and raw:
        try:
            nested = _nested_error_message(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError):
            nested = None

    if nested:
        message = f"The AI model returned an error: {nested}"
    elif raw:
        message = f"An unexpected error occurred: {raw}"
    else:
        message = UNKNOWN_SERVICE_ERROR

    server_side = isinstance(error, genai_errors.ServerError)
    if server_side or any(marker in message for marker in _SERVER_FAILURE_MARKERS):
        message += SERVER_FAILURE_HINT
    return message


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    EXPORT_FAILED = "EXPORT_FAILED"
    ANALYSIS_IN_PROGRESS = "ANALYSIS_IN_PROGRESS"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, ConfigurationError):
        return (
            ErrorCategory.CONFIGURATION_MISSING,
            "Set GEMINI_API_KEY in the environment or ~/.config/script-documenter-mcp/.env",
        )
    if isinstance(error, ExportError):
        return (
            ErrorCategory.EXPORT_FAILED,
            "Archive could not be created: check the output directory and try again",
        )
    if isinstance(error, AnalysisInProgress):
        return (
            ErrorCategory.ANALYSIS_IN_PROGRESS,
            "Wait for the current run to finish or call project_cancel",
        )
    if isinstance(error, (FileNotFoundError, ProjectFileNotFound)):
        return (
            ErrorCategory.FILE_NOT_FOUND,
            "File not found: check the grouping and file name",
        )

    s = str(error).lower()
    if "403" in s or "permission" in s:
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "API key lacks permission for the configured model",
        )
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit: wait and retry, or document fewer files per run",
        )
    if "500" in s or "503" in s or "rpc failed" in s:
        return (
            ErrorCategory.API_SERVER_ERROR,
            "Gemini reported a server-side failure: try again later or with fewer files",
        )
    if "timeout" in s or "timed out" in s or "connection" in s:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out: try again or check connectivity",
        )
    if isinstance(error, (ValueError, TypeError)) or "400" in s:
        return (
            ErrorCategory.API_INVALID_ARGUMENT,
            "Bad request: check input format",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.API_SERVER_ERROR,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.EXPORT_FAILED,
    }
    return ToolError(
        error=str(error) or type(error).__name__,
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
