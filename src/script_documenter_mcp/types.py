"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import Field

from .models.project import DocLanguage, Grouping


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    Some MCP hosts serialize list/dict params as JSON strings, which
    Pydantic v2 rejects. Returns the original value if parsing fails.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
        if isinstance(parsed, expected_type):
            return parsed
    except (json.JSONDecodeError, TypeError):
        pass
    return value

# ── Annotated aliases ────────────────────────────────────────────────────────

GroupingParam = Annotated[Grouping, Field(description='File grouping: "main" or "frontend"')]
DocLanguageParam = Annotated[DocLanguage | None, Field(
    description='Language of the written comments: "en" or "ru" (defaults to DOC_LANGUAGE)',
)]
FileNameParam = Annotated[str, Field(min_length=1, description="File name as uploaded")]
