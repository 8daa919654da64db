"""Documentation service: one Gemini call per source file."""

from __future__ import annotations

import logging
import re

from .classifier import is_documentable
from .client import GeminiClient
from .config import get_config
from .errors import ConfigurationError, DocumentationError, describe_service_error
from .prompts.documentation import build_system_instruction

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"^```[a-zA-Z]*\n?([\s\S]*)```$")


def strip_code_fence(text: str) -> str:
    """Trim *text* and unwrap it if the whole response is one fenced block."""
    stripped = text.strip()
    match = _FENCED_BLOCK.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


async def document(
    content: str,
    language: str,
    project_context: str,
    doc_language: str,
) -> str:
    """Return *content* with documentation comments inserted by Gemini.

    Unclassified files and blank content come back unchanged without any
    API call.

    Args:
        content: Raw script text.
        language: Label from :func:`~script_documenter_mcp.classifier.classify`.
        project_context: File listing plus README/CHANGELOG sections.
        doc_language: ``"en"`` or ``"ru"``: language of the written comments.

    Returns:
        The documented script.

    Raises:
        DocumentationError: With a user-facing message when the call fails.
    """
    if not is_documentable(language) or not content.strip():
        logger.debug("Skipping documentation for %s content", language)
        return content

    system_instruction = build_system_instruction(language, project_context, doc_language)
    try:
        raw = await GeminiClient.generate(
            content,
            model=get_config().default_model,
            system_instruction=system_instruction,
        )
    except ConfigurationError:
        raise
    except Exception as exc:
        logger.error("Error generating documentation with Gemini API: %s", exc)
        raise DocumentationError(describe_service_error(exc)) from exc

    return strip_code_fence(raw)
