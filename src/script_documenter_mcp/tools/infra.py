"""Infrastructure tools: runtime configuration on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import get_config, update_config
from ..errors import make_tool_error
from ..tracing import trace
from ..types import DocLanguageParam

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {"gemini_api_key"}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    return get_config().model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="infra_configure", span_type="TOOL")
async def infra_configure(
    model: Annotated[str | None, Field(description="Gemini model ID override")] = None,
    doc_language: DocLanguageParam = None,
    temperature: Annotated[float | None, Field(ge=0.0, le=2.0, description="Sampling temperature")] = None,
    export_dir: Annotated[str | None, Field(description="Default directory for exported archives")] = None,
    reset_temperature: Annotated[
        bool, Field(description="Drop the temperature override and use the model default")
    ] = False,
) -> dict:
    """Reconfigure the server at runtime: model, comment language, temperature, export dir.

    Changes apply to the next analysis run. Call with no arguments to read
    the current configuration. Passing ``None`` leaves a value unchanged;
    use ``reset_temperature`` to clear a temperature override.

    Returns:
        Dict with current_config (API key redacted).
    """
    try:
        overrides: dict[str, object] = {
            "default_model": model,
            "default_doc_language": doc_language,
            "default_temperature": temperature,
            "export_dir": export_dir,
        }
        reset = ["default_temperature"] if reset_temperature else []
        if reset or any(v is not None for v in overrides.values()):
            update_config(reset=reset, **overrides)
        return {"current_config": _redacted_config()}
    except Exception as exc:
        return make_tool_error(exc)
