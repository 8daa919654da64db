"""Shared test fixtures for script-documenter-mcp."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests to avoid real tracking-server calls."""
    monkeypatch.setenv("GEMINI_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_env_file(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/script-documenter-mcp/.env."""
    monkeypatch.setattr(
        "script_documenter_mcp.config.ENV_FILE",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import script_documenter_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def mock_gemini_client():
    """Patch GeminiClient.get() and .generate() for unit tests."""
    with (
        patch("script_documenter_mcp.client.GeminiClient.get") as mock_get,
        patch(
            "script_documenter_mcp.client.GeminiClient.generate", new_callable=AsyncMock
        ) as mock_gen,
    ):
        client = MagicMock()
        mock_get.return_value = client
        yield {
            "get": mock_get,
            "generate": mock_gen,
            "client": client,
        }


@pytest.fixture()
def fresh_workspace(monkeypatch):
    """Swap the module-level workspace for an empty one."""
    from script_documenter_mcp.workspace import ProjectWorkspace

    ws = ProjectWorkspace()
    monkeypatch.setattr("script_documenter_mcp.workspace.workspace", ws)
    monkeypatch.setattr("script_documenter_mcp.tools.project.workspace", ws)
    return ws
