"""Tests for the documentation service."""

from __future__ import annotations

import pytest

from script_documenter_mcp.documentation import document, strip_code_fence
from script_documenter_mcp.errors import ConfigurationError, DocumentationError


class TestStripCodeFence:
    def test_fenced_with_language_tag(self):
        assert strip_code_fence("```js\nfoo();\n```") == "foo();"

    def test_fenced_without_language_tag(self):
        assert strip_code_fence("```\nfoo();\n```") == "foo();"

    def test_surrounding_whitespace(self):
        assert strip_code_fence("  \n```python\nx = 1\n```\n\n") == "x = 1"

    def test_unfenced_is_trimmed(self):
        assert strip_code_fence("\n  function a() {}\n") == "function a() {}"

    def test_inner_fence_left_alone(self):
        text = "// see:\n```js\nfoo();\n```\nbar();"
        assert strip_code_fence(text) == text


class TestDocumentShortCircuit:
    async def test_code_label_returns_content_without_call(self, mock_gemini_client):
        result = await document('{"a": 1}', "code", "ctx", "en")

        assert result == '{"a": 1}'
        assert mock_gemini_client["generate"].await_count == 0

    @pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
    async def test_blank_content_returns_content_without_call(self, mock_gemini_client, content):
        result = await document(content, "JavaScript", "ctx", "en")

        assert result == content
        assert mock_gemini_client["generate"].await_count == 0


class TestDocument:
    async def test_success_strips_fence(self, mock_gemini_client):
        mock_gemini_client["generate"].return_value = "```js\nfoo();\n```"

        result = await document("foo();", "JavaScript", "ctx", "en")

        assert result == "foo();"
        mock_gemini_client["generate"].assert_awaited_once()

    async def test_request_carries_content_context_and_model(self, mock_gemini_client):
        mock_gemini_client["generate"].return_value = "/** doc */\nfunction a() {}"

        await document("function a() {}", "Google Apps Script", "FILES: a.gs", "ru")

        call = mock_gemini_client["generate"].call_args
        assert call.args[0] == "function a() {}"
        assert call.kwargs["model"] == "gemini-2.5-flash"
        system = call.kwargs["system_instruction"]
        assert "Google Apps Script" in system
        assert "MUST be in Russian" in system
        assert "FILES: a.gs" in system
        assert "@entrypoint" in system

    async def test_json_error_surfaces_nested_message(self, mock_gemini_client):
        mock_gemini_client["generate"].side_effect = Exception('{"error":{"message":"quota exceeded"}}')

        with pytest.raises(DocumentationError) as excinfo:
            await document("foo();", "JavaScript", "ctx", "en")

        assert str(excinfo.value) == "The AI model returned an error: quota exceeded"

    async def test_plain_error_is_prefixed(self, mock_gemini_client):
        mock_gemini_client["generate"].side_effect = RuntimeError("socket closed")

        with pytest.raises(DocumentationError, match="An unexpected error occurred: socket closed"):
            await document("foo();", "JavaScript", "ctx", "en")

    async def test_server_error_gets_retry_hint(self, mock_gemini_client):
        mock_gemini_client["generate"].side_effect = RuntimeError("Rpc failed due to xhr error")

        with pytest.raises(DocumentationError) as excinfo:
            await document("foo();", "JavaScript", "ctx", "en")

        assert "try again later or with fewer files" in str(excinfo.value)

    async def test_missing_api_key_is_not_mapped(self, mock_gemini_client):
        mock_gemini_client["generate"].side_effect = ConfigurationError("GEMINI_API_KEY environment variable not set")

        with pytest.raises(ConfigurationError):
            await document("foo();", "JavaScript", "ctx", "en")
