"""Tests for project tools."""

from __future__ import annotations

import io
import zipfile

import pytest

import script_documenter_mcp.tools.project as project_mod
from tests.conftest import unwrap_tool

project_upload = unwrap_tool(project_mod.project_upload)
project_analyze = unwrap_tool(project_mod.project_analyze)
project_cancel = unwrap_tool(project_mod.project_cancel)
project_status = unwrap_tool(project_mod.project_status)
project_toggle = unwrap_tool(project_mod.project_toggle)
project_diff = unwrap_tool(project_mod.project_diff)
project_export = unwrap_tool(project_mod.project_export)
project_reset = unwrap_tool(project_mod.project_reset)


@pytest.fixture(autouse=True)
def _workspace(fresh_workspace):
    return fresh_workspace


class TestProjectUpload:
    async def test_inline_files(self):
        out = await project_upload(
            grouping="main",
            files=[{"name": "a.py", "content": "x = 1"}, {"name": "README.md", "content": "# A"}],
        )
        assert out["grouping"] == "main"
        assert [(f["name"], f["language"], f["state"]) for f in out["files"]] == [
            ("a.py", "Python", "pending"),
            ("README.md", "code", "pending"),
        ]

    async def test_json_string_files(self):
        out = await project_upload(grouping="frontend", files='[{"name": "b.ts", "content": ""}]')
        assert out["files"][0]["language"] == "TypeScript"

    async def test_paths(self, tmp_path):
        p = tmp_path / "main.go"
        p.write_text("package main")
        out = await project_upload(grouping="main", paths=[str(p)])
        assert out["files"][0]["language"] == "Go"

    async def test_requires_exactly_one_source(self):
        out = await project_upload(grouping="main")
        assert out["category"] == "API_INVALID_ARGUMENT"

    async def test_path_like_names_rejected(self):
        out = await project_upload(grouping="main", files=[
            {"name": "../../evil.sh", "content": "x"},
            {"name": "/etc/cron.d/x", "content": "y"},
        ])
        assert out["category"] == "API_INVALID_ARGUMENT"
        assert (await project_status())["groupings"]["main"] == []

    async def test_missing_path(self, tmp_path):
        out = await project_upload(grouping="main", paths=[str(tmp_path / "nope.js")])
        assert out["category"] == "FILE_NOT_FOUND"


class TestProjectAnalyze:
    async def test_analyze_reports_per_file_outcomes(self, mock_gemini_client):
        mock_gemini_client["generate"].side_effect = [
            "```js\n/** doc */\nfoo();\n```",
            Exception('{"error":{"message":"quota exceeded"}}'),
        ]
        await project_upload(grouping="main", files=[
            {"name": "a.js", "content": "foo();"},
            {"name": "README.md", "content": "# Demo"},
        ])
        await project_upload(grouping="frontend", files=[{"name": "b.ts", "content": "bar();"}])

        out = await project_analyze(doc_language="en")

        assert out["state"] == "completed"
        assert out["summary"]["documented"] == 2
        assert out["summary"]["failed"] == 1
        main, frontend = out["groupings"]["main"], out["groupings"]["frontend"]
        assert main[0]["state"] == "documented"
        assert main[0]["has_changes"] is True
        assert main[1]["has_changes"] is False
        assert frontend[0]["error"] == "The AI model returned an error: quota exceeded"

    async def test_default_doc_language_from_config(self, mock_gemini_client, monkeypatch):
        monkeypatch.setenv("DOC_LANGUAGE", "ru")
        mock_gemini_client["generate"].return_value = "ok"
        await project_upload(grouping="main", files=[{"name": "a.js", "content": "foo();"}])

        out = await project_analyze()

        assert out["summary"]["doc_language"] == "ru"
        system = mock_gemini_client["generate"].call_args.kwargs["system_instruction"]
        assert "MUST be in Russian" in system

    async def test_missing_api_key(self, mock_gemini_client, monkeypatch):
        from script_documenter_mcp.errors import ConfigurationError

        mock_gemini_client["generate"].side_effect = ConfigurationError("GEMINI_API_KEY environment variable not set")
        await project_upload(grouping="main", files=[{"name": "a.js", "content": "foo();"}])

        out = await project_analyze()

        assert out["category"] == "CONFIGURATION_MISSING"
        status = await project_status()
        assert status["state"] == "idle"


class TestProjectCancelToggleReset:
    async def test_cancel_when_idle(self):
        out = await project_cancel()
        assert out == {"cancel_requested": True, "was_running": False, "progress": ""}

    async def test_toggle(self):
        await project_upload(grouping="main", files=[{"name": "a.js", "content": ""}])
        assert (await project_toggle(grouping="main", file_name="a.js"))["is_included"] is False
        assert (await project_toggle(grouping="main", file_name="a.js"))["is_included"] is True

    async def test_toggle_unknown(self):
        out = await project_toggle(grouping="frontend", file_name="x.js")
        assert out["category"] == "FILE_NOT_FOUND"

    async def test_reset(self):
        await project_upload(grouping="main", files=[{"name": "a.js", "content": ""}])
        out = await project_reset()
        assert out["groupings"] == {"main": [], "frontend": []}
        assert out["state"] == "idle"


class TestProjectDiffAndExport:
    async def test_diff(self, mock_gemini_client):
        mock_gemini_client["generate"].return_value = "/** doc */\nfoo();"
        await project_upload(grouping="main", files=[{"name": "a.js", "content": "foo();"}])
        await project_analyze()

        out = await project_diff(grouping="main", file_name="a.js", include_content=True)

        assert "+/** doc */" in out["diff"]
        assert out["original"] == "foo();"
        assert out["documented"] == "/** doc */\nfoo();"

    async def test_export_writes_archive(self, mock_gemini_client, tmp_path):
        mock_gemini_client["generate"].return_value = "/** doc */\nfoo();"
        await project_upload(grouping="main", files=[
            {"name": "a.js", "content": "foo();"},
            {"name": "b.js", "content": "bar();"},
        ])
        await project_analyze()
        await project_toggle(grouping="main", file_name="b.js")

        out = await project_export(output_dir=str(tmp_path))

        assert out["entries"] == {"main": ["a.js", "b.js"]}
        with zipfile.ZipFile(out["path"]) as zf:
            assert zf.read("main_project/a.js").decode() == "/** doc */\nfoo();"
            assert zf.read("main_project/b.js").decode() == "bar();"

    async def test_export_uses_configured_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCUMENTER_EXPORT_DIR", str(tmp_path / "exports"))
        await project_upload(grouping="frontend", files=[{"name": "c.ts", "content": "c"}])

        out = await project_export(filename="bundle.zip")

        assert out["path"] == str(tmp_path / "exports" / "bundle.zip")
        with zipfile.ZipFile(io.BytesIO((tmp_path / "exports" / "bundle.zip").read_bytes())) as zf:
            assert zf.namelist() == ["frontend_project/c.ts"]

    async def test_export_filename_cannot_leave_output_dir(self, tmp_path):
        await project_upload(grouping="main", files=[{"name": "a.js", "content": "a"}])

        out = await project_export(output_dir=str(tmp_path / "out"), filename="../escaped.zip")

        assert out["category"] == "API_INVALID_ARGUMENT"
        assert not (tmp_path / "escaped.zip").exists()

    async def test_export_with_nothing_uploaded(self, tmp_path):
        out = await project_export(output_dir=str(tmp_path))
        assert out["category"] == "API_INVALID_ARGUMENT"
