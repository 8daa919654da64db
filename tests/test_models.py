"""Tests for project data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from script_documenter_mcp.models.project import Progress, ProjectFile, UploadedFile


def _pf(**kwargs) -> ProjectFile:
    return ProjectFile(name="a.js", content="foo();", language="JavaScript", **kwargs)


class TestProjectFile:
    def test_defaults(self):
        f = _pf()
        assert f.state == "pending"
        assert f.is_included is True
        assert f.has_changes is False
        assert f.final_content == "foo();"

    def test_documented(self):
        f = _pf(documented_content="/** x */ foo();")
        assert f.state == "documented"
        assert f.has_changes is True
        assert f.final_content == "/** x */ foo();"

    def test_passthrough_has_no_changes(self):
        assert _pf(documented_content="foo();").has_changes is False

    def test_failed(self):
        f = _pf(error="The AI model returned an error: quota exceeded")
        assert f.state == "failed"
        assert f.final_content == "foo();"

    def test_excluded_exports_original(self):
        assert _pf(documented_content="doc", is_included=False).final_content == "foo();"

    def test_clear_result(self):
        f = _pf(documented_content="doc")
        f.clear_result()
        assert f.state == "pending"


class TestUploadedFile:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            UploadedFile(name="", content="x")


class TestProgress:
    def test_message(self):
        assert Progress(index=2, total=5, file_name="b.js").message == "Analyzing 2/5: b.js"

    @pytest.mark.parametrize("name", [
        "../../evil.sh",
        "/etc/cron.d/x",
        "src/app.js",
        "..\\win.js",
        "..",
        ".",
    ])
    def test_path_like_names_rejected(self, name):
        with pytest.raises(ValidationError):
            UploadedFile(name=name, content="x")

    @pytest.mark.parametrize("name", ["Code.gs", ".eslintrc.js", "v1..2.py", "README"])
    def test_bare_names_accepted(self, name):
        assert UploadedFile(name=name).name == name
