"""Tests for environment diagnostics."""

from devbox_bootstrap.core.diagnostics import collect_diagnostics, render_text
from devbox_bootstrap.exceptions import VersionParseError

from .helpers import ScriptedProbe, absent, present


def probes():
    return {
        "git": ScriptedProbe([present("2.43.0", r"C:\Program Files\Git\cmd\git.exe")]),
        "terraform": ScriptedProbe([absent()]),
        "databricks": ScriptedProbe([VersionParseError("Databricks CLI (dev)")]),
    }


class TestCollectDiagnostics:

    def test_tools_reported(self, state):
        report = collect_diagnostics(state, probes(), environ={})
        tools = {tool.name: tool for tool in report.tools}

        assert tools["git"].present and tools["git"].version == "2.43.0"
        assert not tools["terraform"].present
        assert tools["databricks"].error is not None

    def test_ci_and_path(self, state):
        report = collect_diagnostics(state, {}, environ={"TF_BUILD": "True"})
        assert report.ci_system == "azure-pipelines"
        assert report.path_entries == list(state.process_path)

    def test_secret_values_never_reported(self, state):
        report = collect_diagnostics(state, {}, environ={"DATABRICKS_TOKEN": "dapi-very-secret"})
        assert report.variables["DATABRICKS_TOKEN"] is True
        assert report.variables["DATABRICKS_HOST"] is False
        assert "dapi-very-secret" not in report.model_dump_json()


class TestRenderText:

    def test_lines(self, state):
        lines = render_text(collect_diagnostics(state, probes(), environ={}))
        text = "\n".join(lines)
        assert "git" in text and "2.43.0" in text
        assert "not found" in text
        assert "ERROR" in text
        assert "CI system:  none" in text
