"""Tests for CLI commands."""

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from penpard.cli import app, get_project_dir, require_project
from penpard.cli_commands.shared import console

runner = CliRunner()


@pytest.fixture
def in_project(project_dir: Path, monkeypatch) -> Path:
    """Run commands from inside the test project with a wide console."""
    monkeypatch.chdir(project_dir)
    monkeypatch.setattr(console, "width", 200)
    return project_dir


class TestProjectDetection:
    def test_get_project_dir_finds_project(self, project_dir: Path, monkeypatch):
        nested = project_dir / "notes" / "day1"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        result = get_project_dir()

        assert result is not None
        assert result.name == "test_project"

    def test_get_project_dir_returns_none_outside_project(self, temp_dir: Path, monkeypatch):
        monkeypatch.chdir(temp_dir)

        assert get_project_dir() is None

    def test_require_project_exits_outside_project(self, temp_dir: Path, monkeypatch):
        monkeypatch.chdir(temp_dir)

        with pytest.raises(typer.Exit):
            require_project()

    def test_global_config_dir_is_not_a_project(self, monkeypatch):
        home = Path.home()
        (home / ".penpard").mkdir()
        work = home / "work"
        work.mkdir()
        monkeypatch.chdir(work)

        assert get_project_dir() is None


class TestInitAndVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "PenPard" in result.output

    def test_init_creates_storage(self, temp_dir: Path, monkeypatch):
        project = temp_dir / "engagement"
        project.mkdir()
        monkeypatch.chdir(project)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert (project / ".penpard" / "penpard.db").exists()
        assert (project / ".penpard" / ".env").exists()
        assert (project / ".penpard" / "reports").is_dir()

        again = runner.invoke(app, ["init"])
        assert again.exit_code == 0
        assert "already initialized" in again.output

    def test_commands_outside_project_fail(self, temp_dir: Path, monkeypatch):
        monkeypatch.chdir(temp_dir)

        result = runner.invoke(app, ["scans"])

        assert result.exit_code == 1
        assert "Not in a penpard project" in result.output


class TestScanCommands:
    def test_scans_lists_scans(self, in_project, completed_scan):
        result = runner.invoke(app, ["scans"])

        assert result.exit_code == 0
        assert completed_scan.id in result.output
        assert "completed" in result.output

    def test_scans_empty(self, in_project, initialized_db):
        result = runner.invoke(app, ["scans"])

        assert result.exit_code == 0
        assert "No scans recorded yet" in result.output

    def test_missing_database(self, in_project):
        result = runner.invoke(app, ["scans"])

        assert result.exit_code == 1
        assert "Project storage not found" in result.output

    def test_stop(self, in_project, store, sample_scan):
        result = runner.invoke(app, ["stop", sample_scan.id])

        assert result.exit_code == 0
        assert store.get_scan(sample_scan.id).status == "stopped"

    def test_stop_as_other_user_is_forbidden(self, in_project, sample_scan):
        result = runner.invoke(app, ["stop", sample_scan.id, "--user-id", "7", "--role", "user"])

        assert result.exit_code == 1
        assert "forbidden" in result.output


class TestReportCommands:
    def test_report_then_cached(self, in_project, completed_scan):
        first = runner.invoke(app, ["report", completed_scan.id])
        second = runner.invoke(app, ["report", completed_scan.id])

        assert first.exit_code == 0
        assert "Report generated" in first.output
        assert second.exit_code == 0
        assert "Cached report" in second.output

    def test_report_not_ready(self, in_project, sample_scan):
        result = runner.invoke(app, ["report", sample_scan.id])

        assert result.exit_code == 1
        assert "not_ready" in result.output

    def test_download_markdown(self, in_project, completed_scan, temp_dir):
        out_dir = temp_dir / "out"
        out_dir.mkdir()

        result = runner.invoke(
            app, ["download", completed_scan.id, "--format", "md", "--output", str(out_dir)]
        )

        assert result.exit_code == 0
        report = out_dir / f"PenPard-Report-{completed_scan.id}.md"
        assert "SQL Injection in login" in report.read_text()

    def test_download_unknown_format(self, in_project, completed_scan):
        result = runner.invoke(app, ["download", completed_scan.id, "--format", "xlsx"])

        assert result.exit_code == 1
        assert "unsupported_format" in result.output

    def test_download_unknown_scan(self, in_project, initialized_db):
        result = runner.invoke(app, ["download", "missing"])

        assert result.exit_code == 1
        assert "not_found" in result.output

    def test_capabilities_without_provider(self, in_project, initialized_db):
        result = runner.invoke(app, ["capabilities"])

        assert result.exit_code == 0
        assert "none" in result.output

    def test_capabilities_with_env_provider(self, in_project, initialized_db, mock_env_vars):
        result = runner.invoke(app, ["capabilities"])

        assert result.exit_code == 0
        assert "openai" in result.output
        assert "gpt-4o" in result.output


class TestTrackCommand:
    def test_track_completed_scan(self, in_project, completed_scan):
        result = runner.invoke(app, ["track", completed_scan.id])

        assert result.exit_code == 0
        assert f"Scan {completed_scan.id} completed" in result.output

    def test_track_times_out(self, in_project, sample_scan):
        result = runner.invoke(
            app, ["track", sample_scan.id, "--interval", "0.01", "--max-attempts", "2"]
        )

        assert result.exit_code == 1
        assert "poll_timeout" in result.output

    def test_track_failed_scan(self, in_project, store, sample_scan):
        from penpard.modules.lifecycle import LifecycleManager

        LifecycleManager(store).fail(sample_scan.id, "decompiler crashed")

        result = runner.invoke(app, ["track", sample_scan.id])

        assert result.exit_code == 1
        assert "decompiler crashed" in result.output
