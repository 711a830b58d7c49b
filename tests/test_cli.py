"""Tests für die CLI (clive.py) – typer-Optionen und --once."""

from pathlib import Path
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

import clive
from usage.command import UsageCommand
from usage.parser import UsageSnapshot
from usage.runner import FailureKind, ProcessRunner, RefreshResult

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch, clean_env):
    """Isoliert main() von .env-Dateien, Log-Dateien und echtem Prozessstart."""
    monkeypatch.setattr(clive, "load_environment", Mock())
    setup_logging = Mock()
    monkeypatch.setattr(clive, "setup_logging", setup_logging)
    build_command = Mock(
        return_value=UsageCommand(argv=["expect"], cwd=Path("/tmp"), env={})
    )
    monkeypatch.setattr(clive, "build_usage_command", build_command)
    return {"setup_logging": setup_logging, "build_usage_command": build_command}


def _patch_run(monkeypatch, result):
    calls = []

    def fake_run(self, command, *, cancel_event=None, on_chunk=None):
        calls.append(self)
        return result

    monkeypatch.setattr(ProcessRunner, "run", fake_run)
    return calls


class TestOnce:
    """Tests für --once."""

    def test_prints_usage(self, cli_env, monkeypatch):
        snapshot = UsageSnapshot(
            session_percent=45, weekly_percent=32, session_reset_label="3pm"
        )
        _patch_run(monkeypatch, RefreshResult.success(snapshot))

        result = runner.invoke(clive.app, ["--once"])

        assert result.exit_code == 0
        assert "45% (32% weekly)" in result.stdout
        assert "Session resets 3pm" in result.stdout

    def test_no_data_exits_with_error(self, cli_env, monkeypatch):
        _patch_run(monkeypatch, RefreshResult.no_data(FailureKind.PARSE_MISS))

        result = runner.invoke(clive.app, ["--once"])

        assert result.exit_code == 1
        assert "45%" not in result.stdout

    def test_timeout_exits_with_error(self, cli_env, monkeypatch):
        _patch_run(monkeypatch, RefreshResult.timed_out())

        result = runner.invoke(clive.app, ["--once"])

        assert result.exit_code == 1

    def test_work_dir_error_exits_with_error(self, cli_env, monkeypatch):
        cli_env["build_usage_command"].side_effect = PermissionError("read-only")
        calls = _patch_run(monkeypatch, RefreshResult.timed_out())

        result = runner.invoke(clive.app, ["--once"])

        assert result.exit_code == 1
        assert calls == []

    def test_options_are_passed(self, cli_env, monkeypatch):
        calls = _patch_run(
            monkeypatch, RefreshResult.success(UsageSnapshot(session_percent=1))
        )

        result = runner.invoke(
            clive.app, ["--once", "--claude-path", "/x/claude", "--timeout", "45"]
        )

        assert result.exit_code == 0
        cli_env["build_usage_command"].assert_called_once_with(claude_path="/x/claude")
        assert calls[0].timeout == 45

    def test_options_from_env(self, cli_env, monkeypatch):
        monkeypatch.setenv("CLIVE_CLAUDE_PATH", "/env/claude")
        monkeypatch.setenv("CLIVE_TIMEOUT", "12")
        calls = _patch_run(
            monkeypatch, RefreshResult.success(UsageSnapshot(session_percent=1))
        )

        result = runner.invoke(clive.app, ["--once"])

        assert result.exit_code == 0
        cli_env["build_usage_command"].assert_called_once_with(claude_path="/env/claude")
        assert calls[0].timeout == 12

    def test_timeout_must_be_positive(self, cli_env):
        result = runner.invoke(clive.app, ["--once", "--timeout", "0"])

        assert result.exit_code != 0


class TestLogging:
    """Tests für --debug / CLIVE_DEBUG."""

    def test_debug_flag(self, cli_env, monkeypatch):
        _patch_run(monkeypatch, RefreshResult.timed_out())

        runner.invoke(clive.app, ["--once", "--debug"])

        cli_env["setup_logging"].assert_called_once_with(debug=True)

    def test_debug_env(self, cli_env, monkeypatch):
        monkeypatch.setenv("CLIVE_DEBUG", "yes")
        _patch_run(monkeypatch, RefreshResult.timed_out())

        runner.invoke(clive.app, ["--once"])

        cli_env["setup_logging"].assert_called_once_with(debug=True)

    def test_default_no_debug(self, cli_env, monkeypatch):
        _patch_run(monkeypatch, RefreshResult.timed_out())

        runner.invoke(clive.app, ["--once"])

        cli_env["setup_logging"].assert_called_once_with(debug=False)


class TestMenubarMode:
    """Tests für den Start ohne --once."""

    def test_requires_macos(self, cli_env, monkeypatch):
        monkeypatch.setattr(clive.sys, "platform", "linux")

        result = runner.invoke(clive.app, [])

        assert result.exit_code == 1

    def test_starts_app_on_macos(self, cli_env, monkeypatch, prefs_file):
        monkeypatch.setattr(clive.sys, "platform", "darwin")
        run = Mock()
        monkeypatch.setattr(clive.CliveApp, "run", run)
        monkeypatch.setattr(clive.sys, "excepthook", clive.sys.excepthook)

        result = runner.invoke(clive.app, ["--claude-path", "/x/claude"])

        assert result.exit_code == 0
        run.assert_called_once()


class TestCliveApp:
    """Tests für CliveApp ohne AppKit."""

    def test_cleanup_is_idempotent(self):
        app = clive.CliveApp(clive.Settings(persist=False))
        scheduler = Mock()
        app._scheduler = scheduler
        app._menubar = Mock()

        app.cleanup()
        app.cleanup()

        scheduler.stop.assert_called_once()
        app._menubar.close.assert_called_once()

    def test_refresh_now_delegates(self):
        app = clive.CliveApp(clive.Settings(persist=False))
        app._scheduler = Mock()

        app._refresh_now()

        app._scheduler.refresh_now.assert_called_once()

    def test_usage_update_reaches_menubar(self):
        app = clive.CliveApp(clive.Settings(persist=False))
        app._menubar = Mock()
        snapshot = UsageSnapshot(session_percent=3)

        app._on_usage(snapshot)

        app._menubar.update.assert_called_once_with(snapshot)
