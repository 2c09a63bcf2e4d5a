from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from gvgwatch.cli.main import app
from gvgwatch.config import AppConfig
from gvgwatch.exceptions import IndexFetchError, StepFailedError, StorageError
from gvgwatch.logging_config import reset_logging

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Reset logging config between tests to avoid idempotent guard interference."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def patch_config(monkeypatch, test_config):
    monkeypatch.setattr("gvgwatch.cli.main._get_config", lambda: test_config)


@pytest.fixture(autouse=True)
def patch_client(monkeypatch):
    """BattleApiClient mock — context manager 지원."""
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    captured: list[AppConfig] = []

    def factory(config):
        captured.append(config)
        return mock_client

    monkeypatch.setattr("gvgwatch.cli.main._get_api_client", factory)
    mock_client.captured_configs = captured
    return mock_client


@pytest.fixture
def orchestrator(monkeypatch):
    instance = MagicMock()
    cls = MagicMock(return_value=instance)
    monkeypatch.setattr("gvgwatch.cli.main.SnapshotOrchestrator", cls)
    instance.cls = cls
    return instance


class TestRun:
    def test_runs_both_modes(self, orchestrator, test_config):
        orchestrator.run_all.return_value = {
            "local": test_config.local_snapshot_path,
            "global": test_config.global_snapshot_path,
        }
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 0, result.output
        args, kwargs = orchestrator.run_all.call_args
        assert args[0] == ("local", "global")
        assert "local.json" in result.output
        assert "global.json" in result.output
        assert "Done." in result.output

    def test_index_failure_exits_1(self, orchestrator):
        orchestrator.run_all.side_effect = StepFailedError("local", IndexFetchError("worlds down"))
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "worlds down" in result.output

    def test_storage_failure_exits_1(self, orchestrator):
        orchestrator.run_all.side_effect = StorageError("disk full")
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 1
        assert "disk full" in result.output

    def test_client_closed(self, orchestrator, patch_client):
        orchestrator.run_all.return_value = {}
        runner.invoke(app, ["run"])
        patch_client.__exit__.assert_called_once()


class TestSingleMode:
    def test_local(self, orchestrator):
        orchestrator.run_all.return_value = {"local": Path("data/local.json")}
        result = runner.invoke(app, ["local"])
        assert result.exit_code == 0, result.output
        assert orchestrator.run_all.call_args.args[0] == ("local",)

    def test_grand(self, orchestrator):
        orchestrator.run_all.return_value = {"global": Path("data/global.json")}
        result = runner.invoke(app, ["grand"])
        assert result.exit_code == 0, result.output
        assert orchestrator.run_all.call_args.args[0] == ("global",)


class TestOverrides:
    def test_server_workers_data_dir(self, orchestrator, patch_client, tmp_path):
        orchestrator.run_all.return_value = {}
        result = runner.invoke(
            app, ["run", "--server", "4", "--workers", "5", "--data-dir", str(tmp_path / "out")]
        )
        assert result.exit_code == 0, result.output
        config = patch_client.captured_configs[0]
        assert config.server_id == "4"
        assert config.concurrency == 5
        assert config.data_dir == tmp_path / "out"
        assert orchestrator.cls.call_args.args[0] is config

    def test_no_overrides_keeps_config(self, orchestrator, patch_client, test_config):
        orchestrator.run_all.return_value = {}
        runner.invoke(app, ["run"])
        assert patch_client.captured_configs[0] is test_config

    def test_invalid_server_exits_1(self, orchestrator):
        result = runner.invoke(app, ["run", "--server", "JP"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        orchestrator.run_all.assert_not_called()

    def test_invalid_workers_exits_1(self, orchestrator):
        result = runner.invoke(app, ["run", "--workers", "0"])
        assert result.exit_code == 1


class TestLoggingOptions:
    def test_log_dir_creates_log_file(self, orchestrator, tmp_path):
        orchestrator.run_all.return_value = {}
        result = runner.invoke(app, ["--log-dir", str(tmp_path / "logs"), "run"])
        assert result.exit_code == 0, result.output
        assert list((tmp_path / "logs").glob("*.log"))

    def test_log_file_goes_under_data_dir(self, orchestrator, tmp_path):
        orchestrator.run_all.return_value = {}
        out = tmp_path / "out"
        result = runner.invoke(app, ["--log-file", "local", "--data-dir", str(out)])
        assert result.exit_code == 0, result.output
        assert [p.name[15:] for p in (out / "logs").glob("*.log")] == ["_local.log"]

    def test_log_to_file_from_config(self, orchestrator, monkeypatch, test_config):
        config = test_config.model_copy(update={"log_to_file": True})
        monkeypatch.setattr("gvgwatch.cli.main._get_config", lambda: config)
        orchestrator.run_all.return_value = {}
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 0, result.output
        assert list(test_config.log_dir.glob("*_local-global.log"))

    def test_no_file_log_by_default(self, orchestrator, test_config):
        orchestrator.run_all.return_value = {}
        runner.invoke(app, ["run"])
        assert not test_config.log_dir.exists()

    def test_file_handler_removed_after_failure(self, orchestrator, tmp_path):
        import logging

        orchestrator.run_all.side_effect = StepFailedError("local", IndexFetchError("down"))
        result = runner.invoke(app, ["--log-dir", str(tmp_path / "logs"), "run"])
        assert result.exit_code == 1
        handlers = logging.getLogger("gvgwatch").handlers
        assert not any(isinstance(h, logging.FileHandler) for h in handlers)

    def test_verbose_sets_debug(self, orchestrator):
        import logging

        orchestrator.run_all.return_value = {}
        runner.invoke(app, ["-v", "run"])
        assert logging.getLogger("gvgwatch").level == logging.DEBUG
