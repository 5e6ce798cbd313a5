"""Tests for the command line entry point."""

import json

import pytest
import structlog

from task_importer import __main__ as cli
from task_importer.core.http_client import HttpClient
from task_importer.core.models import DedupeStrategy
from task_importer.store.sqlite import SqliteTaskStore


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Capture log events so stdout only carries the JSON result."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    with structlog.testing.capture_logs():
        yield


@pytest.fixture()
def mock_sheet(monkeypatch, transport_factory):
    """Route sheet downloads made by the importer to a mock transport."""

    def install(body, **kwargs):
        transport = transport_factory(body, **kwargs)

        class MockedHttpClient(HttpClient):
            def __init__(self, *args, **client_kwargs):
                client_kwargs["transport"] = transport
                super().__init__(*args, **client_kwargs)

        monkeypatch.setattr("task_importer.orchestrator.HttpClient", MockedHttpClient)

    return install


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


class TestMain:
    """Tests for main()."""

    def test_version(self, capsys):
        assert run_cli(["--version"]) == cli.EXIT_OK
        assert "task-importer" in capsys.readouterr().out

    def test_missing_url(self, capsys):
        assert run_cli([]) == cli.EXIT_INVALID_INPUT
        assert "URL is required" in capsys.readouterr().err

    def test_invalid_url(self, tmp_path, capsys):
        code = run_cli(["https://example.com/sheet", "--db", str(tmp_path / "t.sqlite3")])

        assert code == cli.EXIT_INVALID_INPUT
        output = json.loads(capsys.readouterr().out)
        assert "Not a Google Sheets URL" in output["message"]

    def test_successful_import(self, tmp_path, capsys, mock_sheet, sheet_url):
        mock_sheet("Title,Completed\nBuy milk,yes\nWalk dog,no\n")
        db = tmp_path / "t.sqlite3"

        code = run_cli([sheet_url, "--db", str(db)])

        assert code == cli.EXIT_OK
        output = json.loads(capsys.readouterr().out)
        assert output["importedCount"] == 2
        assert output["message"] == "Imported 2 tasks successfully"
        assert SqliteTaskStore(db).count() == 2

    def test_fatal_import_error(self, tmp_path, capsys, mock_sheet, sheet_url):
        mock_sheet("nope", status=404)

        code = run_cli([sheet_url, "--db", str(tmp_path / "t.sqlite3")])

        assert code == cli.EXIT_IMPORT_FAILED
        output = json.loads(capsys.readouterr().out)
        assert output["message"] == "Failed to import tasks"
        assert "404" in output["error"]

    def test_invalid_config(self, tmp_path, capsys, sheet_url):
        config = tmp_path / "bad.yml"
        config.write_text("dedupe: sometimes\n", encoding="utf-8")

        assert run_cli([sheet_url, "--config", str(config)]) == cli.EXIT_IMPORT_FAILED
        assert "invalid configuration" in capsys.readouterr().err


class TestBuildSettings:
    """Tests for command line overrides."""

    def test_overrides(self):
        args = cli.parse_args(
            ["https://docs.google.com/spreadsheets/d/abc", "--db", "x.sqlite3",
             "--dedupe", "disabled", "--timeout", "5", "--log-level", "DEBUG"]
        )

        settings = cli.build_settings(args)

        assert settings.db_path == "x.sqlite3"
        assert settings.dedupe is DedupeStrategy.DISABLED
        assert settings.fetch_timeout == 5.0
        assert settings.log_level == "DEBUG"
