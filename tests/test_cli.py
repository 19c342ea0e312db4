"""
Tests for the command line interface.
"""

import json

import httpx
import pytest
from typer.testing import CliRunner

from gem_registry.infrastructure.api import RubyGemsClient
from gem_registry.presentation.cli import main as cli
from tests.conftest import RAILS_PAYLOAD, TEST_SERVER_URL, VERSIONS_PAYLOAD

runner = CliRunner()

ROUTES = {
    "/api/v1/gems/rails.json": RAILS_PAYLOAD,
    "/api/v1/gems/rack.json": {"name": "rack", "version": "3.0.8", "downloads": 10},
    "/api/v1/versions/rails.json": VERSIONS_PAYLOAD,
    "/api/v1/versions/rails/latest.json": {"version": "7.0.5"},
    "/api/v1/downloads.json": {"total": 1000},
    "/api/v1/gems/rails/reverse_dependencies.json": ["a", "b", "c"],
}


def route(request: httpx.Request) -> httpx.Response:
    payload = ROUTES.get(request.url.path)
    if payload is None:
        return httpx.Response(404, text="This rubygem could not be found.")
    return httpx.Response(200, json=payload)


@pytest.fixture(autouse=True)
def mock_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point every CLI command at the routed mock transport."""
    def create_client(settings):
        return RubyGemsClient(
            server_url=TEST_SERVER_URL,
            retry_policy=None,
            transport=httpx.MockTransport(route)
        )

    monkeypatch.setattr(cli, "create_client", create_client)


class TestCommands:
    """Test CLI commands."""

    def test_get(self) -> None:
        result = runner.invoke(cli.app, ["get", "rails"])
        assert result.exit_code == 0
        assert "rails" in result.output
        assert "actionpack" in result.output

    def test_latest_json(self) -> None:
        result = runner.invoke(cli.app, ["--json", "latest", "rails"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"version": "7.0.5"}

    def test_versions_limit(self) -> None:
        result = runner.invoke(cli.app, ["versions", "rails", "--limit", "1"])
        assert result.exit_code == 0
        assert "7.0.5" in result.output
        assert "7.0.4" not in result.output

    def test_rdeps(self) -> None:
        result = runner.invoke(cli.app, ["rdeps", "rails"])
        assert result.exit_code == 0
        assert "3" in result.output

    def test_downloads(self) -> None:
        result = runner.invoke(cli.app, ["downloads"])
        assert result.exit_code == 0
        assert "1,000" in result.output

    def test_downloads_requires_version(self) -> None:
        result = runner.invoke(cli.app, ["downloads", "rails"])
        assert result.exit_code == 1

    def test_not_found_exits_1(self) -> None:
        result = runner.invoke(cli.app, ["get", "no-such-gem"])
        assert result.exit_code == 1

    def test_bulk_reports_failures(self) -> None:
        result = runner.invoke(cli.app, ["--json", "bulk", "rails", "no-such-gem", "rack"])
        assert result.exit_code == 1
        rows = json.loads(result.output)
        assert [row["name"] for row in rows] == ["rails", "no-such-gem", "rack"]
        assert rows[1]["package"] is None
        assert "404" in rows[1]["error"]

    def test_bulk_table_exit_code(self) -> None:
        result = runner.invoke(cli.app, ["bulk", "rails", "no-such-gem"])
        assert result.exit_code == 1

    def test_bulk_all_found(self) -> None:
        result = runner.invoke(cli.app, ["--json", "bulk", "rails", "rack"])
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert [row["name"] for row in rows] == ["rails", "rack"]
        assert all(row["error"] is None for row in rows)

    def test_version(self) -> None:
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert "gem-registry" in result.output


class TestLogging:
    """Test how commands configure logging."""

    @pytest.fixture
    def logging_calls(self, monkeypatch: pytest.MonkeyPatch) -> list:
        calls = []
        monkeypatch.setattr(
            cli, "setup_logging", lambda level, debug=False: calls.append((level, debug))
        )
        return calls

    def test_level_from_settings(self, monkeypatch: pytest.MonkeyPatch, logging_calls: list) -> None:
        monkeypatch.setenv("GEM_REGISTRY_LOG_LEVEL", "info")
        monkeypatch.setenv("GEM_REGISTRY_DEBUG", "true")

        result = runner.invoke(cli.app, ["latest", "rails"])

        assert result.exit_code == 0
        assert logging_calls == [("INFO", True)]

    def test_verbose_overrides_settings(
        self, monkeypatch: pytest.MonkeyPatch, logging_calls: list
    ) -> None:
        monkeypatch.setenv("GEM_REGISTRY_LOG_LEVEL", "error")

        result = runner.invoke(cli.app, ["--verbose", "latest", "rails"])

        assert result.exit_code == 0
        assert logging_calls == [("DEBUG", True)]
