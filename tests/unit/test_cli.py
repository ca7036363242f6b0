"""Tests for the bookstore command line."""

import pytest
from typer.testing import CliRunner

import src.bookstore.api.http.app as app_module
import src.bookstore.runtime.init_db as init_db_module
from src.bookstore.cli import app
from src.bookstore.core.errors import SecretAuthenticationError
from src.bookstore.runtime.context import get_config

runner = CliRunner()


@pytest.fixture
def uvicorn_calls(monkeypatch):
    import uvicorn

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda application, **kwargs: calls.append(kwargs))
    return calls


class TestInitDbCommand:
    def test_success(self, monkeypatch):
        monkeypatch.setattr(init_db_module, "init_db", lambda: None)

        result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_failure_exits_non_zero(self, monkeypatch):
        def fail():
            raise SecretAuthenticationError("credential rejected")

        monkeypatch.setattr(init_db_module, "init_db", fail)

        result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 1
        assert "credential rejected" in result.output


class TestServeCommand:
    def test_uses_configured_address(self, monkeypatch, uvicorn_calls):
        migrate_flags = []
        monkeypatch.setattr(
            app_module, "create_app", lambda migrate=None: migrate_flags.append(migrate)
        )

        result = runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        assert migrate_flags == [None]
        assert uvicorn_calls[0]["port"] == get_config().app.port

    def test_options_override_config(self, monkeypatch, uvicorn_calls):
        migrate_flags = []
        monkeypatch.setattr(
            app_module, "create_app", lambda migrate=None: migrate_flags.append(migrate)
        )

        result = runner.invoke(app, ["serve", "--init-db", "--host", "127.0.0.1", "--port", "9999"])

        assert result.exit_code == 0
        assert migrate_flags == [True]
        assert uvicorn_calls[0]["host"] == "127.0.0.1"
        assert uvicorn_calls[0]["port"] == 9999
