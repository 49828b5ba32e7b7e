import json

import pytest

from advisor_cli import cli
from advisor_server.settings import get_settings


@pytest.fixture
def fake_env(monkeypatch, fake_command, fake_worker_modes):
    monkeypatch.setenv("FINADVISOR_WORKER_COMMAND", json.dumps(fake_command))
    get_settings.cache_clear()
    yield fake_worker_modes
    get_settings.cache_clear()


def test_cli_invokes_tool(fake_env, capsys):
    assert cli.main(["get_market_data", "--args", '{"symbols": ["A"]}']) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert out["data"]["echo"] == {"symbols": ["A"]}


def test_cli_reports_failure_exit_code(fake_env, capsys):
    fake_env(default="crash")
    assert cli.main(["get_market_data"]) == 1
    assert json.loads(capsys.readouterr().out)["error"]["kind"] == "transport"


def test_cli_rejects_bad_arguments():
    with pytest.raises(SystemExit):
        cli.main(["get_market_data", "--args", "[1, 2]"])
    with pytest.raises(SystemExit):
        cli.main([])
