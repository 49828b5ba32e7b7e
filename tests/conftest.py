import json
import os
import sys
from pathlib import Path

import pytest

from advisor_server.settings import AdvisorSettings

TESTS_DIR = Path(__file__).resolve().parent
SRC_DIR = TESTS_DIR.parent / "src"
FAKE_WORKER = TESTS_DIR / "fake_worker.py"


@pytest.fixture(autouse=True)
def worker_pythonpath(monkeypatch):
    # Worker processes must import advisor_tools even without an installed package.
    existing = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", os.pathsep.join(p for p in (str(SRC_DIR), existing) if p))


@pytest.fixture
def fake_worker_modes(monkeypatch):
    def _set(default: str = "echo", **modes: str) -> None:
        monkeypatch.setenv("FAKE_WORKER_DEFAULT", default)
        monkeypatch.setenv("FAKE_WORKER_MODES", json.dumps(modes))

    _set()
    return _set


@pytest.fixture
def fake_command():
    return [sys.executable, str(FAKE_WORKER)]


@pytest.fixture
def fake_settings(fake_command):
    return AdvisorSettings(
        worker_command=fake_command,
        tool_timeout_s=10.0,
        kill_grace_s=0.5,
        mock_llm=True,
        trace_enabled=False,
    )


@pytest.fixture
def real_settings():
    return AdvisorSettings(
        worker_command=[sys.executable, "-m", "advisor_tools.server"],
        tool_timeout_s=30.0,
        kill_grace_s=1.0,
        mock_llm=True,
        trace_enabled=False,
    )


@pytest.fixture
def ledger_file(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text(
        json.dumps(
            {
                "transactions": [
                    {"tenantId": "t1", "type": "income", "amount": 5000, "category": "Salary", "date": "2099-01-05T09:00:00"},
                    {"tenantId": "t1", "type": "expense", "amount": 1200, "category": "Rent", "date": "2099-01-06T09:00:00"},
                    {"tenantId": "t1", "type": "expense", "amount": 300, "category": "Food", "date": "2099-01-07T09:00:00"},
                    {"tenantId": "t1", "type": "expense", "amount": 200, "category": "Food", "date": "2000-01-01T09:00:00"},
                    {"tenantId": "t2", "type": "expense", "amount": 999, "category": "Travel", "date": "2099-01-07T09:00:00"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path
