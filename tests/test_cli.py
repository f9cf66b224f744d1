import json
import logging

import pytest

import main


@pytest.fixture(autouse=True)
def memory_backend(monkeypatch: pytest.MonkeyPatch):
    for key in ("APP_ENV", "APP_CONFIG_PATH", "STORAGE_PATH", "STORAGE_KEY"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    # The app reconfigures root logging against the captured stderr.
    handlers = logging.root.handlers[:]
    yield
    logging.root.handlers[:] = handlers


def test_stats_command_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(["stats", "--range", "month"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["range"] == "Month"
    assert payload["total_count"] == 0
    assert payload["has_any_usage"] is False


def test_reset_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(["reset"]) == 0
    assert "removed" in capsys.readouterr().out


def test_unknown_range_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main.main(["stats", "--range", "year"])
