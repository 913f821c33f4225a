import json
import sys
from pathlib import Path

import pytest

import main
from core import engine as engine_module
from core.errors import TransportError


INSTANCE = "https://photos.example.com"


def _write_config(path: Path, state_path: Path, base_url: str = INSTANCE) -> None:
    cfg = {
        "photoprism": {"base_url": base_url, "token_env": "PHOTOPRISM_TOKEN"},
        "storage": {"state_path": str(state_path)},
        "logging": {"level": "INFO"},
    }
    path.write_text(json.dumps(cfg), encoding="utf-8")


def _mock_api(monkeypatch, failing: set[str]) -> list:
    calls: list = []

    def fake_add(session, base_url, uid, label_name, token, priority=0, timeout_seconds=0):
        calls.append(("add", uid, label_name, token))
        if uid in failing:
            raise TransportError("API Error: 500 - boom", status_code=500)

    def fake_remove(session, base_url, uid, label_id, token, timeout_seconds=0):
        calls.append(("remove", uid, label_id, token))

    def fake_details(session, base_url, uid, token, timeout_seconds=0):
        return {"Labels": [{"Label": {"ID": 5, "Name": "Cat", "Slug": "cat"}}]}

    monkeypatch.setattr(engine_module, "add_photo_label", fake_add)
    monkeypatch.setattr(engine_module, "remove_photo_label", fake_remove)
    monkeypatch.setattr(engine_module, "photo_details", fake_details)
    return calls


def _run(monkeypatch, capsys, *argv: str) -> tuple[int, str]:
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    exit_code = main.main()
    return exit_code, capsys.readouterr().out


def test_cli_add_reports_partial_failure_and_retry(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    failing = {"x3"}
    calls = _mock_api(monkeypatch, failing)
    monkeypatch.setenv("PHOTOPRISM_TOKEN", "tok")

    exit_code, out = _run(
        monkeypatch, capsys, "add", "--config", str(cfg_path), "--label", "cat", "--uid", "x1,x2", "--uid", "x3"
    )

    assert exit_code == 0
    assert "Operation complete. Success: 2, Failed: 1." in out
    assert "retry 0" in out
    assert sorted(uid for _action, uid, _label, _token in calls) == ["x1", "x2", "x3"]

    exit_code, out = _run(monkeypatch, capsys, "failures", "--config", str(cfg_path))
    assert exit_code == 0
    assert '[0] Add "cat"  1 failed' in out

    failing.clear()
    exit_code, out = _run(monkeypatch, capsys, "retry", "0", "--config", str(cfg_path))
    assert exit_code == 0
    assert "Operation complete. Success: 1." in out

    exit_code, out = _run(monkeypatch, capsys, "failures", "--config", str(cfg_path))
    assert "No failed operations." in out

    exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(cfg_path))
    assert "(retry)" in out
    assert out.count('Add "cat"') == 2


def test_cli_remove_reads_uids_file(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    calls = _mock_api(monkeypatch, set())
    uids_file = tmp_path / "uids.json"
    uids_file.write_text(json.dumps(["p1", "p2"]), encoding="utf-8")

    exit_code, out = _run(
        monkeypatch,
        capsys,
        "remove",
        "--config",
        str(cfg_path),
        "--label",
        "cat",
        "--uids-file",
        str(uids_file),
        "--token",
        "secret",
    )

    assert exit_code == 0
    assert "Operation complete. Success: 2." in out
    assert sorted(calls) == [("remove", "p1", 5, "secret"), ("remove", "p2", 5, "secret")]


def test_cli_missing_token_fails_whole_batch(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    calls = _mock_api(monkeypatch, set())
    monkeypatch.delenv("PHOTOPRISM_TOKEN", raising=False)

    exit_code, out = _run(monkeypatch, capsys, "add", "--config", str(cfg_path), "--label", "cat", "--uid", "x1")

    assert exit_code == 1
    assert "Authentication token not found" in out
    assert calls == []


def test_cli_requires_instance(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json", base_url="")

    exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(cfg_path))

    assert exit_code == 2
    assert "Could not determine current instance" in out


def test_cli_instance_flag_overrides_config(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    _mock_api(monkeypatch, set())

    _run(monkeypatch, capsys, "add", "--config", str(cfg_path), "--label", "Beach", "--uid", "x1", "--token", "t")
    exit_code, out = _run(monkeypatch, capsys, "labels", "--config", str(cfg_path))
    assert "Recent labels: beach" in out

    exit_code, out = _run(
        monkeypatch, capsys, "labels", "--config", str(cfg_path), "--instance", "https://other.example.com/library"
    )
    assert exit_code == 0
    assert "Recent labels: (none)" in out


def test_cli_clear_history(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    _mock_api(monkeypatch, set())
    _run(monkeypatch, capsys, "add", "--config", str(cfg_path), "--label", "cat", "--uid", "x1", "--token", "t")

    exit_code, out = _run(monkeypatch, capsys, "clear", "--config", str(cfg_path), "--what", "history")
    assert exit_code == 0
    assert "Execution history cleared." in out

    _exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(cfg_path))
    assert "No execution history." in out
    _exit_code, out = _run(monkeypatch, capsys, "labels", "--config", str(cfg_path))
    assert "Recent labels: cat" in out


def test_cli_retry_unknown_index(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")

    exit_code, out = _run(monkeypatch, capsys, "retry", "3", "--config", str(cfg_path), "--token", "t")

    assert exit_code == 2
    assert "No failed operation at index 3" in out


def test_cli_config_missing(capsys, tmp_path: Path, monkeypatch) -> None:
    missing_cfg = tmp_path / "missing.json"

    exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(missing_cfg))

    assert exit_code == 2
    assert "Config path not found" in out


def test_cli_rejects_unknown_command(monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["main.py", "tag"])
    with pytest.raises(SystemExit) as excinfo:
        main.main()
    assert excinfo.value.code == 2


def test_cli_unexpected_error_is_reported_and_recorded(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path, tmp_path / "state.json")
    _mock_api(monkeypatch, set())

    def broken_details(session, base_url, uid, token, timeout_seconds=0):
        raise RuntimeError("unexpected payload")

    monkeypatch.setattr(engine_module, "photo_details", broken_details)

    exit_code, out = _run(
        monkeypatch, capsys, "remove", "--config", str(cfg_path), "--label", "cat", "--uid", "x1", "--token", "t"
    )

    assert exit_code == 1
    assert "Operation failed unexpectedly: unexpected payload" in out
    assert "Traceback" not in out

    _exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(cfg_path))
    assert "error: unexpected payload" in out


def test_cli_corrupt_state_file(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    state_path = tmp_path / "state.json"
    _write_config(cfg_path, state_path)
    state_path.write_text("{truncated", encoding="utf-8")

    exit_code, out = _run(monkeypatch, capsys, "history", "--config", str(cfg_path))

    assert exit_code == 1
    assert "is not valid JSON" in out
    assert "storage.state_path" in out
