import json
from pathlib import Path

import pytest

from cli.main import main


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


def test_cli_basic_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor-rprop", "--max-epochs", "20"])
    run_dir = Path("runs/xor-rprop")
    assert (run_dir / "metrics_train.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    payload = _last_json_line(capsys.readouterr().out)
    assert payload["epochs"] <= 20
    assert payload["metrics"].endswith("metrics_train.jsonl")


def test_cli_overrides_and_dump_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "xor-rprop",
            "--algorithm",
            "gd",
            "--seed",
            "3",
            "--max-epochs",
            "4",
            "--max-error",
            "0.0",
            "--kernel",
            "lanes",
            "--dump-config",
            str(dump),
        ]
    )
    resolved = json.loads(dump.read_text())
    assert resolved["train"]["algorithm"] == "gd"
    assert resolved["train"]["seed"] == 3
    assert resolved["model"]["kernel"] == "lanes"
    payload = _last_json_line(capsys.readouterr().out)
    assert payload["epochs"] == 4
    assert payload["converged"] is False


def test_cli_config_override_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  max_epochs: 2\n  max_error: 0.0\n  run_dir: runs/override\n")
    main(["--preset", "blobs-rprop", "--config", str(override)])
    payload = _last_json_line(capsys.readouterr().out)
    assert payload["epochs"] == 2
    assert "class_error" in payload
    assert Path("runs/override/metrics_test.jsonl").exists()


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert "xor-rprop" in names
    assert "and-gd-batch" in names
