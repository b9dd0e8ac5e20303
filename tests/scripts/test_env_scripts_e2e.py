"""Script end-to-end tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
import subprocess
import sys

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[2]
FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"


def _run_script(script_name: str, args: list[str]) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = str(PROJECT_ROOT / "src")
    cmd = [sys.executable, str(PROJECT_ROOT / "scripts" / script_name), *args]
    return subprocess.run(cmd, check=False, env=env, capture_output=True, text=True)


def test_validate_builtin_self_loop() -> None:
    result = _run_script("env_validate.py", ["--builtin", "self_loop", "--no-progress"])
    assert result.returncode == 0, result.stderr
    assert "Hard failures: 0" in result.stdout


def test_validate_writes_json_report(tmp_path: Path) -> None:
    output = tmp_path / "reports" / "chain.json"
    result = _run_script(
        "env_validate.py",
        [
            "--env-path",
            str(FIXTURES_DIR / "two_state_chain.yaml"),
            "--initial-state",
            "left",
            "--strict",
            "--no-progress",
            "--output",
            str(output),
        ],
    )
    assert result.returncode == 0, result.stderr
    report = json.loads(output.read_text())
    assert report["passed"] is True
    assert report["n_states"] == 3


def test_validate_fails_on_mass_leak() -> None:
    result = _run_script(
        "env_validate.py",
        ["--env-path", str(FIXTURES_DIR / "leaky_chain.yaml"), "--no-progress"],
    )
    assert result.returncode == 1
    assert "[FAIL] normalization" in result.stdout


def test_inspect_prints_derived_quantities(tmp_path: Path) -> None:
    csv_path = tmp_path / "derived.csv"
    result = _run_script(
        "env_inspect.py",
        [
            "--env-path",
            str(FIXTURES_DIR / "two_state_chain.yaml"),
            "--state",
            "right",
            "--action",
            "go",
            "--csv",
            str(csv_path),
        ],
    )
    assert result.returncode == 0, result.stderr
    assert "Expected reward: 4.5" in result.stdout
    assert "transition prob=0.75" in result.stdout

    table = pd.read_csv(csv_path)
    assert list(table.columns) == ["state", "action", "n_successors", "expected_reward"]
    assert len(table) == 4


def test_inspect_self_loop_matches_single_state_scenario() -> None:
    result = _run_script("env_inspect.py", ["--builtin", "self_loop"])
    assert result.returncode == 0, result.stderr
    assert "Expected reward: 0.0" in result.stdout
    assert "transition prob=1.0, expected reward at=0.0" in result.stdout


def test_inspect_reports_unsupported_without_rewards() -> None:
    result = _run_script(
        "env_inspect.py",
        ["--env-path", str(FIXTURES_DIR / "two_state_chain_no_rewards.yaml")],
    )
    assert result.returncode == 0, result.stderr
    assert "Rewards: declined" in result.stdout
    assert "Joint distribution: unavailable" in result.stdout
    assert "Expected reward: Unsupported(" in result.stdout
