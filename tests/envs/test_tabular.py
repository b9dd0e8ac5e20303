"""Tests for YAML-backed tabular environments."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from mdp_kernel.envs.tabular import (
    TabularEnvironment,
    TransitionRow,
    load_tabular_environment,
    save_tabular_environment,
)


def _row(**overrides) -> dict[str, object]:
    payload: dict[str, object] = {
        "state": "s0",
        "action": "a",
        "next_state": "s1",
        "reward": 1.0,
        "probability": 1.0,
    }
    payload.update(overrides)
    return payload


def test_chain_fixture_enumerations(chain_env) -> None:
    assert chain_env.name == "two_state_chain"
    assert chain_env.states == ("left", "right", "done")
    assert chain_env.actions_from("left") == frozenset({"go", "stay"})
    assert chain_env.actions_from("done") == frozenset()
    assert chain_env.is_terminal("done")
    assert chain_env.states_from("right", "go") == frozenset({"done", "left"})
    assert chain_env.states_from("left", "back") == frozenset()
    assert tuple(chain_env.rewards()) == (-2.0, -1.0, 0.0, 1.0, 10.0)


def test_prob_lookup(chain_env) -> None:
    assert chain_env.prob("right", "go", "done", 10.0) == 0.5
    assert chain_env.prob("right", "go", "done", 10) == 0.5
    assert chain_env.prob("right", "go", "done", 3.0) == 0.0
    assert chain_env.prob("unknown", "go", "done", 10.0) == 0.0


def test_declined_reward_enumeration(chain_env_no_rewards) -> None:
    assert chain_env_no_rewards.rewards() is None
    assert chain_env_no_rewards.supports_marginalization is False


def test_zero_probability_rows_do_not_enter_support() -> None:
    env = TabularEnvironment.from_dict(
        {
            "transitions": [
                _row(probability=1.0),
                _row(next_state="s2", probability=0.0),
            ]
        }
    )
    assert env.states_from("s0", "a") == frozenset({"s1"})
    assert "s2" not in env.states


def test_sequence_states_become_tuples() -> None:
    env = TabularEnvironment.from_dict(
        {"transitions": [_row(state=[0, 1], next_state=[1, 1])]}
    )
    assert env.actions_from((0, 1)) == frozenset({"a"})
    assert env.states_from((0, 1), "a") == frozenset({(1, 1)})


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({}, "transitions"),
        ({"transitions": ["not-a-row"]}, "must be a mapping"),
        ({"transitions": [{"state": "s0"}]}, "missing fields"),
        ({"transitions": [_row(probability="high")]}, "numeric"),
        ({"transitions": [_row(probability=1.5)]}, r"\[0, 1\]"),
        ({"transitions": [_row(probability=-0.1)]}, r"\[0, 1\]"),
        ({"transitions": [_row(reward=float("inf"))]}, "finite"),
        ({"transitions": [_row(), _row()]}, "Duplicate"),
        ({"transitions": [], "states": "s0"}, "'states' must be a list"),
        ({"transitions": [], "enumerate_rewards": "yes"}, "boolean"),
        ({"transitions": [_row(state={"x": 1})]}, "scalar or sequence"),
    ],
)
def test_from_dict_rejects_malformed_payloads(payload, message) -> None:
    with pytest.raises(ValueError, match=message):
        TabularEnvironment.from_dict(payload)


def test_save_and_load_preserve_dynamics(chain_env, tmp_path: Path) -> None:
    output = tmp_path / "nested" / "chain.yaml"
    save_tabular_environment(chain_env, output)

    payload = yaml.safe_load(output.read_text())
    assert payload["name"] == "two_state_chain"
    assert payload["states"] == ["left", "right", "done"]

    loaded = load_tabular_environment(output)
    assert set(loaded.rows) == set(chain_env.rows)
    assert loaded.states == chain_env.states
    assert loaded.rewards() == chain_env.rewards()


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_tabular_environment(tmp_path / "missing.yaml")


def test_load_rejects_non_mapping_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_tabular_environment(path)


def test_rows_round_trip_through_constructor() -> None:
    rows = [
        TransitionRow(state=0, action="a", next_state=1, reward=0.0, probability=0.5),
        TransitionRow(state=0, action="a", next_state=0, reward=1.0, probability=0.5),
    ]
    env = TabularEnvironment(rows, states=[2], name="ints")
    assert env.states == (2, 0, 1)
    assert set(env.rows) == set(rows)
    assert env.is_terminal(2)
