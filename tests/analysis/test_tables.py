"""Tests for tabular inspection frames."""

from __future__ import annotations

import pandas as pd

from mdp_kernel.analysis.tables import derived_quantities_frame, distribution_frame


def test_distribution_frame(chain_env) -> None:
    frame = distribution_frame(chain_env, "left", "go")
    assert list(frame.columns) == ["next_state", "reward", "probability"]
    assert frame["probability"].sum() == 1.0
    assert set(frame["next_state"]) == {"left", "right"}


def test_distribution_frame_empty_without_rewards(chain_env_no_rewards) -> None:
    frame = distribution_frame(chain_env_no_rewards, "left", "go")
    assert frame.empty
    assert list(frame.columns) == ["next_state", "reward", "probability"]


def test_derived_quantities_frame(chain_env) -> None:
    frame = derived_quantities_frame(chain_env, chain_env.states)
    assert len(frame) == 4
    row = frame[(frame["state"] == "right") & (frame["action"] == "go")].iloc[0]
    assert row["n_successors"] == 2
    assert row["expected_reward"] == 4.5


def test_derived_quantities_frame_marks_unsupported_as_missing(
    chain_env_no_rewards,
) -> None:
    frame = derived_quantities_frame(chain_env_no_rewards, chain_env_no_rewards.states)
    assert len(frame) == 2
    assert frame["expected_reward"].isna().all()
    assert isinstance(frame, pd.DataFrame)
