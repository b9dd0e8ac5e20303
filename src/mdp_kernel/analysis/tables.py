"""Tabular views of dynamics and derived quantities for inspection."""

from __future__ import annotations

from collections.abc import Hashable, Iterable

import pandas as pd

from mdp_kernel.analysis.enumeration import joint_distribution, ordered
from mdp_kernel.core.environment import Environment
from mdp_kernel.core.types import Derived, is_unsupported

DISTRIBUTION_COLUMNS = ("next_state", "reward", "probability")
DERIVED_COLUMNS = ("state", "action", "n_successors", "expected_reward")


def distribution_frame(env: Environment, state: Hashable, action: Hashable) -> pd.DataFrame:
    """Joint ``(next_state, reward)`` distribution as a flat table.

    Empty when the environment does not enumerate its rewards.
    """
    branches = joint_distribution(env, state, action)
    if is_unsupported(branches):
        return pd.DataFrame(columns=list(DISTRIBUTION_COLUMNS))
    rows = [
        {
            "next_state": branch.next_state,
            "reward": branch.reward,
            "probability": branch.probability,
        }
        for branch in branches
    ]
    return pd.DataFrame(rows, columns=list(DISTRIBUTION_COLUMNS))


def derived_quantities_frame(
    env: Environment, states: Iterable[Hashable]
) -> pd.DataFrame:
    """One row per legal ``(state, action)`` pair with its expected reward.

    Unsupported quantities are stored as missing values.
    """
    rows: list[dict[str, object]] = []
    for state in states:
        for action in ordered(env.actions_from(state)):
            rows.append(
                {
                    "state": state,
                    "action": action,
                    "n_successors": len(env.states_from(state, action)),
                    "expected_reward": _as_optional(env.expected_reward(state, action)),
                }
            )
    return pd.DataFrame(rows, columns=list(DERIVED_COLUMNS))


def _as_optional(value: Derived) -> float | None:
    if is_unsupported(value):
        return None
    return float(value)
