"""Explicit tabular environments and their YAML schema."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
import logging
import math
from pathlib import Path
from typing import Any, Sequence

import yaml

from mdp_kernel.core.environment import Environment
from mdp_kernel.utils.io import write_yaml

logger = logging.getLogger(__name__)

_REQUIRED_ROW_FIELDS = ("state", "action", "next_state", "reward", "probability")


@dataclass(frozen=True)
class TransitionRow:
    """One entry of the joint dynamics table."""

    state: Hashable
    action: Hashable
    next_state: Hashable
    reward: float
    probability: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": _plain(self.state),
            "action": _plain(self.action),
            "next_state": _plain(self.next_state),
            "reward": self.reward,
            "probability": self.probability,
        }


class TabularEnvironment(Environment[Hashable, Hashable]):
    """Environment backed by an explicit ``(s, a, s', r) -> p`` table.

    Args:
        rows: Joint-probability entries. Zero-probability rows are dropped.
        states: Optional extra states, e.g. terminal states without rows.
        enumerate_rewards: When ``False`` the environment declines to
            enumerate its rewards and derived queries are unsupported.
        name: Label used in reports.
    """

    def __init__(
        self,
        rows: Iterable[TransitionRow],
        *,
        states: Iterable[Hashable] = (),
        enumerate_rewards: bool = True,
        name: str = "tabular",
    ) -> None:
        table: dict[tuple[Hashable, Hashable, Hashable, float], float] = {}
        for row in rows:
            _validate_row(row)
            key = (row.state, row.action, row.next_state, float(row.reward))
            if key in table:
                raise ValueError(
                    "Duplicate transition row for "
                    f"state={row.state!r}, action={row.action!r}, "
                    f"next_state={row.next_state!r}, reward={row.reward!r}."
                )
            table[key] = float(row.probability)

        self._name = name
        self._enumerate_rewards = enumerate_rewards
        self._table = {key: prob for key, prob in table.items() if prob > 0.0}

        actions: dict[Hashable, set[Hashable]] = {}
        successors: dict[tuple[Hashable, Hashable], set[Hashable]] = {}
        declared: dict[Hashable, None] = dict.fromkeys(states)
        for state, action, next_state, _ in self._table:
            actions.setdefault(state, set()).add(action)
            successors.setdefault((state, action), set()).add(next_state)
            declared.setdefault(state)
            declared.setdefault(next_state)

        self._actions = {state: frozenset(acts) for state, acts in actions.items()}
        self._successors = {key: frozenset(nxt) for key, nxt in successors.items()}
        self._states = tuple(declared)
        self._rewards = tuple(sorted({key[3] for key in self._table}))
        logger.debug(
            "Built tabular environment %r: %d states, %d rows, %d rewards",
            name,
            len(self._states),
            len(self._table),
            len(self._rewards),
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def states(self) -> tuple[Hashable, ...]:
        """Every state named by the table or declared explicitly."""
        return self._states

    @property
    def rows(self) -> tuple[TransitionRow, ...]:
        return tuple(
            TransitionRow(
                state=state,
                action=action,
                next_state=next_state,
                reward=reward,
                probability=prob,
            )
            for (state, action, next_state, reward), prob in self._table.items()
        )

    def prob(
        self,
        state: Hashable,
        action: Hashable,
        next_state: Hashable,
        reward: float,
    ) -> float:
        try:
            key = (state, action, next_state, float(reward))
        except (TypeError, ValueError):
            return 0.0
        return self._table.get(key, 0.0)

    def actions_from(self, state: Hashable) -> frozenset[Hashable]:
        return self._actions.get(state, frozenset())

    def states_from(self, state: Hashable, action: Hashable) -> frozenset[Hashable]:
        return self._successors.get((state, action), frozenset())

    def rewards(self) -> Sequence[float] | None:
        if not self._enumerate_rewards:
            return None
        return self._rewards

    def to_dict(self) -> dict[str, Any]:
        """Convert to the YAML payload accepted by :meth:`from_dict`."""
        return {
            "name": self._name,
            "states": [_plain(state) for state in self._states],
            "enumerate_rewards": self._enumerate_rewards,
            "transitions": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TabularEnvironment":
        """Create an environment from a plain mapping."""
        raw_rows = payload.get("transitions")
        if not isinstance(raw_rows, list):
            raise ValueError("Environment payload requires a 'transitions' list.")

        rows = [_row_from_dict(raw, index=idx) for idx, raw in enumerate(raw_rows)]

        raw_states = payload.get("states", [])
        if not isinstance(raw_states, list):
            raise ValueError("'states' must be a list when provided.")

        enumerate_rewards = payload.get("enumerate_rewards", True)
        if not isinstance(enumerate_rewards, bool):
            raise ValueError("'enumerate_rewards' must be a boolean.")

        states = [
            _hashable(raw, field=f"states[{idx}]") for idx, raw in enumerate(raw_states)
        ]
        return cls(
            rows,
            states=states,
            enumerate_rewards=enumerate_rewards,
            name=str(payload.get("name", "tabular")),
        )


def save_tabular_environment(env: TabularEnvironment, output_path: Path) -> None:
    """Serialize a tabular environment to YAML."""
    write_yaml(output_path, env.to_dict())


def load_tabular_environment(path: Path) -> TabularEnvironment:
    """Load a tabular environment from YAML."""
    if not path.exists():
        raise FileNotFoundError(f"Environment file not found: {path}")
    payload = yaml.safe_load(path.read_text())
    if not isinstance(payload, dict):
        raise ValueError("Expected a mapping in environment YAML.")
    env = TabularEnvironment.from_dict(payload)
    logger.info("Loaded environment %r from %s", env.name, path)
    return env


def _row_from_dict(raw: object, *, index: int) -> TransitionRow:
    if not isinstance(raw, dict):
        raise ValueError(f"transitions[{index}] must be a mapping.")
    missing = [name for name in _REQUIRED_ROW_FIELDS if name not in raw]
    if missing:
        raise ValueError(f"transitions[{index}] missing fields: {', '.join(missing)}")
    try:
        reward = float(raw["reward"])
        probability = float(raw["probability"])
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"transitions[{index}] reward and probability must be numeric."
        ) from exc
    return TransitionRow(
        state=_hashable(raw["state"], field=f"transitions[{index}].state"),
        action=_hashable(raw["action"], field=f"transitions[{index}].action"),
        next_state=_hashable(raw["next_state"], field=f"transitions[{index}].next_state"),
        reward=reward,
        probability=probability,
    )


def _hashable(value: object, *, field: str) -> Hashable:
    # YAML sequences load as lists; tuples keep them usable as keys.
    if isinstance(value, list):
        value = tuple(_hashable(item, field=field) for item in value)
    if not isinstance(value, Hashable):
        raise ValueError(f"{field} must be a scalar or sequence, got {value!r}.")
    return value


def _plain(value: object) -> object:
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    return value


def _validate_row(row: TransitionRow) -> None:
    if not math.isfinite(row.reward):
        raise ValueError(f"Reward must be finite, got {row.reward!r}.")
    if not math.isfinite(row.probability) or not (0.0 <= row.probability <= 1.0):
        raise ValueError(
            f"Probability must be in [0, 1], got {row.probability!r} "
            f"for state={row.state!r}, action={row.action!r}."
        )
