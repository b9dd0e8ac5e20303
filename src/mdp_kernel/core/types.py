"""Shared domain types for environment dynamics and derived quantities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, TypeVar, Union


StateT = TypeVar("StateT", bound=Hashable)
ActionT = TypeVar("ActionT", bound=Hashable)

Reward = float
Probability = float


@dataclass(frozen=True)
class Unsupported:
    """Marker returned by derived queries that cannot be computed exactly.

    Attributes:
        reason: Why the environment could not produce a value.
    """

    reason: str = "reward enumeration unavailable"

    def __str__(self) -> str:
        return f"Unsupported({self.reason})"


UNSUPPORTED = Unsupported()

Derived = Union[float, Unsupported]


def is_unsupported(value: object) -> bool:
    """Return whether ``value`` is the unsupported variant of a derived result."""
    return isinstance(value, Unsupported)


@dataclass(frozen=True)
class TransitionBranch:
    """One non-zero outcome of the joint (next state, reward) distribution."""

    next_state: Hashable
    reward: float
    probability: float
