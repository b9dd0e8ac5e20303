"""Single-state environment that always loops back with zero reward."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from mdp_kernel.core.environment import Environment


class Always(Enum):
    SAME = "same"


class DoNothing(Enum):
    NOTHING = "nothing"


class SelfLoopEnvironment(Environment[Always, DoNothing]):
    """One state, one action, deterministic self-transition, reward 0."""

    @property
    def states(self) -> tuple[Always, ...]:
        return tuple(Always)

    def prob(
        self,
        state: Always,
        action: DoNothing,
        next_state: Always,
        reward: float,
    ) -> float:
        if not self.is_legal(state, action) or next_state is not Always.SAME:
            return 0.0
        return 1.0 if reward == 0.0 else 0.0

    def actions_from(self, state: Always) -> frozenset[DoNothing]:
        if state is not Always.SAME:
            return frozenset()
        return frozenset({DoNothing.NOTHING})

    def states_from(self, state: Always, action: DoNothing) -> frozenset[Always]:
        if not self.is_legal(state, action):
            return frozenset()
        return frozenset({Always.SAME})

    def rewards(self) -> Sequence[float]:
        return (0.0,)
