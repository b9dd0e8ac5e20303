"""Abstract contract for finite Markov decision process dynamics."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Sequence

from mdp_kernel.core import calculus
from mdp_kernel.core.types import ActionT, Derived, StateT


class Environment(ABC, Generic[StateT, ActionT]):
    """Joint dynamics ``p(s', r | s, a)`` of a finite MDP.

    Subclasses implement the primitive :meth:`prob` query together with the
    action and successor enumerations. Every other quantity is derived from
    those primitives by :mod:`mdp_kernel.core.calculus`, so marginal and
    conditional queries stay consistent with the joint distribution.

    Implementations are pure: identical inputs always give identical results
    and no query mutates the environment.
    """

    @abstractmethod
    def prob(
        self,
        state: StateT,
        action: ActionT,
        next_state: StateT,
        reward: float,
    ) -> float:
        """Joint probability of reaching ``next_state`` with exactly ``reward``.

        Must return ``0.0`` for impossible outcomes and for actions that are
        not legal in ``state``; never raises for well-typed inputs.
        """

    @abstractmethod
    def actions_from(self, state: StateT) -> frozenset[ActionT]:
        """Legal actions in ``state``. Empty for terminal states."""

    @abstractmethod
    def states_from(self, state: StateT, action: ActionT) -> frozenset[StateT]:
        """Successors with non-zero total probability under ``(state, action)``."""

    def rewards(self) -> Sequence[float] | None:
        """Every distinct reward value the environment can emit.

        Returns ``None`` when the reward domain cannot be enumerated
        completely; derived queries then report :class:`Unsupported`.
        """
        return None

    @property
    def supports_marginalization(self) -> bool:
        """Whether the reward enumeration allows exact derived queries."""
        return calculus.reward_support(self) is not None

    def is_terminal(self, state: StateT) -> bool:
        """Whether no action is legal in ``state``."""
        return not self.actions_from(state)

    def is_legal(self, state: StateT, action: ActionT) -> bool:
        """Whether ``action`` is among ``actions_from(state)``."""
        return action in self.actions_from(state)

    # Derived quantities. Environments without a reward enumeration may
    # override these with closed forms.

    def transition_probability(
        self, state: StateT, action: ActionT, next_state: StateT
    ) -> Derived:
        """Marginal probability of ``next_state``, summing out the reward."""
        return calculus.transition_probability(self, state, action, next_state)

    def expected_reward(self, state: StateT, action: ActionT) -> Derived:
        """Expected immediate reward of taking ``action`` in ``state``."""
        return calculus.expected_reward(self, state, action)

    def expected_reward_at(
        self, state: StateT, action: ActionT, next_state: StateT
    ) -> Derived:
        """Reward-weighted mass of arriving at ``next_state``."""
        return calculus.expected_reward_at(self, state, action, next_state)
