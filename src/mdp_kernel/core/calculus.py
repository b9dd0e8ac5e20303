"""Derived quantities computed from an environment's joint dynamics.

Every function here is a pure composition over ``Environment.prob`` and the
enumeration queries. When the environment declines to enumerate its rewards,
each function returns an :class:`~mdp_kernel.core.types.Unsupported` value
instead of a number, so "no value" is never confused with zero.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Hashable

from mdp_kernel.core.types import Derived, Unsupported, UNSUPPORTED

if TYPE_CHECKING:
    from mdp_kernel.core.environment import Environment


def reward_support(env: Environment) -> tuple[float, ...] | None:
    """Return the de-duplicated reward enumeration, or ``None`` if declined."""
    raw = env.rewards()
    if raw is None:
        return None
    values = tuple(dict.fromkeys(float(reward) for reward in raw))
    if not values:
        return None
    return values


def transition_probability(
    env: Environment,
    state: Hashable,
    action: Hashable,
    next_state: Hashable,
) -> Derived:
    """Return ``sum_r p(next_state, r | state, action)``."""
    rewards = reward_support(env)
    if rewards is None:
        return UNSUPPORTED
    return math.fsum(env.prob(state, action, next_state, reward) for reward in rewards)


def expected_reward(env: Environment, state: Hashable, action: Hashable) -> Derived:
    """Return ``sum_{r, s'} p(s', r | state, action) * r``.

    The successor summation is bounded by ``env.states_from(state, action)``.
    """
    rewards = reward_support(env)
    if rewards is None:
        return UNSUPPORTED
    successors = env.states_from(state, action)
    return math.fsum(
        env.prob(state, action, next_state, reward) * reward
        for reward in rewards
        for next_state in successors
    )


def expected_reward_at(
    env: Environment,
    state: Hashable,
    action: Hashable,
    next_state: Hashable,
) -> Derived:
    """Return ``sum_r p(next_state, r | state, action) * r``."""
    rewards = reward_support(env)
    if rewards is None:
        return UNSUPPORTED
    return math.fsum(
        env.prob(state, action, next_state, reward) * reward for reward in rewards
    )


def conditional_expected_reward(
    env: Environment,
    state: Hashable,
    action: Hashable,
    next_state: Hashable,
) -> Derived:
    """Return ``E[r | state, action, next_state]``.

    Zero when ``next_state`` is unreachable.
    """
    p_next = transition_probability(env, state, action, next_state)
    weighted = expected_reward_at(env, state, action, next_state)
    if isinstance(p_next, Unsupported) or isinstance(weighted, Unsupported):
        return UNSUPPORTED
    if p_next <= 0.0:
        return 0.0
    return weighted / p_next


def transition_distribution(
    env: Environment, state: Hashable, action: Hashable
) -> dict[Hashable, float] | Unsupported:
    """Return the marginal successor distribution over ``states_from``."""
    rewards = reward_support(env)
    if rewards is None:
        return UNSUPPORTED
    return {
        next_state: math.fsum(
            env.prob(state, action, next_state, reward) for reward in rewards
        )
        for next_state in env.states_from(state, action)
    }
