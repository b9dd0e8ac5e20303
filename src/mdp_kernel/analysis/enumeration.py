"""Enumeration helpers over an environment's finite state space."""

from __future__ import annotations

from collections import deque
from collections.abc import Hashable, Iterable

from mdp_kernel.core.calculus import reward_support
from mdp_kernel.core.environment import Environment
from mdp_kernel.core.types import TransitionBranch, Unsupported, UNSUPPORTED

DEFAULT_MAX_STATES = 10_000


def ordered(values: Iterable[Hashable]) -> list[Hashable]:
    """Sort hashable values, falling back to ``repr`` order for mixed types."""
    items = list(values)
    try:
        return sorted(items)  # type: ignore[type-var]
    except TypeError:
        return sorted(items, key=repr)


def joint_distribution(
    env: Environment, state: Hashable, action: Hashable
) -> tuple[TransitionBranch, ...] | Unsupported:
    """Enumerate every non-zero ``(next_state, reward)`` outcome of one pair.

    Branches are ordered by successor state, then by reward enumeration order.
    """
    rewards = reward_support(env)
    if rewards is None:
        return UNSUPPORTED

    branches: list[TransitionBranch] = []
    for next_state in ordered(env.states_from(state, action)):
        for reward in rewards:
            prob = env.prob(state, action, next_state, reward)
            if prob <= 0.0:
                continue
            branches.append(
                TransitionBranch(next_state=next_state, reward=reward, probability=prob)
            )
    return tuple(branches)


def reachable_states(
    env: Environment,
    initial_states: Iterable[Hashable],
    max_states: int = DEFAULT_MAX_STATES,
) -> tuple[Hashable, ...]:
    """Breadth-first closure of ``initial_states`` under the dynamics.

    Raises:
        ValueError: If no initial state is given or the closure grows past
            ``max_states``.
    """
    if max_states <= 0:
        raise ValueError("max_states must be positive.")

    seen: dict[Hashable, None] = dict.fromkeys(initial_states)
    if not seen:
        raise ValueError("At least one initial state is required.")
    if len(seen) > max_states:
        raise ValueError(f"State space exceeds max_states={max_states}.")

    frontier = deque(seen)
    while frontier:
        state = frontier.popleft()
        for action in ordered(env.actions_from(state)):
            for next_state in ordered(env.states_from(state, action)):
                if next_state in seen:
                    continue
                seen[next_state] = None
                if len(seen) > max_states:
                    raise ValueError(
                        f"State space exceeds max_states={max_states}; "
                        "the environment may not be finite."
                    )
                frontier.append(next_state)
    return tuple(seen)
