"""Print the dynamics and derived quantities of one state-action pair."""

from __future__ import annotations

import argparse
from pathlib import Path

from mdp_kernel.analysis.enumeration import ordered
from mdp_kernel.analysis.tables import derived_quantities_frame, distribution_frame
from mdp_kernel.envs.loading import BUILTIN_ENVIRONMENTS, match_value, resolve_environment
from mdp_kernel.utils.logging_setup import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect environment dynamics.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--env-path", type=Path, help="Tabular environment YAML.")
    source.add_argument(
        "--builtin",
        choices=sorted(BUILTIN_ENVIRONMENTS),
        help="Name of a built-in environment.",
    )
    parser.add_argument("--state", default=None, help="Defaults to the first state.")
    parser.add_argument(
        "--action",
        default=None,
        help="Defaults to the first legal action in the chosen state.",
    )
    parser.add_argument(
        "--csv",
        type=Path,
        default=None,
        help="Optional CSV output for the per state-action derived table.",
    )
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(args.log_level)
    env = resolve_environment(env_path=args.env_path, builtin=args.builtin)
    if not env.states:
        raise ValueError("Environment declares no states.")

    if args.state is None:
        state = env.states[0]
    else:
        state = match_value(args.state, env.states, kind="state")

    actions = ordered(env.actions_from(state))
    print(f"State: {state}")
    print(f"Available actions: {actions}")
    if not actions:
        print("Terminal state; nothing to inspect.")
        return 0

    if args.action is None:
        action = actions[0]
    else:
        action = match_value(args.action, actions, kind="action")

    print(f"Action: {action}")
    rewards = env.rewards()
    print(f"Rewards: {'declined' if rewards is None else list(rewards)}")
    frame = distribution_frame(env, state, action)
    if frame.empty:
        print("Joint distribution: unavailable")
    else:
        print("Joint distribution:")
        print(frame.to_string(index=False))

    print(f"Expected reward: {env.expected_reward(state, action)}")
    for next_state in ordered(env.states_from(state, action)):
        print(
            f"  -> {next_state}: "
            f"transition prob={env.transition_probability(state, action, next_state)}, "
            f"expected reward at={env.expected_reward_at(state, action, next_state)}"
        )

    if args.csv is not None:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        derived_quantities_frame(env, env.states).to_csv(args.csv, index=False)
        print(f"Derived table: {args.csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
