"""Run dynamics-contract conformance checks against an environment."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from mdp_kernel.analysis.conformance import ConformanceConfig, run_conformance_checks
from mdp_kernel.envs.loading import BUILTIN_ENVIRONMENTS, match_value, resolve_environment
from mdp_kernel.utils.io import write_json
from mdp_kernel.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate environment dynamics.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--env-path", type=Path, help="Tabular environment YAML.")
    source.add_argument(
        "--builtin",
        choices=sorted(BUILTIN_ENVIRONMENTS),
        help="Name of a built-in environment.",
    )
    parser.add_argument(
        "--initial-state",
        action="append",
        default=None,
        help="State to explore from (repeatable). Defaults to every declared state.",
    )
    parser.add_argument("--atol", type=float, default=1e-6)
    parser.add_argument("--max-states", type=int, default=10_000)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on advisory warnings in addition to hard checks.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional path for the JSON conformance report.",
    )
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable tqdm progress bar over checks.",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    env = resolve_environment(env_path=args.env_path, builtin=args.builtin)
    if args.initial_state:
        initial_states = [
            match_value(raw, env.states, kind="state") for raw in args.initial_state
        ]
    else:
        initial_states = list(env.states)
    logger.info("Exploring from %d initial state(s)", len(initial_states))

    config = ConformanceConfig(
        atol=args.atol,
        max_states=args.max_states,
        show_progress=not args.no_progress,
    )
    report = run_conformance_checks(env, initial_states, config, strict=args.strict)

    if args.output is not None:
        write_json(args.output, report.to_dict())
        print(f"Report: {args.output}")

    print(f"Environment: {getattr(env, 'name', type(env).__name__)}")
    print(f"States checked: {report.n_states}")
    for check in (*report.hard_checks, *report.advisory_checks):
        status = "ok" if check.passed else "FAIL"
        print(f"  [{status}] {check.name}: {check.details}")
    print(f"Hard failures: {len(report.hard_failures)}")
    print(f"Advisory warnings: {len(report.advisory_warnings)}")

    if not report.passed:
        print("Validation failed.")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
