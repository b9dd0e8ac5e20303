"""Executable checks of the dynamics contract against a concrete environment."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
import logging
import math

import numpy as np

from mdp_kernel.analysis.enumeration import (
    DEFAULT_MAX_STATES,
    ordered,
    reachable_states,
)
from mdp_kernel.core import calculus
from mdp_kernel.core.environment import Environment
from mdp_kernel.core.types import is_unsupported

logger = logging.getLogger(__name__)

_SKIPPED = "skipped: reward enumeration unavailable"


@dataclass(frozen=True)
class ConformanceConfig:
    """Configuration for conformance checks."""

    atol: float = 1e-6
    max_states: int = DEFAULT_MAX_STATES
    show_progress: bool = False
    progress_desc: str = "Conformance checks"

    def validate(self) -> None:
        if not (self.atol > 0.0):
            raise ValueError("atol must be positive.")
        if self.max_states <= 0:
            raise ValueError("max_states must be positive.")


@dataclass(frozen=True)
class CheckResult:
    """One conformance-check result."""

    name: str
    passed: bool
    details: str
    metric: float | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "name": self.name,
            "passed": self.passed,
            "details": self.details,
        }
        if self.metric is not None:
            payload["metric"] = self.metric
        return payload


@dataclass(frozen=True)
class ConformanceReport:
    """Aggregated hard/advisory checks for one environment."""

    hard_checks: tuple[CheckResult, ...]
    advisory_checks: tuple[CheckResult, ...]
    strict: bool
    n_states: int

    @property
    def hard_failures(self) -> tuple[CheckResult, ...]:
        return tuple(check for check in self.hard_checks if not check.passed)

    @property
    def advisory_warnings(self) -> tuple[CheckResult, ...]:
        return tuple(check for check in self.advisory_checks if not check.passed)

    @property
    def passed(self) -> bool:
        if self.hard_failures:
            return False
        if self.strict and self.advisory_warnings:
            return False
        return True

    def check(self, name: str) -> CheckResult:
        """Look up a check result by name."""
        for result in (*self.hard_checks, *self.advisory_checks):
            if result.name == name:
                return result
        raise KeyError(name)

    def to_dict(self) -> dict[str, object]:
        return {
            "n_states": self.n_states,
            "hard_checks": [check.to_dict() for check in self.hard_checks],
            "advisory_checks": [check.to_dict() for check in self.advisory_checks],
            "hard_failures": [check.to_dict() for check in self.hard_failures],
            "advisory_warnings": [check.to_dict() for check in self.advisory_warnings],
            "strict": self.strict,
            "passed": self.passed,
        }


@dataclass(frozen=True)
class _Context:
    env: Environment
    states: tuple[Hashable, ...]
    actions: tuple[Hashable, ...]
    rewards: tuple[float, ...] | None
    atol: float

    def legal_pairs(self) -> Iterable[tuple[Hashable, Hashable]]:
        for state in self.states:
            for action in ordered(self.env.actions_from(state)):
                yield state, action


def run_conformance_checks(
    env: Environment,
    initial_states: Iterable[Hashable],
    config: ConformanceConfig | None = None,
    *,
    strict: bool = False,
) -> ConformanceReport:
    """Check the contract invariants on every state reachable from ``initial_states``."""
    config = config or ConformanceConfig()
    config.validate()

    states = reachable_states(env, initial_states, max_states=config.max_states)
    actions = ordered({action for state in states for action in env.actions_from(state)})
    ctx = _Context(
        env=env,
        states=states,
        actions=tuple(actions),
        rewards=calculus.reward_support(env),
        atol=config.atol,
    )
    logger.info(
        "Running conformance checks on %s: %d states, %d actions, rewards=%s",
        type(env).__name__,
        len(states),
        len(actions),
        "declined" if ctx.rewards is None else len(ctx.rewards),
    )

    hard: tuple[Callable[[_Context], CheckResult], ...] = (
        _check_probability_bounds,
        _check_normalization,
        _check_tight_support,
        _check_illegal_action_zero,
        _check_marginal_consistency,
        _check_expectation_consistency,
        _check_unsupported_propagation,
    )
    advisory: tuple[Callable[[_Context], CheckResult], ...] = (
        _check_reward_enumeration_distinct,
        _check_reward_enumeration_used,
    )

    checks = (*hard, *advisory)
    progress = checks
    if config.show_progress:
        # Import tqdm lazily to avoid notebook-side effects when progress is disabled.
        from tqdm.auto import tqdm

        progress = tqdm(checks, desc=config.progress_desc, dynamic_ncols=True, leave=False)

    results: list[CheckResult] = []
    for check in progress:
        result = check(ctx)
        if not result.passed:
            logger.warning("Check %s failed: %s", result.name, result.details)
        results.append(result)

    return ConformanceReport(
        hard_checks=tuple(results[: len(hard)]),
        advisory_checks=tuple(results[len(hard) :]),
        strict=strict,
        n_states=len(states),
    )


def _check_probability_bounds(ctx: _Context) -> CheckResult:
    name = "probability_bounds"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    checked = 0
    for state, action in ctx.legal_pairs():
        for next_state in ctx.states:
            for reward in ctx.rewards:
                prob = ctx.env.prob(state, action, next_state, reward)
                checked += 1
                if not math.isfinite(prob) or prob < 0.0 or prob > 1.0 + ctx.atol:
                    return CheckResult(
                        name=name,
                        passed=False,
                        details=(
                            f"prob={prob!r} outside [0, 1] at state={state!r}, "
                            f"action={action!r}, next_state={next_state!r}, "
                            f"reward={reward!r}"
                        ),
                        metric=prob,
                    )
    return CheckResult(
        name=name,
        passed=True,
        details=f"validated {checked} joint probabilities",
    )


def _check_normalization(ctx: _Context) -> CheckResult:
    name = "normalization"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    checked = 0
    worst = 0.0
    for state, action in ctx.legal_pairs():
        total = math.fsum(
            ctx.env.prob(state, action, next_state, reward)
            for next_state in ctx.env.states_from(state, action)
            for reward in ctx.rewards
        )
        checked += 1
        worst = max(worst, abs(total - 1.0))
        if not np.isclose(total, 1.0, rtol=0.0, atol=ctx.atol):
            return CheckResult(
                name=name,
                passed=False,
                details=(
                    f"probability mass={total:.12f} at state={state!r}, "
                    f"action={action!r}"
                ),
                metric=total,
            )
    return CheckResult(
        name=name,
        passed=True,
        details=f"validated {checked} state-action distributions",
        metric=worst,
    )


def _check_tight_support(ctx: _Context) -> CheckResult:
    name = "tight_support"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    for state, action in ctx.legal_pairs():
        support = ctx.env.states_from(state, action)
        for next_state in ctx.states:
            mass = calculus.transition_probability(ctx.env, state, action, next_state)
            listed = next_state in support
            if listed and mass <= 0.0:
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"states_from({state!r}, {action!r}) lists {next_state!r} "
                        "with zero probability mass"
                    ),
                )
            if not listed and mass > 0.0:
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"states_from({state!r}, {action!r}) omits {next_state!r} "
                        f"with probability mass {mass:.6g}"
                    ),
                    metric=mass,
                )
    return CheckResult(
        name=name,
        passed=True,
        details="successor sets match non-zero transition mass",
    )


def _check_illegal_action_zero(ctx: _Context) -> CheckResult:
    name = "illegal_action_zero"
    probed = 0
    for state in ctx.states:
        legal = ctx.env.actions_from(state)
        for action in ctx.actions:
            if action in legal:
                continue
            probed += 1
            successors = ctx.env.states_from(state, action)
            if successors:
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"illegal action {action!r} in state {state!r} "
                        f"has successors {ordered(successors)!r}"
                    ),
                )
            if ctx.rewards is None:
                continue
            for next_state in ctx.states:
                for reward in ctx.rewards:
                    prob = ctx.env.prob(state, action, next_state, reward)
                    if prob != 0.0:
                        return CheckResult(
                            name=name,
                            passed=False,
                            details=(
                                f"illegal action {action!r} in state {state!r} "
                                f"gives prob={prob!r} for next_state={next_state!r}, "
                                f"reward={reward!r}"
                            ),
                            metric=prob,
                        )
    return CheckResult(
        name=name,
        passed=True,
        details=f"probed {probed} illegal state-action pairs",
    )


def _check_marginal_consistency(ctx: _Context) -> CheckResult:
    name = "marginal_consistency"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    worst = 0.0
    for state, action in ctx.legal_pairs():
        for next_state in ctx.states:
            reported = ctx.env.transition_probability(state, action, next_state)
            expected = math.fsum(
                ctx.env.prob(state, action, next_state, reward) for reward in ctx.rewards
            )
            if is_unsupported(reported):
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"transition_probability({state!r}, {action!r}, "
                        f"{next_state!r}) unsupported despite reward enumeration"
                    ),
                )
            gap = abs(reported - expected)
            worst = max(worst, gap)
            if gap > ctx.atol:
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"transition_probability({state!r}, {action!r}, "
                        f"{next_state!r})={reported:.12f} but joint sum={expected:.12f}"
                    ),
                    metric=gap,
                )
    return CheckResult(
        name=name,
        passed=True,
        details="marginals agree with joint dynamics",
        metric=worst,
    )


def _check_expectation_consistency(ctx: _Context) -> CheckResult:
    name = "expectation_consistency"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    worst = 0.0
    for state, action in ctx.legal_pairs():
        reported = ctx.env.expected_reward(state, action)
        terms: list[float] = []
        for next_state in ctx.env.states_from(state, action):
            p_next = ctx.env.transition_probability(state, action, next_state)
            conditional = calculus.conditional_expected_reward(
                ctx.env, state, action, next_state
            )
            if is_unsupported(p_next) or is_unsupported(conditional):
                continue
            if p_next <= 0.0:
                continue
            terms.append(p_next * conditional)
        if is_unsupported(reported):
            return CheckResult(
                name=name,
                passed=False,
                details=(
                    f"expected_reward({state!r}, {action!r}) unsupported despite "
                    "reward enumeration"
                ),
            )
        total = math.fsum(terms)
        gap = abs(reported - total)
        worst = max(worst, gap)
        if gap > ctx.atol:
            return CheckResult(
                name=name,
                passed=False,
                details=(
                    f"expected_reward({state!r}, {action!r})={reported:.12f} but "
                    f"law of total expectation gives {total:.12f}"
                ),
                metric=gap,
            )
    return CheckResult(
        name=name,
        passed=True,
        details="expected rewards agree with conditional expectations",
        metric=worst,
    )


def _check_unsupported_propagation(ctx: _Context) -> CheckResult:
    name = "unsupported_propagation"
    expect_unsupported = ctx.rewards is None
    for state, action in ctx.legal_pairs():
        results = [calculus.expected_reward(ctx.env, state, action)]
        for next_state in ctx.env.states_from(state, action):
            results.append(
                calculus.transition_probability(ctx.env, state, action, next_state)
            )
            results.append(calculus.expected_reward_at(ctx.env, state, action, next_state))
        for value in results:
            if is_unsupported(value) != expect_unsupported:
                return CheckResult(
                    name=name,
                    passed=False,
                    details=(
                        f"derived value {value!r} at state={state!r}, "
                        f"action={action!r} does not match reward enumeration "
                        f"({'declined' if expect_unsupported else 'available'})"
                    ),
                )
    if expect_unsupported:
        details = "all derived queries report unsupported"
    else:
        details = "all derived queries produce numeric values"
    return CheckResult(name=name, passed=True, details=details)


def _check_reward_enumeration_distinct(ctx: _Context) -> CheckResult:
    name = "reward_enumeration_distinct"
    raw = ctx.env.rewards()
    if raw is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)
    values = [float(reward) for reward in raw]
    duplicates = len(values) - len(set(values))
    if duplicates:
        return CheckResult(
            name=name,
            passed=False,
            details=f"reward enumeration repeats {duplicates} value(s)",
            metric=float(duplicates),
        )
    return CheckResult(
        name=name,
        passed=True,
        details=f"{len(values)} distinct reward values",
    )


def _check_reward_enumeration_used(ctx: _Context) -> CheckResult:
    name = "reward_enumeration_used"
    if ctx.rewards is None:
        return CheckResult(name=name, passed=True, details=_SKIPPED)

    unused = set(ctx.rewards)
    for state, action in ctx.legal_pairs():
        if not unused:
            break
        for next_state in ctx.env.states_from(state, action):
            for reward in tuple(unused):
                if ctx.env.prob(state, action, next_state, reward) > 0.0:
                    unused.discard(reward)
    if unused:
        return CheckResult(
            name=name,
            passed=False,
            details=(
                f"reward values never observed from reachable states: "
                f"{sorted(unused)!r}"
            ),
            metric=float(len(unused)),
        )
    return CheckResult(
        name=name,
        passed=True,
        details="every enumerated reward occurs with non-zero probability",
    )
