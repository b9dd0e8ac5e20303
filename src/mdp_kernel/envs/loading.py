"""Resolve environments from YAML files or built-in names."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from enum import Enum
from pathlib import Path

import yaml

from mdp_kernel.envs.self_loop import SelfLoopEnvironment
from mdp_kernel.envs.tabular import TabularEnvironment, load_tabular_environment

BUILTIN_ENVIRONMENTS = {
    "self_loop": SelfLoopEnvironment,
}


def resolve_environment(
    env_path: Path | None = None,
    builtin: str | None = None,
) -> SelfLoopEnvironment | TabularEnvironment:
    """Load an environment from exactly one of ``env_path`` or ``builtin``."""
    if (env_path is None) == (builtin is None):
        raise ValueError("Provide exactly one of env_path or builtin.")
    if env_path is not None:
        return load_tabular_environment(env_path)
    factory = BUILTIN_ENVIRONMENTS.get(builtin)
    if factory is None:
        raise ValueError(
            f"Unknown builtin environment {builtin!r}. "
            f"Expected one of {sorted(BUILTIN_ENVIRONMENTS)}."
        )
    return factory()


def match_value(raw: str, candidates: Iterable[Hashable], *, kind: str) -> Hashable:
    """Find the candidate state/action a command-line string refers to.

    ``raw`` is parsed as YAML so ``3`` matches an integer state and
    ``[0, 1]`` matches a tuple state; enum members match by value. Parsed
    values only match candidates of the same type, so ``true`` never
    matches the integer ``1``.
    """
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:
        parsed = raw
    if isinstance(parsed, list):
        parsed = tuple(parsed)
    pool = list(candidates)
    for candidate in pool:
        if isinstance(candidate, Enum):
            if candidate.value == parsed or candidate.name == raw:
                return candidate
        elif type(candidate) is type(parsed) and candidate == parsed:
            return candidate
        elif str(candidate) == raw:
            return candidate
    raise ValueError(f"Unknown {kind} {raw!r}. Expected one of {pool!r}.")
