"""Concrete environments implementing the dynamics contract."""

from mdp_kernel.envs.loading import BUILTIN_ENVIRONMENTS, match_value, resolve_environment
from mdp_kernel.envs.self_loop import Always, DoNothing, SelfLoopEnvironment
from mdp_kernel.envs.tabular import (
    TabularEnvironment,
    TransitionRow,
    load_tabular_environment,
    save_tabular_environment,
)

__all__ = [
    "Always",
    "BUILTIN_ENVIRONMENTS",
    "DoNothing",
    "SelfLoopEnvironment",
    "TabularEnvironment",
    "TransitionRow",
    "load_tabular_environment",
    "match_value",
    "resolve_environment",
    "save_tabular_environment",
]
