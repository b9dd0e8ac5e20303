"""Enumeration, conformance checks and reports over environment dynamics."""

from mdp_kernel.analysis.conformance import (
    CheckResult,
    ConformanceConfig,
    ConformanceReport,
    run_conformance_checks,
)
from mdp_kernel.analysis.enumeration import joint_distribution, reachable_states
from mdp_kernel.analysis.tables import derived_quantities_frame, distribution_frame

__all__ = [
    "CheckResult",
    "ConformanceConfig",
    "ConformanceReport",
    "derived_quantities_frame",
    "distribution_frame",
    "joint_distribution",
    "reachable_states",
    "run_conformance_checks",
]
