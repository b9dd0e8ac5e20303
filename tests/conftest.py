"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdp_kernel.envs.self_loop import SelfLoopEnvironment
from mdp_kernel.envs.tabular import TabularEnvironment, load_tabular_environment

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def self_loop_env() -> SelfLoopEnvironment:
    return SelfLoopEnvironment()


@pytest.fixture
def chain_env() -> TabularEnvironment:
    return load_tabular_environment(FIXTURES_DIR / "two_state_chain.yaml")


@pytest.fixture
def chain_env_no_rewards() -> TabularEnvironment:
    return load_tabular_environment(FIXTURES_DIR / "two_state_chain_no_rewards.yaml")
