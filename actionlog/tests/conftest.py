"""
Pytest configuration for reducer tests.
"""

import pytest

from actionlog.chain import Ledger
from actionlog.config import ReducerConfig
from actionlog.proofs import ProofBackend
from actionlog.transactions import ActionReducerContract, ReducerSimulation


@pytest.fixture
def config():
    return ReducerConfig(proof_key="test-proof-key")


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def backend(config):
    return ProofBackend(config.proof_key)


@pytest.fixture
def contract(ledger, backend, config):
    return ActionReducerContract(ledger, backend, config)


@pytest.fixture
def simulation(config):
    return ReducerSimulation(config)
