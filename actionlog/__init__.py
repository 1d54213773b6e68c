"""
Action log reducer.

Folds actions from an append-only, hash-chained ledger log into a running
sum, either in one bounded transaction, through one recursive certificate,
or through a snapshot that is flattened and drained in fixed-size batches.
"""

from .chain import Field, Ledger
from .config import ReducerConfig, load_config
from .proofs import ProofBackend
from .transactions import ActionReducerContract, ContractState, ReducerSimulation, initialize

__all__ = [
    "Field",
    "Ledger",
    "ReducerConfig",
    "load_config",
    "ProofBackend",
    "ActionReducerContract",
    "ContractState",
    "ReducerSimulation",
    "initialize",
]
