"""
Reducer transactions - contract state, transitions and the simulation harness.
"""

from .state import ContractState, Phase, STATE_SLOTS, initialize
from .add_reducer import (
    METHODS,
    ActionReducerContract,
    TransitionContext,
    reduce_bounded_range,
)
from .drain import next_drain_batch, drain_batches, batches_needed
from .simulation_harness import ReducerSimulation

__all__ = [
    # State
    "ContractState",
    "Phase",
    "STATE_SLOTS",
    "initialize",
    # Contract
    "METHODS",
    "ActionReducerContract",
    "TransitionContext",
    "reduce_bounded_range",
    # Drain
    "next_drain_batch",
    "drain_batches",
    "batches_needed",
    # Harness
    "ReducerSimulation",
]
