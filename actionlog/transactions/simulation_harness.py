"""
Simulation harness for the action reducer.

Plays every off-chain role around the contract: callers dispatching
actions, provers building certificates, and the drainer popping batches off
the flattened list.
"""

import logging
from typing import Optional, Sequence

from ..chain.field import FieldLike
from ..chain.flat_list import FlatActionList
from ..chain.ledger import Ledger
from ..config import ReducerConfig
from ..errors import ReducerError
from ..proofs import Certificate, ProofBackend, build_flat_certificate, build_reduce_certificate
from .add_reducer import ActionReducerContract
from .drain import next_drain_batch
from .state import ContractState, Phase


logger = logging.getLogger(__name__)


class ReducerSimulation:
    """
    Helper class to run reducer simulations.

    Owns a ledger, a proof backend and one contract, and keeps the
    client-side flattened list between ``flatten`` and the drain calls.
    """

    def __init__(self, config: Optional[ReducerConfig] = None):
        self.config = config or ReducerConfig()
        self.ledger = Ledger()
        self.backend = ProofBackend(self.config.proof_key)
        self.contract = ActionReducerContract(self.ledger, self.backend, self.config)
        self.flat_list: Optional[FlatActionList] = None
        self.drain_count = 0

    @property
    def state(self) -> ContractState:
        return self.contract.state

    # Dispatch

    def dispatch(self, values: Sequence[FieldLike]):
        """One transaction per action."""
        for value in values:
            self.contract.submit(value)

    def dispatch_batch(self, values: Sequence[FieldLike]):
        """All actions in a single transaction."""
        self.contract.call_many([("submit", (value,)) for value in values])

    # Reducers

    def reduce_bounded(self):
        self.contract.reduce_bounded()

    def prove_reduce(self) -> Certificate:
        state = self.contract.read_state()
        return build_reduce_certificate(
            self.ledger, self.backend, state.total_sum, state.last_processed_action_state
        )

    def custom_reduce(self):
        self.contract.custom_reduce(self.prove_reduce())

    # Snapshot / flatten / drain

    def snapshot(self):
        self.contract.create_snapshot()

    def prove_flatten(self):
        state = self.contract.read_state()
        return build_flat_certificate(
            self.ledger, self.backend, state.last_processed_action_state, state.snapshot
        )

    def flatten(self):
        certificate, flat_list = self.prove_flatten()
        self.contract.flat_snapshot(certificate)
        self.flat_list = flat_list
        self.drain_count = 0

    def drain(self) -> bool:
        """
        Submit one drain batch. Returns True once the cycle is finished.

        The local list is restored if the contract rejects the batch.
        """
        if self.state.phase is Phase.IDLE:
            return True
        if self.flat_list is None:
            raise RuntimeError("nothing to drain: call flatten() first")
        expected = self.contract.read_state()
        saved = self.flat_list.copy()
        batch = next_drain_batch(self.flat_list, self.config.batch_size)
        try:
            self.contract.snapshot_reduce(batch, expected=expected)
        except ReducerError:
            self.flat_list = saved
            raise
        self.drain_count += 1
        return self.state.phase is Phase.IDLE

    def drain_all(self, max_batches: int = 10_000) -> int:
        """Drain until the cycle finishes; returns the number of batches sent."""
        sent = 0
        while self.state.phase is not Phase.IDLE:
            if sent >= max_batches:
                raise RuntimeError(f"drain did not finish after {max_batches} batches")
            self.drain()
            sent += 1
        logger.info("drain finished after %d batch(es), total_sum=%d",
                    sent, int(self.state.total_sum))
        return sent

    def reduce_snapshot(self) -> int:
        """Full snapshot cycle: freeze, flatten, drain."""
        self.snapshot()
        self.flatten()
        return self.drain_all()
