"""
The action-reducing contract.

Transitions are plain handler functions listed in ``METHODS`` under their
externally callable names. ``ActionReducerContract`` executes them
atomically: each call works on a private copy of the state, and the copy is
committed (together with any dispatched actions) only if the handler
returns normally.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..chain.field import Field, FieldLike, to_field
from ..chain.flat_list import FlatListLink
from ..chain.hashing import EMPTY_ACTION_LIST_HASH, EMPTY_FLAT_LIST_HASH, flat_list_add
from ..chain.ledger import Ledger
from ..config import ReducerConfig
from ..errors import (
    AlreadyInProgress,
    BatchSizeMismatch,
    DecompositionMismatch,
    InvalidAction,
    PreconditionMismatch,
    ReducerError,
    WorkBudgetExceeded,
)
from ..proofs import FLAT_PROGRAM, REDUCE_PROGRAM, Certificate, ProofBackend
from .state import STATE_SLOTS, ContractState, Phase, initialize


logger = logging.getLogger(__name__)


# =============================================================================
# Transition Context
# =============================================================================

@dataclass
class TransitionContext:
    """What a handler may read and write during one transaction."""
    state: ContractState
    ledger_head: Field
    ledger: Ledger
    backend: ProofBackend
    config: ReducerConfig
    dispatched: List[Field] = field(default_factory=list)

    def dispatch(self, action: Field):
        self.dispatched.append(action)


def require_equals(name: str, actual: Field, expected: Field):
    if actual != expected:
        raise PreconditionMismatch(name, expected, actual)


def require_idle(state: ContractState, method: str):
    if state.phase is not Phase.IDLE:
        raise AlreadyInProgress(f"{method} is not allowed while a drain cycle is in progress")


def finish_drain(state: ContractState):
    """Close the drain cycle: everything up to the frozen snapshot is counted."""
    state.last_processed_action_state = state.snapshot
    state.snapshot = Field.zero()
    state.flatten_snapshot = Field.zero()


# =============================================================================
# Bounded Fold
# =============================================================================

def reduce_bounded_range(ledger: Ledger, from_head: Field, to_head: Field, total: Field,
                         max_batches: int, max_actions_per_batch: int) -> Tuple[Field, Field]:
    """
    Fold every action in ``(from_head, to_head]`` onto ``total``.

    The whole range has to fit one transaction; there is no chunking here.
    """
    batches = ledger.fetch_actions(from_head, to_head)
    if len(batches) > max_batches:
        raise WorkBudgetExceeded(
            f"{len(batches)} pending batch(es) exceed the limit of {max_batches}"
        )
    for batch in batches:
        if len(batch) > max_actions_per_batch:
            raise WorkBudgetExceeded(
                f"batch of {len(batch)} action(s) exceeds the limit of {max_actions_per_batch}"
            )
        for action in batch:
            total = total + action
    return total, to_head


# =============================================================================
# Handlers
# =============================================================================

def submit(ctx: TransitionContext, action: FieldLike):
    action = to_field(action)
    if action.is_zero():
        raise InvalidAction("action must not be zero")
    ctx.dispatch(action)


def reduce_bounded(ctx: TransitionContext):
    state = ctx.state
    require_idle(state, "reduceBounded")
    state.total_sum, state.last_processed_action_state = reduce_bounded_range(
        ctx.ledger,
        state.last_processed_action_state,
        ctx.ledger_head,
        state.total_sum,
        ctx.config.max_bounded_batches,
        ctx.config.max_actions_per_batch,
    )


def custom_reduce(ctx: TransitionContext, certificate: Certificate):
    claim = ctx.backend.require_valid(certificate, REDUCE_PROGRAM)
    state = ctx.state
    require_idle(state, "customReduce")

    require_equals("initial_action_state", claim.initial_action_state,
                   state.last_processed_action_state)
    require_equals("initial_sum", claim.initial_sum, state.total_sum)
    require_equals("action_sub_list_state", claim.action_sub_list_state, EMPTY_ACTION_LIST_HASH)
    require_equals("action_list_state", claim.action_list_state, ctx.ledger_head)

    state.total_sum = claim.total
    state.last_processed_action_state = claim.action_list_state


def create_snapshot(ctx: TransitionContext):
    if not ctx.state.snapshot.is_zero():
        raise AlreadyInProgress("snapshot is already created")
    ctx.state.snapshot = ctx.ledger_head


def flat_snapshot(ctx: TransitionContext, certificate: Certificate):
    state = ctx.state
    if not state.flatten_snapshot.is_zero():
        raise AlreadyInProgress("snapshot is already flattened")

    claim = ctx.backend.require_valid(certificate, FLAT_PROGRAM)

    if state.snapshot.is_zero():
        raise PreconditionMismatch("snapshot", "a frozen snapshot", state.snapshot)
    require_equals("initial_action_state", claim.initial_action_state,
                   state.last_processed_action_state)
    require_equals("action_sub_list_state", claim.action_sub_list_state, EMPTY_ACTION_LIST_HASH)
    require_equals("action_list_state", claim.action_list_state, state.snapshot)

    state.flatten_snapshot = claim.flat_list_state
    if state.flatten_snapshot == EMPTY_FLAT_LIST_HASH:
        # Nothing to drain
        finish_drain(state)


def snapshot_reduce(ctx: TransitionContext, batch: Sequence[FlatListLink]):
    state = ctx.state
    if state.flatten_snapshot.is_zero():
        raise PreconditionMismatch("flatten_snapshot", "a flattened snapshot", state.flatten_snapshot)
    if len(batch) != ctx.config.batch_size:
        raise BatchSizeMismatch(
            f"drain batch has {len(batch)} link(s), expected {ctx.config.batch_size}"
        )

    tail = state.flatten_snapshot
    total = state.total_sum
    for i, link in enumerate(batch):
        if link.is_dummy:
            continue
        if flat_list_add(link.tail, link.action) != tail:
            raise DecompositionMismatch(i)
        tail = link.tail
        total = total + link.action

    state.flatten_snapshot = tail
    state.total_sum = total
    if tail == EMPTY_FLAT_LIST_HASH:
        finish_drain(state)


METHODS: Dict[str, Callable[..., Any]] = {
    "submit": submit,
    "reduceBounded": reduce_bounded,
    "customReduce": custom_reduce,
    "createSnapshot": create_snapshot,
    "flatSnapshot": flat_snapshot,
    "snapshotReduce": snapshot_reduce,
}


# =============================================================================
# Contract
# =============================================================================

class ActionReducerContract:
    """Executes transitions against the committed state of one account."""

    def __init__(self, ledger: Ledger, backend: ProofBackend,
                 config: Optional[ReducerConfig] = None,
                 state: Optional[ContractState] = None):
        self.ledger = ledger
        self.backend = backend
        self.config = config or ReducerConfig()
        self.state = state if state is not None else initialize()

    def read_state(self) -> ContractState:
        """Copy of the committed state, for callers preparing a transaction."""
        return self.state.copy()

    def _check_expected(self, expected: Optional[ContractState]):
        if expected is None:
            return
        for slot in STATE_SLOTS:
            require_equals(slot, getattr(self.state, slot), getattr(expected, slot))

    def call_many(self, calls: Sequence[Tuple[str, tuple]],
                  expected: Optional[ContractState] = None) -> List[Any]:
        """
        Run several method calls as one transaction.

        Actions dispatched by the calls land on the ledger as a single batch.
        """
        handlers = []
        for method, args in calls:
            if method not in METHODS:
                raise ValueError(f"Unknown method: {method}")
            handlers.append((method, METHODS[method], args))

        names = ", ".join(method for method, _, _ in handlers)
        ctx = TransitionContext(
            state=self.state.copy(),
            ledger_head=self.ledger.head,
            ledger=self.ledger,
            backend=self.backend,
            config=self.config,
        )
        results = []
        try:
            self._check_expected(expected)
            for method, handler, args in handlers:
                results.append(handler(ctx, *args))
        except ReducerError as e:
            logger.warning("transaction [%s] rejected: %s: %s", names, type(e).__name__, e)
            raise

        self.state = ctx.state
        if ctx.dispatched:
            self.ledger.append_action_batch(ctx.dispatched)
        logger.info("transaction [%s] committed: total_sum=%d phase=%s",
                    names, int(self.state.total_sum), self.state.phase.name)
        return results

    def call(self, method: str, *args, expected: Optional[ContractState] = None) -> Any:
        return self.call_many([(method, args)], expected=expected)[0]

    # Method surface

    def submit(self, action: FieldLike, expected: Optional[ContractState] = None):
        return self.call("submit", action, expected=expected)

    def reduce_bounded(self, expected: Optional[ContractState] = None):
        return self.call("reduceBounded", expected=expected)

    def custom_reduce(self, certificate: Certificate, expected: Optional[ContractState] = None):
        return self.call("customReduce", certificate, expected=expected)

    def create_snapshot(self, expected: Optional[ContractState] = None):
        return self.call("createSnapshot", expected=expected)

    def flat_snapshot(self, certificate: Certificate, expected: Optional[ContractState] = None):
        return self.call("flatSnapshot", certificate, expected=expected)

    def snapshot_reduce(self, batch: Sequence[FlatListLink],
                        expected: Optional[ContractState] = None):
        return self.call("snapshotReduce", batch, expected=expected)
