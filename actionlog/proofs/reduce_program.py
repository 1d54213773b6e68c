"""
Recursive proof reducer: init -> add* -> cut_actions, repeatable.

Each step takes the previous certificate by value, verifies it and issues a
new one. The terminal certificate claims that folding every action after
``initial_action_state`` onto ``initial_sum`` yields ``total``, and that the
batches replayed lead to ``action_list_state``.
"""

from dataclasses import dataclass, replace

from ..chain.field import Field, FieldLike, to_field
from ..chain.hashing import EMPTY_ACTION_LIST_HASH, action_hash, list_add, sub_list_add
from .certificate import Certificate, ProofBackend


PROGRAM = "reduce-program"


@dataclass(frozen=True)
class ReduceClaim:
    total: Field
    initial_sum: Field
    initial_action_state: Field
    action_sub_list_state: Field
    action_list_state: Field


def init(backend: ProofBackend, start_sum: FieldLike, start_head: Field) -> Certificate:
    start_sum = to_field(start_sum)
    return backend.issue(PROGRAM, ReduceClaim(
        total=start_sum,
        initial_sum=start_sum,
        initial_action_state=start_head,
        action_sub_list_state=EMPTY_ACTION_LIST_HASH,
        action_list_state=start_head,
    ))


def add(backend: ProofBackend, prev: Certificate, action: FieldLike) -> Certificate:
    """Fold one action into the running total and the pending batch."""
    claim: ReduceClaim = backend.require_valid(prev, PROGRAM)
    action = to_field(action)
    return backend.issue(PROGRAM, replace(
        claim,
        total=claim.total + action,
        action_sub_list_state=sub_list_add(claim.action_sub_list_state, action_hash(action)),
    ))


def cut_actions(backend: ProofBackend, prev: Certificate) -> Certificate:
    """Close the pending batch, folding it into the outer head."""
    claim: ReduceClaim = backend.require_valid(prev, PROGRAM)
    return backend.issue(PROGRAM, replace(
        claim,
        action_sub_list_state=EMPTY_ACTION_LIST_HASH,
        action_list_state=list_add(claim.action_list_state, claim.action_sub_list_state),
    ))
