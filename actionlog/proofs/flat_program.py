"""
Flatten engine.

Same init / add / cut shape and head bookkeeping as the reduce program, but
``flat_add`` also pushes each action onto a LIFO list commitment
(``flat_list_state``). The terminal certificate ties that list to the
ledger head, so the list can later be drained one link at a time.
"""

from dataclasses import dataclass, replace

from ..chain.field import Field, FieldLike, to_field
from ..chain.hashing import (
    EMPTY_ACTION_LIST_HASH,
    EMPTY_FLAT_LIST_HASH,
    action_hash,
    flat_list_add,
    list_add,
    sub_list_add,
)
from .certificate import Certificate, ProofBackend


PROGRAM = "flat-program"


@dataclass(frozen=True)
class FlatClaim:
    initial_action_state: Field
    action_sub_list_state: Field
    action_list_state: Field
    flat_list_state: Field


def flat_init(backend: ProofBackend, start_head: Field) -> Certificate:
    return backend.issue(PROGRAM, FlatClaim(
        initial_action_state=start_head,
        action_sub_list_state=EMPTY_ACTION_LIST_HASH,
        action_list_state=start_head,
        flat_list_state=EMPTY_FLAT_LIST_HASH,
    ))


def flat_add(backend: ProofBackend, prev: Certificate, action: FieldLike) -> Certificate:
    claim: FlatClaim = backend.require_valid(prev, PROGRAM)
    action = to_field(action)
    return backend.issue(PROGRAM, replace(
        claim,
        action_sub_list_state=sub_list_add(claim.action_sub_list_state, action_hash(action)),
        flat_list_state=flat_list_add(claim.flat_list_state, action),
    ))


def flat_cut_actions(backend: ProofBackend, prev: Certificate) -> Certificate:
    claim: FlatClaim = backend.require_valid(prev, PROGRAM)
    return backend.issue(PROGRAM, replace(
        claim,
        action_sub_list_state=EMPTY_ACTION_LIST_HASH,
        action_list_state=list_add(claim.action_list_state, claim.action_sub_list_state),
    ))
