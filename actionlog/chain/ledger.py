"""
Simulated ledger: an append-only, hash-chained log of action batches.

The ledger is the only party that advances the authenticated head. Readers
either compare against ``head`` or replay batches obtained from
``fetch_actions``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .field import Field, FieldLike, to_field
from .hashing import INITIAL_ACTION_STATE, batch_hash, list_add


logger = logging.getLogger(__name__)


class UnknownActionState(LookupError):
    """Raised when a requested head was never produced by this ledger."""


# =============================================================================
# Batch Records
# =============================================================================

@dataclass(frozen=True)
class ActionBatch:
    """
    One committed batch of actions.

    ``previous_head`` is the head before the batch was folded in and
    ``head`` the head after.
    """
    sequence: int
    previous_head: Field
    head: Field
    actions: tuple
    sub_list_hash: Field

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "previous_head": int(self.previous_head),
            "head": int(self.head),
            "actions": [int(a) for a in self.actions],
            "sub_list_hash": int(self.sub_list_hash),
        }


# =============================================================================
# Ledger
# =============================================================================

class Ledger:
    """Authenticated action log for a single account."""

    def __init__(self, genesis_head: Field = INITIAL_ACTION_STATE):
        self.genesis_head = genesis_head
        self.batches: List[ActionBatch] = []

    @property
    def head(self) -> Field:
        """Current authenticated head."""
        if not self.batches:
            return self.genesis_head
        return self.batches[-1].head

    def get_authenticated_head(self) -> Field:
        return self.head

    @property
    def batch_count(self) -> int:
        return len(self.batches)

    def append_action_batch(self, actions: Sequence[FieldLike]) -> Optional[ActionBatch]:
        """
        Fold a batch into the head.

        An empty batch leaves the head untouched and returns None.
        """
        values = tuple(to_field(a) for a in actions)
        if not values:
            return None

        sub_list_hash = batch_hash(values)
        batch = ActionBatch(
            sequence=len(self.batches),
            previous_head=self.head,
            head=list_add(self.head, sub_list_hash),
            actions=values,
            sub_list_hash=sub_list_hash,
        )
        self.batches.append(batch)
        logger.debug("appended batch %d with %d action(s), head %s",
                     batch.sequence, len(values), batch.head.short())
        return batch

    def _index_after(self, head: Field) -> int:
        """Index of the first batch following ``head``."""
        if head == self.genesis_head:
            return 0
        for i, batch in enumerate(self.batches):
            if batch.head == head:
                return i + 1
        raise UnknownActionState(f"unknown action state {head.short()}")

    def fetch_batches(self, from_head: Field, to_head: Optional[Field] = None) -> List[ActionBatch]:
        start = self._index_after(from_head)
        end = len(self.batches) if to_head is None else self._index_after(to_head)
        if end < start:
            raise UnknownActionState(
                f"action state {to_head.short()} precedes {from_head.short()}"
            )
        return self.batches[start:end]

    def fetch_actions(self, from_head: Field, to_head: Optional[Field] = None) -> List[List[Field]]:
        """Ordered action batches after ``from_head`` up to ``to_head`` (default: head)."""
        return [list(b.actions) for b in self.fetch_batches(from_head, to_head)]

    def contains_head(self, head: Field) -> bool:
        try:
            self._index_after(head)
        except UnknownActionState:
            return False
        return True

    def verify_chain(self) -> bool:
        """Recompute every head from the recorded batches."""
        head = self.genesis_head
        for i, batch in enumerate(self.batches):
            if batch.sequence != i or batch.previous_head != head:
                return False
            if batch.sub_list_hash != batch_hash(batch.actions):
                return False
            head = list_add(head, batch.sub_list_hash)
            if batch.head != head:
                return False
        return True

    def to_segment(self, from_head: Optional[Field] = None) -> List[dict]:
        """Serializable view of the batches after ``from_head`` (default: genesis)."""
        start = 0 if from_head is None else self._index_after(from_head)
        return [b.to_dict() for b in self.batches[start:]]
