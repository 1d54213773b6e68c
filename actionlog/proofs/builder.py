"""
Off-path certificate builders.

A builder replays ledger batches through one of the proof programs, keeping
only the latest certificate. Batch boundaries must match the ledger's
exactly, otherwise the terminal ``action_list_state`` will not equal the
real head. A builder can be resumed from a certificate handed over by
another worker, as long as each step consumes the immediately preceding one.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple

from ..chain.field import Field, FieldLike
from ..chain.flat_list import FlatActionList
from ..chain.ledger import Ledger
from . import flat_program, reduce_program
from .certificate import Certificate, ProofBackend


logger = logging.getLogger(__name__)


class ReduceChainBuilder:
    """Extends a reduce-program certificate chain batch by batch."""

    def __init__(self, backend: ProofBackend, certificate: Certificate):
        self.backend = backend
        self.certificate = certificate
        self.actions_added = 0
        self.batches_added = 0

    @classmethod
    def start(cls, backend: ProofBackend, start_sum: FieldLike, start_head: Field) -> "ReduceChainBuilder":
        return cls(backend, reduce_program.init(backend, start_sum, start_head))

    def add_batch(self, actions: Sequence[FieldLike]) -> Certificate:
        for action in actions:
            self.certificate = reduce_program.add(self.backend, self.certificate, action)
            self.actions_added += 1
        self.certificate = reduce_program.cut_actions(self.backend, self.certificate)
        self.batches_added += 1
        return self.certificate

    def add_batches(self, batches: Iterable[Sequence[FieldLike]]) -> Certificate:
        for batch in batches:
            self.add_batch(batch)
        return self.certificate


class FlatChainBuilder:
    """Extends a flat-program chain and mirrors it in a FlatActionList."""

    def __init__(self, backend: ProofBackend, certificate: Certificate,
                 flat_list: Optional[FlatActionList] = None):
        self.backend = backend
        self.certificate = certificate
        self.flat_list = flat_list if flat_list is not None else FlatActionList()

    @classmethod
    def start(cls, backend: ProofBackend, start_head: Field) -> "FlatChainBuilder":
        return cls(backend, flat_program.flat_init(backend, start_head))

    def add_batch(self, actions: Sequence[FieldLike]) -> Certificate:
        for action in actions:
            self.certificate = flat_program.flat_add(self.backend, self.certificate, action)
            self.flat_list.push(action)
        self.certificate = flat_program.flat_cut_actions(self.backend, self.certificate)
        return self.certificate

    def add_batches(self, batches: Iterable[Sequence[FieldLike]]) -> Certificate:
        for batch in batches:
            self.add_batch(batch)
        return self.certificate


def build_reduce_certificate(ledger: Ledger, backend: ProofBackend,
                             total_sum: FieldLike, from_head: Field) -> Certificate:
    """Certificate covering every batch after ``from_head`` up to the ledger head."""
    batches = ledger.fetch_actions(from_head)
    builder = ReduceChainBuilder.start(backend, total_sum, from_head)
    builder.add_batches(batches)
    logger.debug("built reduce certificate over %d batch(es), %d action(s)",
                 builder.batches_added, builder.actions_added)
    return builder.certificate


def build_flat_certificate(ledger: Ledger, backend: ProofBackend, from_head: Field,
                           to_head: Field) -> Tuple[Certificate, FlatActionList]:
    """Flatten the batches between two heads; also return the drainable list."""
    batches = ledger.fetch_actions(from_head, to_head)
    builder = FlatChainBuilder.start(backend, from_head)
    builder.add_batches(batches)
    logger.debug("built flat certificate over %d batch(es), %d action(s)",
                 len(batches), len(builder.flat_list))
    return builder.certificate, builder.flat_list
