"""
Proof layer - certificates, the reduce and flatten programs, and builders.
"""

from .certificate import Certificate, ProofBackend, canonical_claim, claim_to_dict
from .reduce_program import ReduceClaim, init, add, cut_actions
from .flat_program import FlatClaim, flat_init, flat_add, flat_cut_actions
from .builder import (
    ReduceChainBuilder,
    FlatChainBuilder,
    build_reduce_certificate,
    build_flat_certificate,
)
from . import reduce_program, flat_program

REDUCE_PROGRAM = reduce_program.PROGRAM
FLAT_PROGRAM = flat_program.PROGRAM

__all__ = [
    # Certificates
    "Certificate",
    "ProofBackend",
    "canonical_claim",
    "claim_to_dict",
    # Reduce program
    "REDUCE_PROGRAM",
    "ReduceClaim",
    "init",
    "add",
    "cut_actions",
    # Flat program
    "FLAT_PROGRAM",
    "FlatClaim",
    "flat_init",
    "flat_add",
    "flat_cut_actions",
    # Builders
    "ReduceChainBuilder",
    "FlatChainBuilder",
    "build_reduce_certificate",
    "build_flat_certificate",
]
