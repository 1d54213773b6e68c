"""
Action log chain - field arithmetic, hash-chain scheme and the ledger.

This package provides:
- field: prime-field scalars
- hashing: the salted hash combinators shared with the ledger
- ledger: the append-only authenticated action log
- flat_list: the client-side flattened LIFO list
"""

from .field import Field, MODULUS, to_field
from .hashing import (
    PREFIXES,
    EMPTY_ACTION_LIST_HASH,
    EMPTY_FLAT_LIST_HASH,
    INITIAL_ACTION_STATE,
    action_hash,
    sub_list_add,
    list_add,
    flat_list_add,
    batch_hash,
    hash_with_prefix,
    empty_hash_with_prefix,
)
from .ledger import ActionBatch, Ledger, UnknownActionState
from .flat_list import DUMMY_LINK, FlatActionList, FlatListLink

__all__ = [
    # Field
    "Field",
    "MODULUS",
    "to_field",
    # Hashing
    "PREFIXES",
    "EMPTY_ACTION_LIST_HASH",
    "EMPTY_FLAT_LIST_HASH",
    "INITIAL_ACTION_STATE",
    "action_hash",
    "sub_list_add",
    "list_add",
    "flat_list_add",
    "batch_hash",
    "hash_with_prefix",
    "empty_hash_with_prefix",
    # Ledger
    "ActionBatch",
    "Ledger",
    "UnknownActionState",
    # Flat list
    "DUMMY_LINK",
    "FlatActionList",
    "FlatListLink",
]
