"""
Hash-chain scheme shared by the ledger and the reducers.

The ledger folds every action batch into its head with ``sub_list_add`` and
``list_add``; the reducers rebuild the same values off-path, so every
function here must stay bit-identical between the two sides.

Hashes are built like a salted sponge: a prefix string is absorbed into a
zeroed three-lane state, then the inputs are absorbed two at a time.
"""

import hashlib
from types import MappingProxyType
from typing import List, Sequence

from .field import FIELD_SIZE_IN_BYTES, Field, FieldLike, to_field


# =============================================================================
# Sponge
# =============================================================================

STATE_WIDTH = 3
RATE = 2

_PERMUTATION_TAG = b"actionlog/sponge-permutation/v1"


def initial_state() -> List[Field]:
    return [Field.zero() for _ in range(STATE_WIDTH)]


def _permute(state: Sequence[Field]) -> List[Field]:
    """Mix all lanes into each output lane."""
    material = b"".join(lane.to_bytes() for lane in state)
    return [
        Field.from_bytes(hashlib.sha256(_PERMUTATION_TAG + bytes([lane]) + material).digest())
        for lane in range(STATE_WIDTH)
    ]


def update(state: Sequence[Field], inputs: Sequence[FieldLike]) -> List[Field]:
    """Absorb ``inputs`` into a copy of ``state`` and return it."""
    state = list(state)
    values = [to_field(x) for x in inputs]

    # An empty input still runs one permutation
    if not values:
        return _permute(state)

    if len(values) % RATE:
        values.extend([Field.zero()] * (RATE - len(values) % RATE))

    for start in range(0, len(values), RATE):
        for offset in range(RATE):
            state[offset] = state[offset] + values[start + offset]
        state = _permute(state)
    return state


# =============================================================================
# Prefixes
# =============================================================================

def prefix_to_field(prefix: str) -> Field:
    """Encode a prefix as a field element, zero-padded little-endian."""
    data = prefix.encode("utf-8")
    if len(data) >= FIELD_SIZE_IN_BYTES:
        raise ValueError(f"prefix too long: {prefix!r}")
    return Field.from_bytes(data + bytes(FIELD_SIZE_IN_BYTES - len(data)))


def salt(prefix: str) -> List[Field]:
    return update(initial_state(), [prefix_to_field(prefix)])


def hash_with_prefix(prefix: str, inputs: Sequence[FieldLike]) -> Field:
    return update(salt(prefix), inputs)[0]


def empty_hash_with_prefix(prefix: str) -> Field:
    return salt(prefix)[0]


PREFIXES = MappingProxyType({
    "action": "ActionLogEvent******",
    "sub_list": "ActionLogSubList****",
    "list": "ActionLogSeqEvents**",
    "flat_list": "ActionLogFlatList***",
    "empty_action_list": "ActionLogActionsEmpty",
    "empty_flat_list": "ActionLogFlatEmpty",
    "initial_action_state": "ActionLogStateEmptyElt",
})

EMPTY_ACTION_LIST_HASH = empty_hash_with_prefix(PREFIXES["empty_action_list"])
EMPTY_FLAT_LIST_HASH = empty_hash_with_prefix(PREFIXES["empty_flat_list"])
INITIAL_ACTION_STATE = empty_hash_with_prefix(PREFIXES["initial_action_state"])


# =============================================================================
# Combinators
# =============================================================================

def action_hash(action: FieldLike) -> Field:
    return hash_with_prefix(PREFIXES["action"], [action])


def sub_list_add(hash: Field, hashed_action: Field) -> Field:
    """Fold one hashed action into a batch commitment."""
    return hash_with_prefix(PREFIXES["sub_list"], [hash, hashed_action])


def list_add(hash: Field, sub_list_hash: Field) -> Field:
    """Fold a finished batch commitment into the outer head."""
    return hash_with_prefix(PREFIXES["list"], [hash, sub_list_hash])


def flat_list_add(tail: FieldLike, action: FieldLike) -> Field:
    """Push one action onto the flattened LIFO list."""
    return hash_with_prefix(PREFIXES["flat_list"], [tail, action])


def batch_hash(actions: Sequence[FieldLike]) -> Field:
    """Commitment of a single action batch."""
    result = EMPTY_ACTION_LIST_HASH
    for action in actions:
        result = sub_list_add(result, action_hash(action))
    return result
