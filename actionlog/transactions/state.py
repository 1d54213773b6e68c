"""
Persistent contract state: four field slots.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum, auto
from typing import Dict

from ..chain.field import Field
from ..chain.hashing import INITIAL_ACTION_STATE


class Phase(Enum):
    """Drain cycle phase, derived from the two lock fields."""
    IDLE = auto()         # snapshot == 0, flatten_snapshot == 0
    SNAPSHOTTED = auto()  # snapshot frozen, waiting for a flat certificate
    FLATTENED = auto()    # flattened list being drained


@dataclass
class ContractState:
    total_sum: Field
    last_processed_action_state: Field
    snapshot: Field
    flatten_snapshot: Field

    @property
    def phase(self) -> Phase:
        if not self.flatten_snapshot.is_zero():
            return Phase.FLATTENED
        if not self.snapshot.is_zero():
            return Phase.SNAPSHOTTED
        return Phase.IDLE

    def copy(self) -> "ContractState":
        return replace(self)

    def to_dict(self) -> Dict[str, int]:
        return {f.name: int(getattr(self, f.name)) for f in fields(self)}


STATE_SLOTS = tuple(f.name for f in fields(ContractState))


def initialize() -> ContractState:
    """State of a freshly deployed contract."""
    return ContractState(
        total_sum=Field.zero(),
        last_processed_action_state=INITIAL_ACTION_STATE,
        snapshot=Field.zero(),
        flatten_snapshot=Field.zero(),
    )
